"""Controls common to every team on one leg of a relay."""

from collections import Counter

from splits.errors import InvalidData


def determine_common_controls(leg_controls_lists: list[list[str]], leg_description: str = "leg") -> list[str]:
    """Determine the controls that every team visited on one leg of a relay.

    Teams on a relay often run different variations of each leg. The common
    controls are those visited by all of them, and they must have been
    visited in the same order by every team.

    Args:
        leg_controls_lists: For each team, the control codes on this leg
        leg_description: Description of the leg, for use in error messages

    Returns:
        The common controls, in the order they were visited.

    Raises:
        InvalidData: If no lists are given, a common control is visited
            more than once, or the common controls are visited in different
            orders.
    """
    if not leg_controls_lists:
        raise InvalidData("Cannot determine the list of common controls of an empty array")

    control_counts: Counter[str] = Counter()
    for leg_controls in leg_controls_lists:
        control_counts.update(set(leg_controls))

    team_count = len(leg_controls_lists)

    def is_common(control: str) -> bool:
        return control_counts[control] == team_count

    common_controls = [control for control in leg_controls_lists[0] if is_common(control)]

    for leg_controls in leg_controls_lists:
        team_common_controls = [control for control in leg_controls if is_common(control)]

        seen = set()
        for control in team_common_controls:
            if control in seen:
                raise InvalidData(
                    f"Cannot determine common controls because {leg_description} "
                    f"contains duplicated control {control}"
                )
            seen.add(control)

        if len(team_common_controls) != len(common_controls):
            raise InvalidData("Unexpectedly didn't get the same number of common controls for all competitors")

        for expected, actual in zip(common_controls, team_common_controls):
            if expected != actual:
                raise InvalidData(f"Inconsistent ordering for control {expected} in {leg_description}")

    return common_controls
