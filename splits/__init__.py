"""Orienteering results model and split-time statistics."""
