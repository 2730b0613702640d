"""Mapping from aggregate snapshots to wire DTOs."""
