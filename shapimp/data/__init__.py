"""Data transformation primitives."""

from .replacement import cartesian, OBS_ID, REPLACE_ID

__all__ = ["cartesian", "OBS_ID", "REPLACE_ID"]
