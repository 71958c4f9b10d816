"""Domain services."""

from .material_grouping import MaterialGroup, group_key, group_pieces

__all__ = ["MaterialGroup", "group_key", "group_pieces"]
