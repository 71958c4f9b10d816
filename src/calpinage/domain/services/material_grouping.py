"""Partition a piece list into independent material groups."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from calpinage.domain.value_objects import MaterialTag, Piece


def group_key(thickness: float, finish: str) -> str:
    """Build the ``thickness|finish`` key identifying a material group.

    Integral thicknesses print without a decimal part (``19|BLANC``); any
    other value keeps its full ``repr`` so distinct thicknesses never
    share a key.
    """
    value = float(thickness)
    text = str(int(value)) if value.is_integer() else repr(value)
    return f"{text}|{finish}"


@dataclass
class MaterialGroup:
    """All pieces sharing one thickness and finish.

    Each group is packed on its own panels; groups never share panels
    or pieces.
    """

    key: str
    thickness: float
    finish: str
    pieces: list[Piece] = field(default_factory=list)

    @property
    def tag(self) -> MaterialTag:
        return MaterialTag(thickness=self.thickness, finish=self.finish, label=self.key)


def group_pieces(pieces: Sequence[Piece]) -> dict[str, MaterialGroup]:
    """Group pieces by exact ``(thickness, finish)`` pair.

    Groups appear in order of first occurrence and keep the input order
    of their pieces.

    Args:
        pieces: Expanded piece list.

    Returns:
        Mapping of group key to MaterialGroup.
    """
    groups: dict[str, MaterialGroup] = {}
    for piece in pieces:
        key = group_key(piece.thickness, piece.finish)
        if key not in groups:
            groups[key] = MaterialGroup(
                key=key, thickness=piece.thickness, finish=piece.finish
            )
        groups[key].pieces.append(piece)
    return groups
