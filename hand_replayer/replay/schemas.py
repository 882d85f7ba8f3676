"""Immutable replay structures handed to the rendering layer.

A ``Snapshot`` is the full table state after one event. Mapping fields are
read-only proxies and collections are tuples or frozensets, so consumers
cannot mutate a snapshot after it is built.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple

from ..parse.schemas import HandHistory
from ..settle.side_pots import Pot

_MAPPINGS = ("stacks", "committed", "pending", "all_in", "revealed")


def _freeze(mapping: Optional[Mapping]) -> Optional[Mapping]:
    if mapping is None:
        return None
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class Snapshot:
    """Table state after one action, street transition or the showdown."""

    sequence_id: int
    street: str
    description: str
    pots: Tuple[Pot, ...]
    stacks: Mapping[str, int]
    committed: Mapping[str, int]
    pending: Mapping[str, int]
    folded: FrozenSet[str]
    all_in: Mapping[str, bool]
    revealed: Mapping[str, Tuple[str, ...]]
    board: Tuple[str, ...] = ()
    actor: Optional[str] = None
    action: Optional[str] = None
    rake_applied: int = 0
    payouts: Optional[Mapping[str, int]] = None
    final_stacks: Optional[Mapping[str, int]] = None

    def __post_init__(self):
        for name in _MAPPINGS:
            object.__setattr__(self, name, _freeze(getattr(self, name)))
        object.__setattr__(self, "pots", tuple(self.pots))
        object.__setattr__(self, "folded", frozenset(self.folded))
        object.__setattr__(self, "board", tuple(self.board))
        object.__setattr__(self, "payouts", _freeze(self.payouts))
        object.__setattr__(self, "final_stacks", _freeze(self.final_stacks))

    @property
    def total_pot(self) -> int:
        return sum(p.amount for p in self.pots)

    @property
    def is_showdown(self) -> bool:
        return self.payouts is not None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "sequence_id": self.sequence_id,
            "street": self.street,
            "description": self.description,
            "actor": self.actor,
            "action": self.action,
            "board": list(self.board),
            "pots": [p.to_dict() for p in self.pots],
            "stacks": dict(sorted(self.stacks.items())),
            "committed": dict(sorted(self.committed.items())),
            "pending": dict(sorted(self.pending.items())),
            "folded": sorted(self.folded),
            "all_in": dict(sorted(self.all_in.items())),
            "revealed": {k: list(v) for k, v in sorted(self.revealed.items())},
            "rake_applied": self.rake_applied,
        }
        if self.payouts is not None:
            payload["payouts"] = dict(sorted(self.payouts.items()))
        if self.final_stacks is not None:
            payload["final_stacks"] = dict(sorted(self.final_stacks.items()))
        return payload


@dataclass(frozen=True)
class Replay:
    """Parsed hand plus the snapshot sequence built from it."""

    hand: HandHistory
    snapshots: Tuple[Snapshot, ...]
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def final(self) -> Snapshot:
        return self.snapshots[-1]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hand": self.hand.model_dump(mode="json"),
            "snapshots": [s.to_dict() for s in self.snapshots],
            "warnings": list(self.warnings),
        }
