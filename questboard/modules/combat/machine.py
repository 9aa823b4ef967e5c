"""
Combat turn-state machine.

Idle (is_active=False) and Active (is_active=True, round >= 1). Every
transition takes the current snapshot (None before the first combat) and
returns a new one, or raises ConflictError when the transition is illegal from
the current state. Snapshots are never mutated in place.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from questboard.core.errors import ConflictError, InvalidInputError


@dataclass(frozen=True)
class CombatSnapshot:
    is_active: bool = False
    round_number: int = 1
    current_turn_index: int = 0
    initiative_order: List[str] = field(default_factory=list)
    enemies: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "CombatSnapshot":
        return cls(
            is_active=bool(row.get("is_active")),
            round_number=row.get("round_number") or 1,
            current_turn_index=row.get("current_turn_index") or 0,
            initiative_order=list(row.get("initiative_order") or []),
            enemies=list(row.get("enemies") or []),
        )

    def to_row(self) -> Dict[str, Any]:
        return {
            "is_active": self.is_active,
            "round_number": self.round_number,
            "current_turn_index": self.current_turn_index,
            "initiative_order": list(self.initiative_order),
            "enemies": list(self.enemies),
        }

    @property
    def current_combatant(self) -> Optional[str]:
        if not self.is_active or not self.initiative_order:
            return None
        return self.initiative_order[self.current_turn_index % len(self.initiative_order)]


def _require_active(snapshot: Optional[CombatSnapshot], action: str) -> CombatSnapshot:
    if snapshot is None or not snapshot.is_active:
        raise ConflictError(f"Cannot {action}: no combat in progress")
    return snapshot


def start_combat(
    snapshot: Optional[CombatSnapshot],
    initiative_order: List[str],
    enemies: Optional[List[Dict[str, Any]]] = None,
) -> CombatSnapshot:
    """Legal from Idle and Active. A restart replaces the roster and resets counters."""
    if not initiative_order:
        raise InvalidInputError("initiative_order must name at least one combatant")
    if len(set(initiative_order)) != len(initiative_order):
        raise InvalidInputError("initiative_order contains duplicate combatants")
    return CombatSnapshot(
        is_active=True,
        round_number=1,
        current_turn_index=0,
        initiative_order=list(initiative_order),
        enemies=list(enemies or []),
    )


def advance_turn(snapshot: Optional[CombatSnapshot]) -> CombatSnapshot:
    """Move to the next combatant; wrapping past the last one starts a new round."""
    current = _require_active(snapshot, "advance turn")
    next_index = current.current_turn_index + 1
    if next_index > len(current.initiative_order) - 1:
        return replace(current, current_turn_index=0, round_number=current.round_number + 1)
    return replace(current, current_turn_index=next_index)


def end_combat(snapshot: Optional[CombatSnapshot]) -> CombatSnapshot:
    """Go Idle. Round and turn stay as a record of where combat stopped."""
    current = _require_active(snapshot, "end combat")
    return replace(current, is_active=False)


def update_enemies(snapshot: Optional[CombatSnapshot], enemies: List[Dict[str, Any]]) -> CombatSnapshot:
    current = _require_active(snapshot, "update enemies")
    return replace(current, enemies=list(enemies))
