from supabase import Client
from postgrest.exceptions import APIError
from questboard.modules.combat import machine
from questboard.modules.combat.machine import CombatSnapshot
from questboard.modules.combat.models import COMBAT_STATE_TABLE
from questboard.modules.combat.schemas import CombatStateResponse, Enemy
from questboard.config.settings import settings
from questboard.core.authorization import Authorizer
from questboard.core.guard import ResourceGuard
from questboard.core.events import ChangeFeed, change_feed
from questboard.core.errors import ConflictError
from typing import Callable, List, Optional
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

# Postgres error code for a unique constraint violation
UNIQUE_VIOLATION = "23505"

Transition = Callable[[Optional[CombatSnapshot]], CombatSnapshot]


class CombatService:
    def __init__(self, supabase: Client, guard: Optional[ResourceGuard] = None, feed: Optional[ChangeFeed] = None):
        self.supabase = supabase
        self.guard = guard or ResourceGuard(Authorizer(supabase))
        self.feed = feed or change_feed

    def _load(self, campaign_id: str) -> Optional[dict]:
        result = self.supabase.table(COMBAT_STATE_TABLE)\
            .select("*")\
            .eq("campaign_id", campaign_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def _to_response(self, campaign_id: str, row: Optional[dict]) -> CombatStateResponse:
        snapshot = CombatSnapshot.from_row(row) if row else CombatSnapshot()
        return CombatStateResponse(
            id=row.get("id") if row else None,
            campaign_id=campaign_id,
            current_combatant=snapshot.current_combatant,
            updated_at=row.get("updated_at") if row else None,
            **snapshot.to_row()
        )

    def _save(self, campaign_id: str, row: Optional[dict], new: CombatSnapshot) -> Optional[dict]:
        """Write new state if nobody changed it since row was read. None means the write lost a race."""
        payload = new.to_row()
        payload["updated_at"] = datetime.now(timezone.utc).isoformat()

        if row is None:
            try:
                result = self.supabase.table(COMBAT_STATE_TABLE).insert({
                    "campaign_id": campaign_id,
                    "version": 1,
                    **payload
                }).execute()
            except APIError as e:
                if e.code != UNIQUE_VIOLATION:
                    raise
                # Unique campaign_id: another writer created the row first
                logger.warning(f"Combat state insert for campaign {campaign_id} lost to a concurrent start")
                return None
            return result.data[0] if result.data else None

        previous = CombatSnapshot.from_row(row)
        version = row.get("version") or 0
        payload["version"] = version + 1
        result = self.supabase.table(COMBAT_STATE_TABLE)\
            .update(payload)\
            .eq("id", row["id"])\
            .eq("version", version)\
            .eq("is_active", previous.is_active)\
            .eq("round_number", previous.round_number)\
            .eq("current_turn_index", previous.current_turn_index)\
            .execute()
        return result.data[0] if result.data else None

    def _transition(self, campaign_id: str, principal: str, action: str, apply: Transition) -> CombatStateResponse:
        with self.guard.campaign_lock(principal, campaign_id):
            for attempt in range(settings.combat_update_retries + 1):
                row = self._load(campaign_id)
                self.guard.check(principal, "combat_state", "update" if row else "create", campaign_id)
                new = apply(CombatSnapshot.from_row(row) if row else None)

                saved = self._save(campaign_id, row, new)
                if saved is not None:
                    logger.info(
                        f"Combat {action} in campaign {campaign_id}: "
                        f"round {new.round_number}, turn {new.current_turn_index}, active={new.is_active}"
                    )
                    self.feed.emit("combat_state", campaign_id, saved)
                    return self._to_response(campaign_id, saved)

                logger.warning(f"Combat state for campaign {campaign_id} changed concurrently (attempt {attempt + 1})")

        raise ConflictError("Combat state changed concurrently; please retry")

    def get_state(self, campaign_id: str, principal: str) -> CombatStateResponse:
        """Current combat state; an Idle default before the first combat"""
        self.guard.check(principal, "combat_state", "read", campaign_id)
        return self._to_response(campaign_id, self._load(campaign_id))

    def start_combat(
        self,
        campaign_id: str,
        initiative_order: List[str],
        principal: str,
        enemies: Optional[List[Enemy]] = None
    ) -> CombatStateResponse:
        roster = [enemy.model_dump() for enemy in (enemies or [])]
        return self._transition(
            campaign_id, principal, "start",
            lambda current: machine.start_combat(current, initiative_order, roster)
        )

    def advance_turn(self, campaign_id: str, principal: str) -> CombatStateResponse:
        return self._transition(campaign_id, principal, "advance", machine.advance_turn)

    def end_combat(self, campaign_id: str, principal: str) -> CombatStateResponse:
        return self._transition(campaign_id, principal, "end", machine.end_combat)

    def update_enemies(self, campaign_id: str, enemies: List[Enemy], principal: str) -> CombatStateResponse:
        roster = [enemy.model_dump() for enemy in enemies]
        return self._transition(
            campaign_id, principal, "enemy update",
            lambda current: machine.update_enemies(current, roster)
        )
