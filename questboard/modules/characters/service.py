from supabase import Client
from questboard.modules.characters.schemas import CharacterCreate, CharacterUpdate, CharacterResponse
from questboard.modules.characters.models import CHARACTERS_TABLE
from questboard.core.authorization import Authorizer
from questboard.core.guard import ResourceGuard
from questboard.core.events import ChangeFeed, change_feed
from questboard.core.errors import ConflictError, InvalidInputError, NotFoundError
from typing import List, Optional
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


def validate_vitals(character: dict) -> None:
    """hp must stay within 0..max_hp after any change"""
    hp = character.get("hp", 0)
    max_hp = character.get("max_hp", 0)
    if hp < 0:
        raise InvalidInputError("hp cannot be negative")
    if max_hp < 1:
        raise InvalidInputError("max_hp must be at least 1")
    if hp > max_hp:
        raise InvalidInputError("hp cannot exceed max_hp")


class CharacterService:
    def __init__(self, supabase: Client, guard: Optional[ResourceGuard] = None, feed: Optional[ChangeFeed] = None):
        self.supabase = supabase
        self.guard = guard or ResourceGuard(Authorizer(supabase))
        self.feed = feed or change_feed

    def _fetch(self, campaign_id: str, character_id: str) -> dict:
        result = self.supabase.table(CHARACTERS_TABLE)\
            .select("*")\
            .eq("id", character_id)\
            .eq("campaign_id", campaign_id)\
            .limit(1)\
            .execute()
        if not result.data:
            raise NotFoundError("Character not found")
        return result.data[0]

    def create_character(self, campaign_id: str, character_data: CharacterCreate, principal: str) -> CharacterResponse:
        """Create a character owned by the caller in a campaign they belong to"""
        insert_data = character_data.model_dump(by_alias=True)
        validate_vitals(insert_data)

        with self.guard.campaign_lock(principal, campaign_id):
            self.guard.check(principal, "characters", "create", campaign_id, row_user_id=principal)

            now = datetime.now(timezone.utc).isoformat()
            insert_data.update({
                "campaign_id": campaign_id,
                "user_id": principal,
                "is_active": True,
                "created_at": now,
                "updated_at": now
            })
            result = self.supabase.table(CHARACTERS_TABLE).insert(insert_data).execute()

            if not result.data:
                raise ConflictError("Failed to create character")

            character = result.data[0]
            logger.info(f"Character {character['id']} created in campaign {campaign_id} by {principal}")
            self.feed.emit("characters", campaign_id, character, action="insert")
            return CharacterResponse(**character)

    def list_characters(self, campaign_id: str, principal: str) -> List[CharacterResponse]:
        """List characters of a campaign (members and owner only)"""
        self.guard.check(principal, "characters", "read", campaign_id)
        result = self.supabase.table(CHARACTERS_TABLE)\
            .select("*")\
            .eq("campaign_id", campaign_id)\
            .order("created_at")\
            .execute()
        return [CharacterResponse(**character) for character in (result.data or [])]

    def get_character(self, campaign_id: str, character_id: str, principal: str) -> CharacterResponse:
        self.guard.check(principal, "characters", "read", campaign_id)
        return CharacterResponse(**self._fetch(campaign_id, character_id))

    def update_character(
        self,
        campaign_id: str,
        character_id: str,
        character_data: CharacterUpdate,
        principal: str
    ) -> CharacterResponse:
        """Update gameplay fields (owning player only)"""
        with self.guard.campaign_lock(principal, campaign_id):
            # Membership first, so non-members cannot probe which character ids exist
            self.guard.check(principal, "characters", "read", campaign_id)
            character = self._fetch(campaign_id, character_id)
            self.guard.check(principal, "characters", "update", campaign_id, row_user_id=character["user_id"])

            update_data = character_data.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
            if not update_data:
                return CharacterResponse(**character)
            validate_vitals({**character, **update_data})

            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
            result = self.supabase.table(CHARACTERS_TABLE)\
                .update(update_data)\
                .eq("id", character_id)\
                .eq("campaign_id", campaign_id)\
                .eq("user_id", principal)\
                .execute()

            if not result.data:
                raise NotFoundError("Character not found")

            updated = result.data[0]
            self.feed.emit("characters", campaign_id, updated)
            return CharacterResponse(**updated)

    def delete_character(self, campaign_id: str, character_id: str, principal: str) -> bool:
        """Delete character (owning player only)"""
        with self.guard.campaign_lock(principal, campaign_id):
            self.guard.check(principal, "characters", "read", campaign_id)
            character = self._fetch(campaign_id, character_id)
            self.guard.check(principal, "characters", "delete", campaign_id, row_user_id=character["user_id"])

            result = self.supabase.table(CHARACTERS_TABLE)\
                .delete()\
                .eq("id", character_id)\
                .eq("campaign_id", campaign_id)\
                .eq("user_id", principal)\
                .execute()

            logger.info(f"Character {character_id} deleted from campaign {campaign_id}")
            self.feed.emit("characters", campaign_id, {"id": character_id}, action="delete")
            return len(result.data or []) > 0
