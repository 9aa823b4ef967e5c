from supabase import Client
from questboard.modules.campaigns.schemas import (
    CampaignCreate, CampaignUpdate, CampaignResponse, InviteResolution
)
from questboard.modules.campaigns.models import CAMPAIGNS_TABLE
from questboard.modules.members.models import MEMBERS_TABLE
from questboard.modules.characters.models import CHARACTERS_TABLE
from questboard.modules.combat.models import COMBAT_STATE_TABLE
from questboard.config.settings import settings
from questboard.core.authorization import Authorizer
from questboard.core.guard import ResourceGuard
from questboard.core.events import ChangeFeed, change_feed
from questboard.core.errors import ConflictError, NotFoundError, campaign_not_found
from questboard.core import locks
from typing import List, Optional
from datetime import datetime, timezone
import secrets
import logging

logger = logging.getLogger(__name__)

# Child tables removed before the campaign row itself
CASCADE_TABLES = (COMBAT_STATE_TABLE, CHARACTERS_TABLE, MEMBERS_TABLE)

_INVITE_CODE_ATTEMPTS = 5

# Fields a client may explicitly clear with null
NULLABLE_FIELDS = ("description",)


def generate_invite_code(length: Optional[int] = None) -> str:
    length = length or settings.invite_code_length
    return secrets.token_hex((length + 1) // 2)[:length]


class CampaignService:
    def __init__(self, supabase: Client, guard: Optional[ResourceGuard] = None, feed: Optional[ChangeFeed] = None):
        self.supabase = supabase
        self.guard = guard or ResourceGuard(Authorizer(supabase))
        self.feed = feed or change_feed

    def _fetch(self, campaign_id: str) -> Optional[dict]:
        result = self.supabase.table(CAMPAIGNS_TABLE)\
            .select("*")\
            .eq("id", campaign_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def _invite_code_taken(self, code: str, exclude_id: Optional[str] = None) -> bool:
        result = self.supabase.table(CAMPAIGNS_TABLE)\
            .select("id")\
            .eq("invite_code", code)\
            .eq("is_active", True)\
            .execute()
        return any(row["id"] != exclude_id for row in (result.data or []))

    def _new_invite_code(self, exclude_id: Optional[str] = None) -> str:
        for _ in range(_INVITE_CODE_ATTEMPTS):
            code = generate_invite_code()
            if not self._invite_code_taken(code, exclude_id):
                return code
        raise ConflictError("Could not allocate a unique invite code")

    def create_campaign(self, campaign_data: CampaignCreate, principal: str) -> CampaignResponse:
        """Create a campaign owned by principal. The owner also joins as DM."""
        self.guard.check(principal, "campaigns", "create", row_user_id=principal)
        now = datetime.now(timezone.utc).isoformat()

        result = self.supabase.table(CAMPAIGNS_TABLE).insert({
            "name": campaign_data.name,
            "description": campaign_data.description,
            "invite_code": self._new_invite_code(),
            "owner_id": principal,
            "current_scene": campaign_data.current_scene or settings.default_scene,
            "game_state": campaign_data.game_state or {},
            "is_active": True,
            "created_at": now,
            "updated_at": now
        }).execute()

        if not result.data:
            raise ConflictError("Failed to create campaign")
        campaign = result.data[0]

        try:
            member_result = self.supabase.table(MEMBERS_TABLE).insert({
                "campaign_id": campaign["id"],
                "user_id": principal,
                "is_dm": True,
                "joined_at": now
            }).execute()
            if not member_result.data:
                raise ConflictError("Failed to add owner to campaign")
        except Exception as e:
            logger.error(f"Failed to add owner to campaign {campaign['id']}, removing it: {e}")
            self.supabase.table(CAMPAIGNS_TABLE)\
                .delete()\
                .eq("id", campaign["id"])\
                .execute()
            raise

        logger.info(f"Campaign {campaign['id']} created by {principal}")
        self.feed.emit("campaigns", campaign["id"], campaign, action="insert")
        self.feed.emit("campaign_members", campaign["id"], member_result.data[0], action="insert")
        return CampaignResponse(**campaign)

    def get_campaign(self, campaign_id: str, principal: str) -> CampaignResponse:
        """Get campaign by ID (members and owner only)"""
        self.guard.check(principal, "campaigns", "read", campaign_id)
        campaign = self._fetch(campaign_id)
        if not campaign:
            raise campaign_not_found()
        return CampaignResponse(**campaign)

    def list_campaigns(self, principal: str, limit: int = 50, offset: int = 0) -> List[CampaignResponse]:
        """Campaigns principal owns or is a member of, newest first"""
        members_result = self.supabase.table(MEMBERS_TABLE)\
            .select("campaign_id")\
            .eq("user_id", principal)\
            .execute()
        campaign_ids = {m["campaign_id"] for m in (members_result.data or [])}

        owned_result = self.supabase.table(CAMPAIGNS_TABLE)\
            .select("id")\
            .eq("owner_id", principal)\
            .execute()
        campaign_ids.update(c["id"] for c in (owned_result.data or []))

        if not campaign_ids:
            return []

        result = self.supabase.table(CAMPAIGNS_TABLE)\
            .select("*")\
            .in_("id", sorted(campaign_ids))\
            .order("created_at", desc=True)\
            .limit(limit)\
            .offset(offset)\
            .execute()
        return [CampaignResponse(**campaign) for campaign in (result.data or [])]

    def update_campaign(self, campaign_id: str, campaign_data: CampaignUpdate, principal: str) -> CampaignResponse:
        """Update campaign (owner only)"""
        with self.guard.campaign_lock(principal, campaign_id):
            self.guard.check(principal, "campaigns", "update", campaign_id)
            campaign = self._fetch(campaign_id)
            if not campaign:
                raise campaign_not_found()

            update_data = {
                key: value for key, value in campaign_data.model_dump(exclude_unset=True).items()
                if value is not None or key in NULLABLE_FIELDS
            }
            if not update_data:
                return CampaignResponse(**campaign)

            # Reactivating must keep invite codes unique among active campaigns
            if update_data.get("is_active") and not campaign["is_active"]:
                if self._invite_code_taken(campaign["invite_code"], exclude_id=campaign_id):
                    update_data["invite_code"] = self._new_invite_code(exclude_id=campaign_id)

            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()
            result = self.supabase.table(CAMPAIGNS_TABLE)\
                .update(update_data)\
                .eq("id", campaign_id)\
                .execute()

            if not result.data:
                raise campaign_not_found()

            updated = result.data[0]
            self.feed.emit("campaigns", campaign_id, updated)
            return CampaignResponse(**updated)

    def delete_campaign(self, campaign_id: str, principal: str) -> bool:
        """Delete campaign and everything scoped to it (owner only)"""
        with self.guard.campaign_lock(principal, campaign_id):
            self.guard.check(principal, "campaigns", "delete", campaign_id)

            for table in CASCADE_TABLES:
                self.supabase.table(table)\
                    .delete()\
                    .eq("campaign_id", campaign_id)\
                    .execute()

            result = self.supabase.table(CAMPAIGNS_TABLE)\
                .delete()\
                .eq("id", campaign_id)\
                .execute()

            logger.info(f"Campaign {campaign_id} deleted by {principal}")
            self.feed.emit("campaigns", campaign_id, {"id": campaign_id}, action="delete")
        locks.discard(campaign_id)
        return len(result.data or []) > 0

    def resolve_invite_code(self, invite_code: str) -> InviteResolution:
        """Find an active campaign by invite code"""
        result = self.supabase.table(CAMPAIGNS_TABLE)\
            .select("id, name, owner_id")\
            .eq("invite_code", invite_code)\
            .eq("is_active", True)\
            .limit(1)\
            .execute()

        if not result.data:
            raise NotFoundError("Invite code not found")

        row = result.data[0]
        return InviteResolution(campaign_id=row["id"], name=row["name"], owner_id=row["owner_id"])
