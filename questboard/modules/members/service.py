from supabase import Client
from questboard.modules.members.schemas import MembershipResponse
from questboard.modules.members.models import MEMBERS_TABLE
from questboard.modules.campaigns.models import CAMPAIGNS_TABLE
from questboard.core.authorization import Authorizer
from questboard.core.guard import ResourceGuard
from questboard.core.events import ChangeFeed, change_feed
from questboard.core.errors import ConflictError, NotFoundError
from questboard.core import locks
from typing import List, Optional
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


class MembershipService:
    def __init__(self, supabase: Client, guard: Optional[ResourceGuard] = None, feed: Optional[ChangeFeed] = None):
        self.supabase = supabase
        self.guard = guard or ResourceGuard(Authorizer(supabase))
        self.feed = feed or change_feed

    def _active_campaign_for_code(self, invite_code: str) -> Optional[dict]:
        result = self.supabase.table(CAMPAIGNS_TABLE)\
            .select("id, is_active")\
            .eq("invite_code", invite_code)\
            .eq("is_active", True)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def _find(self, campaign_id: str, user_id: str) -> Optional[dict]:
        result = self.supabase.table(MEMBERS_TABLE)\
            .select("*")\
            .eq("campaign_id", campaign_id)\
            .eq("user_id", user_id)\
            .limit(1)\
            .execute()
        return result.data[0] if result.data else None

    def join(self, invite_code: str, principal: str) -> MembershipResponse:
        """Join the active campaign behind invite_code as a regular (non-DM) member"""
        campaign = self._active_campaign_for_code(invite_code)
        if not campaign:
            raise NotFoundError("Invite code not found")
        campaign_id = campaign["id"]

        with locks.campaign_lock(campaign_id):
            self.guard.check(principal, "campaign_members", "create", campaign_id, row_user_id=principal)

            # Re-resolve under the lock: the campaign may have been deactivated or deleted meanwhile
            campaign = self._active_campaign_for_code(invite_code)
            if not campaign or campaign["id"] != campaign_id:
                raise NotFoundError("Invite code not found")

            if self._find(campaign_id, principal):
                raise ConflictError("Already a member of this campaign")

            result = self.supabase.table(MEMBERS_TABLE).insert({
                "campaign_id": campaign_id,
                "user_id": principal,
                "is_dm": False,
                "joined_at": datetime.now(timezone.utc).isoformat()
            }).execute()

            if not result.data:
                raise ConflictError("Failed to join campaign")

            membership = result.data[0]
            logger.info(f"User {principal} joined campaign {campaign_id}")
            self.feed.emit("campaign_members", campaign_id, membership, action="insert")
            return MembershipResponse(**membership)

    def list_members(self, campaign_id: str, principal: str) -> List[MembershipResponse]:
        """List all members of a campaign (members and owner only)"""
        self.guard.check(principal, "campaign_members", "read", campaign_id)
        result = self.supabase.table(MEMBERS_TABLE)\
            .select("*")\
            .eq("campaign_id", campaign_id)\
            .order("joined_at")\
            .execute()
        return [MembershipResponse(**member) for member in (result.data or [])]

    def leave(self, campaign_id: str, principal: str) -> bool:
        """Remove the caller's own membership row"""
        with self.guard.campaign_lock(principal, campaign_id):
            self.guard.check(principal, "campaign_members", "delete", campaign_id, row_user_id=principal)

            if not self._find(campaign_id, principal):
                raise NotFoundError("Membership not found")

            result = self.supabase.table(MEMBERS_TABLE)\
                .delete()\
                .eq("campaign_id", campaign_id)\
                .eq("user_id", principal)\
                .execute()

            logger.info(f"User {principal} left campaign {campaign_id}")
            self.feed.emit("campaign_members", campaign_id, {"user_id": principal}, action="delete")
            return len(result.data or []) > 0
