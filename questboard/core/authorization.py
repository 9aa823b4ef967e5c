"""
Authorization engine: answers whether a principal holds a capability on a campaign.

Capabilities:
- member: a campaign_members row exists for (principal, campaign) OR the
  principal owns the campaign. Ownership always implies membership.
- owner: the principal is the campaign's owner_id.
- dm: a campaign_members row exists with is_dm = true.

Every decision reads the current rows; nothing is cached between calls, so a
revoked membership is seen by the very next check.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional
from supabase import Client
from questboard.modules.campaigns.models import CAMPAIGNS_TABLE
from questboard.modules.members.models import MEMBERS_TABLE
import logging

logger = logging.getLogger(__name__)


class Capability(str, Enum):
    MEMBER = "member"
    OWNER = "owner"
    DM = "dm"


@dataclass(frozen=True)
class CampaignAccess:
    """Snapshot of what one principal holds on one campaign."""
    principal: Optional[str]
    campaign_id: str
    campaign_exists: bool = False
    is_owner: bool = False
    has_membership: bool = False
    is_dm: bool = False

    @property
    def is_member(self) -> bool:
        return self.campaign_exists and (self.is_owner or self.has_membership)

    def grants(self, capability: Capability) -> bool:
        capability = Capability(capability)
        if capability is Capability.OWNER:
            return self.campaign_exists and self.is_owner
        if capability is Capability.DM:
            return self.campaign_exists and self.is_dm
        return self.is_member


class Authorizer:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def resolve(self, principal: Optional[str], campaign_id: Optional[str]) -> CampaignAccess:
        """Load the campaign owner and the principal's membership row. Unknown campaign or principal denies everything."""
        if not principal or not campaign_id:
            return CampaignAccess(principal=principal, campaign_id=campaign_id or "")

        campaign_result = self.supabase.table(CAMPAIGNS_TABLE)\
            .select("id, owner_id")\
            .eq("id", campaign_id)\
            .limit(1)\
            .execute()
        if not campaign_result.data:
            return CampaignAccess(principal=principal, campaign_id=campaign_id)

        is_owner = campaign_result.data[0].get("owner_id") == principal

        member_result = self.supabase.table(MEMBERS_TABLE)\
            .select("id, is_dm")\
            .eq("campaign_id", campaign_id)\
            .eq("user_id", principal)\
            .limit(1)\
            .execute()
        membership = member_result.data[0] if member_result.data else None

        return CampaignAccess(
            principal=principal,
            campaign_id=campaign_id,
            campaign_exists=True,
            is_owner=is_owner,
            has_membership=membership is not None,
            is_dm=bool(membership and membership.get("is_dm")),
        )

    def decide(self, principal: Optional[str], campaign_id: Optional[str], capability: Capability) -> bool:
        """True iff principal holds capability on campaign_id."""
        return self.resolve(principal, campaign_id).grants(capability)

    def is_member(self, principal: Optional[str], campaign_id: str) -> bool:
        return self.decide(principal, campaign_id, Capability.MEMBER)

    def is_owner(self, principal: Optional[str], campaign_id: str) -> bool:
        return self.decide(principal, campaign_id, Capability.OWNER)

    def is_dm(self, principal: Optional[str], campaign_id: str) -> bool:
        return self.decide(principal, campaign_id, Capability.DM)
