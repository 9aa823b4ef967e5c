from fastapi import APIRouter, Depends
from questboard.database.supabase_client import get_supabase
from questboard.modules.members.schemas import JoinRequest, MembershipResponse
from questboard.modules.members.service import MembershipService
from questboard.core.dependencies import get_principal, get_guard
from questboard.core.events import ChangeFeed, get_change_feed
from questboard.core.guard import ResourceGuard
from supabase import Client
from typing import List

router = APIRouter(prefix="/campaigns", tags=["members"])


def get_membership_service(
    supabase: Client = Depends(get_supabase),
    guard: ResourceGuard = Depends(get_guard),
    feed: ChangeFeed = Depends(get_change_feed)
) -> MembershipService:
    return MembershipService(supabase, guard, feed)


@router.post("/join", response_model=MembershipResponse, status_code=201)
async def join_campaign(
    join_data: JoinRequest,
    principal: str = Depends(get_principal),
    service: MembershipService = Depends(get_membership_service)
):
    """Join a campaign with its invite code"""
    return service.join(join_data.invite_code, principal)


@router.get("/{campaign_id}/members", response_model=List[MembershipResponse])
async def list_members(
    campaign_id: str,
    principal: str = Depends(get_principal),
    service: MembershipService = Depends(get_membership_service)
):
    """List all members of a campaign (only if caller is a member or the owner)"""
    return service.list_members(campaign_id, principal)


@router.delete("/{campaign_id}/members/me", status_code=204)
async def leave_campaign(
    campaign_id: str,
    principal: str = Depends(get_principal),
    service: MembershipService = Depends(get_membership_service)
):
    """Leave a campaign"""
    service.leave(campaign_id, principal)
    return None
