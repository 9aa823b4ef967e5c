from fastapi import APIRouter, Depends
from questboard.database.supabase_client import get_supabase
from questboard.modules.campaigns.schemas import (
    CampaignCreate, CampaignUpdate, CampaignResponse, InviteResolution
)
from questboard.modules.campaigns.service import CampaignService
from questboard.core.dependencies import get_principal, get_guard
from questboard.core.events import ChangeFeed, get_change_feed
from questboard.core.guard import ResourceGuard
from supabase import Client
from typing import List

router = APIRouter(prefix="/campaigns", tags=["campaigns"])


def get_campaign_service(
    supabase: Client = Depends(get_supabase),
    guard: ResourceGuard = Depends(get_guard),
    feed: ChangeFeed = Depends(get_change_feed)
) -> CampaignService:
    return CampaignService(supabase, guard, feed)


@router.post("", response_model=CampaignResponse, status_code=201)
async def create_campaign(
    campaign_data: CampaignCreate,
    principal: str = Depends(get_principal),
    service: CampaignService = Depends(get_campaign_service)
):
    """Create a new campaign owned by the caller"""
    return service.create_campaign(campaign_data, principal)


@router.get("", response_model=List[CampaignResponse])
async def list_campaigns(
    limit: int = 50,
    offset: int = 0,
    principal: str = Depends(get_principal),
    service: CampaignService = Depends(get_campaign_service)
):
    """List campaigns the caller owns or has joined"""
    return service.list_campaigns(principal, limit=limit, offset=offset)


@router.get("/invite/{invite_code}", response_model=InviteResolution)
async def resolve_invite(
    invite_code: str,
    principal: str = Depends(get_principal),
    service: CampaignService = Depends(get_campaign_service)
):
    """Look up an active campaign by invite code before joining"""
    return service.resolve_invite_code(invite_code)


@router.get("/{campaign_id}", response_model=CampaignResponse)
async def get_campaign(
    campaign_id: str,
    principal: str = Depends(get_principal),
    service: CampaignService = Depends(get_campaign_service)
):
    """Get campaign by ID (only if caller is a member or the owner)"""
    return service.get_campaign(campaign_id, principal)


@router.put("/{campaign_id}", response_model=CampaignResponse)
async def update_campaign(
    campaign_id: str,
    campaign_data: CampaignUpdate,
    principal: str = Depends(get_principal),
    service: CampaignService = Depends(get_campaign_service)
):
    """Update campaign (owner only)"""
    return service.update_campaign(campaign_id, campaign_data, principal)


@router.delete("/{campaign_id}", status_code=204)
async def delete_campaign(
    campaign_id: str,
    principal: str = Depends(get_principal),
    service: CampaignService = Depends(get_campaign_service)
):
    """Delete campaign with its members, characters and combat state (owner only)"""
    service.delete_campaign(campaign_id, principal)
    return None
