from fastapi import APIRouter, Depends
from questboard.database.supabase_client import get_supabase
from questboard.modules.characters.schemas import CharacterCreate, CharacterUpdate, CharacterResponse
from questboard.modules.characters.service import CharacterService
from questboard.core.dependencies import get_principal, get_guard
from questboard.core.events import ChangeFeed, get_change_feed
from questboard.core.guard import ResourceGuard
from supabase import Client
from typing import List

router = APIRouter(prefix="/campaigns/{campaign_id}/characters", tags=["characters"])


def get_character_service(
    supabase: Client = Depends(get_supabase),
    guard: ResourceGuard = Depends(get_guard),
    feed: ChangeFeed = Depends(get_change_feed)
) -> CharacterService:
    return CharacterService(supabase, guard, feed)


@router.post("", response_model=CharacterResponse, status_code=201)
async def create_character(
    campaign_id: str,
    character_data: CharacterCreate,
    principal: str = Depends(get_principal),
    service: CharacterService = Depends(get_character_service)
):
    """Create a character for the caller (requires campaign membership)"""
    return service.create_character(campaign_id, character_data, principal)


@router.get("", response_model=List[CharacterResponse])
async def list_characters(
    campaign_id: str,
    principal: str = Depends(get_principal),
    service: CharacterService = Depends(get_character_service)
):
    """List characters in a campaign"""
    return service.list_characters(campaign_id, principal)


@router.get("/{character_id}", response_model=CharacterResponse)
async def get_character(
    campaign_id: str,
    character_id: str,
    principal: str = Depends(get_principal),
    service: CharacterService = Depends(get_character_service)
):
    return service.get_character(campaign_id, character_id, principal)


@router.put("/{character_id}", response_model=CharacterResponse)
async def update_character(
    campaign_id: str,
    character_id: str,
    character_data: CharacterUpdate,
    principal: str = Depends(get_principal),
    service: CharacterService = Depends(get_character_service)
):
    """Update a character (owning player only)"""
    return service.update_character(campaign_id, character_id, character_data, principal)


@router.delete("/{character_id}", status_code=204)
async def delete_character(
    campaign_id: str,
    character_id: str,
    principal: str = Depends(get_principal),
    service: CharacterService = Depends(get_character_service)
):
    """Delete a character (owning player only)"""
    service.delete_character(campaign_id, character_id, principal)
    return None
