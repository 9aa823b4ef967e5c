from fastapi import APIRouter, Depends
from questboard.database.supabase_client import get_supabase
from questboard.modules.combat.schemas import CombatStateResponse, StartCombatRequest, EnemyRosterUpdate
from questboard.modules.combat.service import CombatService
from questboard.core.dependencies import get_principal, get_guard
from questboard.core.events import ChangeFeed, get_change_feed
from questboard.core.guard import ResourceGuard
from supabase import Client

router = APIRouter(prefix="/campaigns/{campaign_id}/combat", tags=["combat"])


def get_combat_service(
    supabase: Client = Depends(get_supabase),
    guard: ResourceGuard = Depends(get_guard),
    feed: ChangeFeed = Depends(get_change_feed)
) -> CombatService:
    return CombatService(supabase, guard, feed)


@router.get("", response_model=CombatStateResponse)
async def get_combat_state(
    campaign_id: str,
    principal: str = Depends(get_principal),
    service: CombatService = Depends(get_combat_service)
):
    """Current combat state (members and owner)"""
    return service.get_state(campaign_id, principal)


@router.post("/start", response_model=CombatStateResponse)
async def start_combat(
    campaign_id: str,
    request: StartCombatRequest,
    principal: str = Depends(get_principal),
    service: CombatService = Depends(get_combat_service)
):
    """Start (or restart) combat with a new initiative order (owner or DM)"""
    return service.start_combat(campaign_id, request.initiative_order, principal, request.enemies)


@router.post("/advance", response_model=CombatStateResponse)
async def advance_turn(
    campaign_id: str,
    principal: str = Depends(get_principal),
    service: CombatService = Depends(get_combat_service)
):
    """Advance to the next combatant (owner or DM)"""
    return service.advance_turn(campaign_id, principal)


@router.post("/end", response_model=CombatStateResponse)
async def end_combat(
    campaign_id: str,
    principal: str = Depends(get_principal),
    service: CombatService = Depends(get_combat_service)
):
    """End the current combat (owner or DM)"""
    return service.end_combat(campaign_id, principal)


@router.put("/enemies", response_model=CombatStateResponse)
async def update_enemies(
    campaign_id: str,
    roster: EnemyRosterUpdate,
    principal: str = Depends(get_principal),
    service: CombatService = Depends(get_combat_service)
):
    """Replace the enemy roster of the active combat (owner or DM)"""
    return service.update_enemies(campaign_id, roster.enemies, principal)
