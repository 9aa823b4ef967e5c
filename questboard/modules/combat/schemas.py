from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any
from datetime import datetime


class Enemy(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    hp: Optional[int] = Field(default=None, ge=0)
    max_hp: Optional[int] = Field(default=None, ge=1)
    ac: Optional[int] = Field(default=None, ge=0)


class StartCombatRequest(BaseModel):
    initiative_order: List[str] = Field(min_length=1)
    enemies: List[Enemy] = Field(default_factory=list)


class EnemyRosterUpdate(BaseModel):
    enemies: List[Enemy]


class CombatStateResponse(BaseModel):
    id: Optional[str] = None
    campaign_id: str
    is_active: bool = False
    round_number: int = 1
    current_turn_index: int = 0
    initiative_order: List[str] = Field(default_factory=list)
    enemies: List[Dict[str, Any]] = Field(default_factory=list)
    current_combatant: Optional[str] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
