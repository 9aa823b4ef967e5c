from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict, Any
from datetime import datetime


def default_stats() -> Dict[str, int]:
    return {
        "strength": 10,
        "dexterity": 10,
        "constitution": 10,
        "intelligence": 10,
        "wisdom": 10,
        "charisma": 10,
    }


class Position(BaseModel):
    x: int = 0
    y: int = 0


class CharacterCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1, max_length=80)
    character_class: str = Field(alias="class", min_length=1, max_length=40)
    level: int = Field(default=1, ge=1)
    hp: int = Field(default=10, ge=0)
    max_hp: int = Field(default=10, ge=1)
    ac: int = Field(default=10, ge=0)
    stats: Dict[str, int] = Field(default_factory=default_stats)
    abilities: List[Any] = Field(default_factory=list)
    inventory: List[Any] = Field(default_factory=list)
    xp: int = Field(default=0, ge=0)
    xp_to_next: int = Field(default=300, ge=0)
    position: Position = Field(default_factory=Position)
    status_effects: List[str] = Field(default_factory=list)
    avatar_url: Optional[str] = None


class CharacterUpdate(BaseModel):
    """Gameplay fields a player may change on their own character. user_id and campaign_id are not updatable."""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=80)
    character_class: Optional[str] = Field(default=None, alias="class", min_length=1, max_length=40)
    level: Optional[int] = Field(default=None, ge=1)
    hp: Optional[int] = Field(default=None, ge=0)
    max_hp: Optional[int] = Field(default=None, ge=1)
    ac: Optional[int] = Field(default=None, ge=0)
    stats: Optional[Dict[str, int]] = None
    abilities: Optional[List[Any]] = None
    inventory: Optional[List[Any]] = None
    xp: Optional[int] = Field(default=None, ge=0)
    xp_to_next: Optional[int] = Field(default=None, ge=0)
    position: Optional[Position] = None
    status_effects: Optional[List[str]] = None
    avatar_url: Optional[str] = None
    is_active: Optional[bool] = None


class CharacterResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str
    campaign_id: str
    user_id: str
    name: str
    character_class: str = Field(alias="class")
    level: int
    hp: int
    max_hp: int
    ac: int
    stats: Dict[str, int] = Field(default_factory=default_stats)
    abilities: List[Any] = Field(default_factory=list)
    inventory: List[Any] = Field(default_factory=list)
    xp: int = 0
    xp_to_next: int = 300
    position: Position = Field(default_factory=Position)
    status_effects: List[str] = Field(default_factory=list)
    avatar_url: Optional[str] = None
    is_active: bool = True
    created_at: datetime
    updated_at: Optional[datetime] = None
