from pydantic import BaseModel, Field
from typing import Optional, Dict, Any
from datetime import datetime


class CampaignCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    description: Optional[str] = None
    current_scene: Optional[str] = None
    game_state: Optional[Dict[str, Any]] = None


class CampaignUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    description: Optional[str] = None
    current_scene: Optional[str] = None
    game_state: Optional[Dict[str, Any]] = None
    is_active: Optional[bool] = None


class CampaignResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    invite_code: str
    owner_id: str
    current_scene: Optional[str] = None
    game_state: Dict[str, Any] = Field(default_factory=dict)
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class InviteResolution(BaseModel):
    campaign_id: str
    name: str
    owner_id: str
