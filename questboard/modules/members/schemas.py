from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class JoinRequest(BaseModel):
    invite_code: str = Field(min_length=1, max_length=64)


class MembershipResponse(BaseModel):
    id: str
    campaign_id: str
    user_id: str
    is_dm: bool = False
    joined_at: Optional[datetime] = None

    class Config:
        from_attributes = True
