"""Post-registration hook: writes the rows every new account needs."""
from supabase import Client
from typing import Any, Dict, Optional
from questboard.modules.auth.models import PROFILES_TABLE, USER_ROLES_TABLE
import logging

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "user"


def default_display_name(email: Optional[str], user_metadata: Optional[Dict[str, Any]] = None) -> str:
    """display_name from metadata, else the local part of the email"""
    name = (user_metadata or {}).get("display_name")
    if name:
        return name
    return (email or "").split("@", 1)[0] or "Adventurer"


def on_user_registered(
    supabase: Client,
    user_id: str,
    email: Optional[str],
    user_metadata: Optional[Dict[str, Any]] = None
) -> None:
    """Create the profile and default role for a new user. Safe to re-run for an existing user."""
    existing = supabase.table(PROFILES_TABLE)\
        .select("id")\
        .eq("user_id", user_id)\
        .limit(1)\
        .execute()
    if not existing.data:
        supabase.table(PROFILES_TABLE).insert({
            "user_id": user_id,
            "display_name": default_display_name(email, user_metadata)
        }).execute()

    role_result = supabase.table(USER_ROLES_TABLE)\
        .select("id")\
        .eq("user_id", user_id)\
        .eq("role", DEFAULT_ROLE)\
        .limit(1)\
        .execute()
    if not role_result.data:
        supabase.table(USER_ROLES_TABLE).insert({
            "user_id": user_id,
            "role": DEFAULT_ROLE
        }).execute()

    logger.info(f"Provisioned profile and role for user {user_id}")
