"""
Core dependencies for authentication and campaign access checks
"""

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from questboard.database.supabase_client import get_supabase, get_auth_client
from questboard.modules.auth.service import AuthService
from questboard.core.authorization import Authorizer
from questboard.core.guard import ResourceGuard
from questboard.core.errors import UnauthenticatedError
from supabase import Client
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def get_auth_service(
    auth_client: Client = Depends(get_auth_client),
    supabase: Client = Depends(get_supabase)
) -> AuthService:
    return AuthService(auth_client, supabase)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """Resolve the calling user from the bearer JWT"""
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError()
    return auth_service.get_current_user(credentials.credentials)


def get_principal(user_data: Dict[str, Any] = Depends(get_current_user)) -> str:
    """Principal id of the authenticated caller"""
    return user_data["id"]


def get_authorizer(supabase: Client = Depends(get_supabase)) -> Authorizer:
    return Authorizer(supabase)


def get_guard(authorizer: Authorizer = Depends(get_authorizer)) -> ResourceGuard:
    return ResourceGuard(authorizer)
