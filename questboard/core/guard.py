"""
Resource guard layer: applies the access matrix to one (resource, action) request.

Callers that do not hold member on the campaign always get the same
"Campaign not found" 404, whatever they asked for, so campaign existence never
leaks. Members that lack the stronger capability or the row ownership get 403.
"""

from contextlib import contextmanager
from typing import Iterator, Optional
import logging

from questboard.config.access_config import get_rule
from questboard.core.authorization import Authorizer, CampaignAccess, Capability
from questboard.core.errors import ForbiddenError, UnauthenticatedError, campaign_not_found
from questboard.core import locks

logger = logging.getLogger(__name__)


class ResourceGuard:
    def __init__(self, authorizer: Authorizer):
        self.authorizer = authorizer

    def check(
        self,
        principal: Optional[str],
        resource: str,
        action: str,
        campaign_id: Optional[str] = None,
        row_user_id: Optional[str] = None,
    ) -> CampaignAccess:
        """Raise unless principal may perform action on resource. Returns the resolved access."""
        if not principal:
            raise UnauthenticatedError()

        rule = get_rule(resource, action)
        capabilities = [Capability(c) for c in rule["capabilities"]] if rule else None

        if capabilities == []:
            # No campaign capability required; only the identity match applies
            access = CampaignAccess(principal=principal, campaign_id=campaign_id or "")
        else:
            access = self.authorizer.resolve(principal, campaign_id)
            if not access.is_member:
                logger.warning(f"Denied {action} on {resource}: {principal} has no access to campaign {campaign_id}")
                raise campaign_not_found()
            if capabilities is None:
                raise ForbiddenError(f"Cannot {action} {resource}")
            if not any(access.grants(c) for c in capabilities):
                logger.warning(f"Denied {action} on {resource}: {principal} lacks {rule['capabilities']} on campaign {campaign_id}")
                raise ForbiddenError(
                    f"Requires {' or '.join(rule['capabilities'])} on this campaign to {action} {resource}"
                )

        if rule["self"] and row_user_id != principal:
            logger.warning(f"Denied {action} on {resource}: {principal} does not own the row")
            raise ForbiddenError(f"You can only {action} your own {resource}")

        return access

    @contextmanager
    def campaign_lock(self, principal: Optional[str], campaign_id: str) -> Iterator[None]:
        """Take the campaign's write lock, but only for callers holding member on it.

        Non-members are turned away before a lock exists, so unknown campaign
        ids never reach the lock registry. Callers still run their full check
        inside the lock.
        """
        if not principal:
            raise UnauthenticatedError()
        if not self.authorizer.is_member(principal, campaign_id):
            logger.warning(f"Denied write on campaign {campaign_id}: {principal} is not a member")
            raise campaign_not_found()
        with locks.campaign_lock(campaign_id):
            yield
