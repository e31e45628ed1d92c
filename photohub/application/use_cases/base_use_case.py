"""
Base use case classes for the application layer.
Provides the authorization step shared by all use cases.
"""

import logging
from typing import Callable

from photohub.domain.models.base import AuthorizationDenied
from photohub.infrastructure.authz.policy_client import Decision, PolicyServerError

logger = logging.getLogger(__name__)


class AuthorizedUseCase:
    """
    Base class for use cases executed on behalf of an authenticated user.
    """

    DEFAULT_PAGE_SIZE = 30

    @staticmethod
    def ensure_allowed(decision: Decision, denied: Callable[[], AuthorizationDenied]) -> None:
        """
        Turn a policy decision into control flow.

        Raises:
            AuthorizationDenied: When the policy server denied the request
            PolicyServerError: When no decision could be obtained
        """
        if decision is Decision.ALLOW:
            return
        if decision is Decision.DENY:
            error = denied()
            logger.info(error.message)
            raise error
        raise PolicyServerError("Authorization service unavailable")
