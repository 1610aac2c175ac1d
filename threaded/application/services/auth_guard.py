"""
Owner token authorization.

Every mutation of a session graph must present the session's owner token.
A wrong token and a missing session are indistinguishable to the caller.

Dependencies: sqlalchemy, threaded.boundary.db.CRUD, threaded.core.security
System role: Write authorization for the session store
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from threaded.boundary.db.CRUD.session_crud import session_crud
from threaded.core.exceptions import ForbiddenError
from threaded.core.security import tokens_match
from threaded.observability.log_utils import mask_secret

logger = logging.getLogger(__name__)


class OwnerTokenGuard:
    """Verifies owner tokens against the stored session secret."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def verify_owner_token(self, session_id: str, presented: str | None) -> bool:
        """
        Check a presented owner token.

        Args:
            session_id: Session being mutated
            presented: Token from the X-Owner-Token header

        Returns:
            bool: True only if the session exists and the token matches exactly
        """
        stored = await session_crud.get_owner_token(self.db, session_id)
        return tokens_match(stored, presented)

    async def require_owner(self, session_id: str, presented: str | None) -> None:
        """
        Raise unless the presented token owns the session.

        Raises:
            ForbiddenError: On a missing session, missing token or mismatch
        """
        if not await self.verify_owner_token(session_id, presented):
            logger.warning(
                "Owner token rejected",
                extra={"session_id": session_id, "token": mask_secret(presented)},
            )
            raise ForbiddenError(details={"session_id": session_id})
