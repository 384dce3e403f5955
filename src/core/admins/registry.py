# src/core/admins/registry.py
"""Admin registry backed by the JSON document store.

The registry is an ordered set of Discord user ids. One id, the
protected principal, is always a member: it is seeded on first boot,
re-added if the stored document lost it, and can never be removed.
"""

import logging

from src.core.errors import AlreadyAdmin, NotFound, ProtectedPrincipal
from src.core.storage import ADMINS, JsonDocumentStore

logger = logging.getLogger(__name__)


class AdminRegistry:
    """Membership operations over the persisted admin list.

    Attributes:
        protected_id: The id that can never leave the registry.
    """

    def __init__(self, store: JsonDocumentStore, protected_id: str) -> None:
        self._store = store
        self.protected_id = protected_id

    def _normalize(self, stored: list) -> list[str]:
        ids: list[str] = []
        for value in stored:
            user_id = str(value)
            if user_id not in ids:
                ids.append(user_id)
        return ids

    async def list_admins(self) -> list[str]:
        """Return the admin ids in insertion order.

        If the stored list is missing the protected principal (e.g. the
        file was hand-edited) it is appended and persisted first.
        """
        admins = self._normalize(await self._store.read(ADMINS))
        if self.protected_id in admins:
            return admins

        def heal(current: list) -> list[str]:
            healed = self._normalize(current)
            if self.protected_id not in healed:
                healed.append(self.protected_id)
            return healed

        logger.warning(
            "Protected admin %s missing from admin list, restoring",
            self.protected_id,
        )
        return await self._store.mutate(ADMINS, heal)

    async def is_admin(self, user_id: str) -> bool:
        return user_id in await self.list_admins()

    def is_protected(self, user_id: str) -> bool:
        return user_id == self.protected_id

    async def add(self, user_id: str) -> list[str]:
        """Add an admin.

        Returns:
            The updated admin list.

        Raises:
            AlreadyAdmin: If the id is already a member.
        """

        def apply(current: list) -> list[str]:
            admins = self._normalize(current)
            if self.protected_id not in admins:
                admins.append(self.protected_id)
            if user_id in admins:
                raise AlreadyAdmin()
            admins.append(user_id)
            return admins

        admins = await self._store.mutate(ADMINS, apply)
        logger.info("Admin %s added", user_id)
        return admins

    async def remove(self, user_id: str) -> list[str]:
        """Remove an admin.

        Returns:
            The updated admin list.

        Raises:
            ProtectedPrincipal: If the id is the protected principal.
            NotFound: If the id is not a member.
        """
        if self.is_protected(user_id):
            raise ProtectedPrincipal()

        def apply(current: list) -> list[str]:
            admins = self._normalize(current)
            if self.protected_id not in admins:
                admins.append(self.protected_id)
            if user_id not in admins:
                raise NotFound("Admin not found")
            return [admin for admin in admins if admin != user_id]

        admins = await self._store.mutate(ADMINS, apply)
        logger.info("Admin %s removed", user_id)
        return admins
