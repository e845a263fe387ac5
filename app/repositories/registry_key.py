"""Registry uniqueness index repository (UPC / ownership-document hash)."""


from sqlalchemy import select

from app.domain.enums import RegistryKeyKind
from app.domain.registry_key import RegistryKey
from app.repositories.base import BaseRepository


class RegistryKeyRepository(BaseRepository[RegistryKey]):
    model = RegistryKey

    def _conflict_message(self, exc) -> str:
        return "Registry key already reserved"

    async def exists(self, kind: RegistryKeyKind, value: str) -> bool:
        result = await self._session.execute(
            select(RegistryKey.id).where(RegistryKey.kind == kind, RegistryKey.value == value)
        )
        return result.first() is not None

    async def reserve(self, kind: RegistryKeyKind, value: str, property_id: str) -> RegistryKey:
        """Insert the key; the (kind, value) unique constraint rejects duplicates across instances."""
        return await self.create(kind=kind, value=value, property_id=property_id)
