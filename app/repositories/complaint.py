"""Complaint repository."""


from app.domain.complaint import Complaint
from app.repositories.base import BaseRepository


class ComplaintRepository(BaseRepository[Complaint]):
    model = Complaint

    async def mark_resolved(self, complaint: Complaint) -> Complaint:
        return await self.update(complaint, resolved=True)
