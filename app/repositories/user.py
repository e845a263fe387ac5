"""User repository."""


from sqlalchemy import func, or_, select

from app.domain.user import User
from app.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    def _conflict_message(self, exc) -> str:
        return "A user with this email is already registered"

    async def get_by_email(self, email: str) -> User | None:
        result = await self._session.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalars().first()

    async def list_risk_candidates(self, fraud_threshold: int) -> list[User]:
        """Banned users or users scoring above the threshold (the Risk Gate makes the final call)."""
        result = await self._session.execute(
            select(User)
            .where(or_(User.is_banned.is_(True), User.fraud_score > fraud_threshold))
            .order_by(User.fraud_score.desc())
        )
        return list(result.scalars().all())
