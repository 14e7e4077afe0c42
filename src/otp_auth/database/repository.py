"""User repository — data access layer for account lookups and updates."""

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from otp_auth.models.user import User


class UserRepository:
    """Encapsulates all database queries related to users.

    The repository never commits; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_email(self, email: str) -> User | None:
        """Look up a user by their normalized email address."""
        stmt = select(User).where(User.email == email)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, email: str, password_hash: str) -> User:
        """Stage a new, unverified user and flush it to obtain its id."""
        user = User(email=email, password_hash=password_hash, is_verified=False)
        self._session.add(user)
        await self._session.flush()
        return user

    async def mark_verified(self, email: str) -> bool:
        """Flag the account for *email* as verified.

        Returns ``True`` if a matching account was found.
        """
        stmt = (
            update(User)
            .where(User.email == email)
            .values(is_verified=True)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1
