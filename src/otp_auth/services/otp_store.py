"""OTP store — the single seam for every OTP state transition.

Each operation opens its own session, runs one atomic statement against
the ``otp`` table, commits and closes. Nothing is cached in process, so
any number of workers may share the same database.
"""

from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from otp_auth.config import Settings, settings as default_settings
from otp_auth.exceptions import StorageError
from otp_auth.models.otp import OtpRecord
from otp_auth.services.codegen import CODE_MAX, CODE_MIN, current_timestamp
from otp_auth.services.otp_issuer import OtpIssuer, normalize_email

logger = logging.getLogger(__name__)


class OtpStore:
    """Persists OTP records and moves them between lifecycle states.

    Parameters
    ----------
    session_factory:
        Factory producing a fresh ``AsyncSession`` per operation.
    issuer:
        Builds new records. Defaults to an ``OtpIssuer`` over *config*.
    config:
        Settings; ``otp_invalidate_on_issue`` controls whether a plain
        :meth:`issue` supersedes earlier live codes for the same email.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        issuer: OtpIssuer | None = None,
        config: Settings | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._config = config or default_settings
        self._issuer = issuer or OtpIssuer(self._config)

    # ── Issuance ─────────────────────────────────────────

    async def issue(
        self,
        email: str,
        validity_minutes: int | None = None,
        now: int | None = None,
    ) -> OtpRecord:
        """Issue a new code for *email* and return the saved record.

        Earlier unused codes for the same email are superseded first
        unless ``otp_invalidate_on_issue`` is turned off.
        """
        record = self._issuer.new_record(email, validity_minutes=validity_minutes, now=now)
        if self._config.otp_invalidate_on_issue:
            await self.invalidate(record.email)
        await self._insert(record)
        logger.info("OTP issued for %s (expires at %s)", record.email, record.expired_at)
        return record

    async def resend(self, email: str, now: int | None = None) -> OtpRecord:
        """Supersede every unused code for *email*, then issue a fresh one.

        If the insert fails after the invalidation succeeded, the email
        is left with no live code; the caller should report the error and
        let the user ask again.
        """
        record = self._issuer.new_record(email, now=now)
        superseded = await self.invalidate(record.email)
        await self._insert(record)
        logger.info(
            "OTP resent for %s (%d superseded, expires at %s)",
            record.email,
            superseded,
            record.expired_at,
        )
        return record

    async def invalidate(self, email: str) -> int:
        """Mark every unused record for *email* as used.

        Returns the number of records that were superseded.
        """
        normalized = normalize_email(email)
        stmt = (
            update(OtpRecord)
            .where(OtpRecord.email == normalized, OtpRecord.is_used.is_(False))
            .values(is_used=True)
            .execution_options(synchronize_session=False)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                count = result.rowcount
                await session.commit()
        except SQLAlchemyError as exc:
            logger.error("OTP invalidation failed for %s: %s", normalized, exc)
            raise StorageError(f"failed to invalidate OTPs for {normalized}") from exc
        return count

    # ── Verification ─────────────────────────────────────

    async def verify(self, email: str, code: int, now: int | None = None) -> bool:
        """Consume the live record matching *email* and *code*.

        Returns ``True`` iff exactly one record was flipped to used. A
        wrong, already used or expired code all return ``False``; the
        caller cannot tell them apart. Codes outside the 6-digit range
        can never match and are rejected without a query.

        The match and the update are one conditional ``UPDATE`` so two
        concurrent calls with the same code cannot both succeed.
        """
        normalized = normalize_email(email)
        checked_at = current_timestamp() if now is None else now

        if not CODE_MIN <= code <= CODE_MAX:
            logger.info("OTP rejected for %s (code out of range)", normalized)
            return False

        live_id = (
            select(OtpRecord.id)
            .where(
                OtpRecord.email == normalized,
                OtpRecord.code == code,
                OtpRecord.is_used.is_(False),
                OtpRecord.expired_at > checked_at,
            )
            .limit(1)
            .scalar_subquery()
        )
        stmt = (
            update(OtpRecord)
            .where(OtpRecord.id == live_id, OtpRecord.is_used.is_(False))
            .values(is_used=True)
            .execution_options(synchronize_session=False)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                count = result.rowcount
                await session.commit()
        except SQLAlchemyError as exc:
            logger.error("OTP verification failed for %s: %s", normalized, exc)
            raise StorageError(f"failed to verify OTP for {normalized}") from exc

        consumed = count == 1
        if consumed:
            logger.info("OTP verified for %s", normalized)
        else:
            logger.info("OTP rejected for %s", normalized)
        return consumed

    # ── Queries ──────────────────────────────────────────

    async def history(self, email: str) -> list[OtpRecord]:
        """Return every record ever issued to *email*, oldest first."""
        normalized = normalize_email(email)
        stmt = select(OtpRecord).where(OtpRecord.email == normalized).order_by(OtpRecord.id)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except SQLAlchemyError as exc:
            logger.error("OTP history lookup failed for %s: %s", normalized, exc)
            raise StorageError(f"failed to load OTPs for {normalized}") from exc

    # ── Private helpers ──────────────────────────────────

    async def _insert(self, record: OtpRecord) -> None:
        try:
            async with self._session_factory() as session:
                session.add(record)
                await session.commit()
        except SQLAlchemyError as exc:
            logger.error("OTP insert failed for %s: %s", record.email, exc)
            raise StorageError(f"failed to store OTP for {record.email}") from exc
        logger.debug("OTP %s stored for %s", record.code, record.email)
