"""Auth router — registration, OTP verification and resend endpoints.

Endpoints
---------
POST /register     → create an account and email its first OTP
POST /verify       → consume an OTP and mark the account verified
POST /resend-otp   → supersede outstanding OTPs and email a new one
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from otp_auth.config import settings
from otp_auth.database.engine import async_session_factory
from otp_auth.database.repository import UserRepository
from otp_auth.exceptions import StorageError
from otp_auth.services.codegen import CODE_MAX, CODE_MIN
from otp_auth.services.email_service import EmailService
from otp_auth.services.otp_issuer import normalize_email
from otp_auth.services.otp_store import OtpStore
from otp_auth.services.passwords import hash_password

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

# ── Shared instances (created once, reused across requests) ──
_otp_store = OtpStore(async_session_factory, config=settings)
_email_service = EmailService(settings)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return async_session_factory


def get_otp_store() -> OtpStore:
    return _otp_store


def get_email_service() -> EmailService:
    return _email_service


# ── Request / response models ────────────────────────────

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)


class VerifyRequest(BaseModel):
    email: EmailStr
    code: int = Field(ge=CODE_MIN, le=CODE_MAX)


class ResendRequest(BaseModel):
    email: EmailStr


class MessageResponse(BaseModel):
    message: str


# ── Endpoints ────────────────────────────────────────────

@router.post(
    "/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED
)
async def register(
    body: RegisterRequest,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    otp_store: OtpStore = Depends(get_otp_store),
    email_service: EmailService = Depends(get_email_service),
):
    """Create an unverified account and email it a confirmation code."""
    email = normalize_email(body.email)

    try:
        async with session_factory() as session:
            repo = UserRepository(session)
            if await repo.find_by_email(email):
                raise HTTPException(status_code=409, detail="User already registered")
            await repo.create(email, hash_password(body.password))
            await session.commit()
    except IntegrityError:
        raise HTTPException(status_code=409, detail="User already registered")
    except SQLAlchemyError as exc:
        raise StorageError(f"failed to create user {email}") from exc

    logger.info("Registered user %s", email)

    record = await otp_store.issue(email)
    await email_service.send_confirmation(email, str(record.code))
    return MessageResponse(message="user registered successfully")


@router.post("/verify", response_model=MessageResponse)
async def verify(
    body: VerifyRequest,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    otp_store: OtpStore = Depends(get_otp_store),
):
    """Consume an OTP and flag the matching account as verified."""
    if not await otp_store.verify(body.email, body.code):
        return JSONResponse(status_code=400, content={"error": "Invalid or expired OTP"})

    email = normalize_email(body.email)
    try:
        async with session_factory() as session:
            found = await UserRepository(session).mark_verified(email)
            await session.commit()
    except SQLAlchemyError as exc:
        raise StorageError(f"failed to mark {email} verified") from exc

    if found:
        logger.info("User %s verified", email)
    else:
        logger.warning("OTP consumed for %s but no matching account exists", email)
    return MessageResponse(message="OTP verified successfully")


@router.post("/resend-otp", response_model=MessageResponse)
async def resend_otp(
    body: ResendRequest,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    otp_store: OtpStore = Depends(get_otp_store),
    email_service: EmailService = Depends(get_email_service),
):
    """Supersede outstanding codes for a registered email and send a new one."""
    email = normalize_email(body.email)

    try:
        async with session_factory() as session:
            user = await UserRepository(session).find_by_email(email)
    except SQLAlchemyError as exc:
        raise StorageError(f"failed to look up user {email}") from exc

    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    record = await otp_store.resend(email)
    await email_service.send_confirmation(email, str(record.code))
    return MessageResponse(message="otp resent successfully")
