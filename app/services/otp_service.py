from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.core.security import generate_otp
from app.models.otp import OtpChallenge
from app.utils.logger import logger


@dataclass
class OtpResult:
    success: bool
    message: str
    otp: Optional[str] = None


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class OtpService:
    """Phone OTP challenges. Delivery is mocked: the code is only logged."""

    @staticmethod
    async def _get_challenge(db: AsyncSession, phone: str) -> Optional[OtpChallenge]:
        result = await db.execute(select(OtpChallenge).where(OtpChallenge.phone == phone))
        return result.scalar_one_or_none()

    @staticmethod
    async def send(db: AsyncSession, phone: str, now: Optional[datetime] = None) -> OtpResult:
        now = now or datetime.now(timezone.utc)
        challenge = await OtpService._get_challenge(db, phone)
        if challenge and now < _as_utc(challenge.expires_at):
            return OtpResult(False, "OTP already sent. Please wait before requesting a new one.")

        code = generate_otp()
        expires_at = now + timedelta(minutes=settings.OTP_EXPIRE_MINUTES)
        if challenge:
            challenge.otp_code = code
            challenge.expires_at = expires_at
            challenge.attempts = 0
            challenge.max_attempts = settings.OTP_MAX_ATTEMPTS
        else:
            db.add(OtpChallenge(
                phone=phone,
                otp_code=code,
                expires_at=expires_at,
                attempts=0,
                max_attempts=settings.OTP_MAX_ATTEMPTS,
            ))
        await db.commit()

        logger.info(f"SMS to {phone}: Your Udyam Union OTP is {code} (expires in {settings.OTP_EXPIRE_MINUTES} minutes)")
        return OtpResult(True, "OTP sent successfully", otp=code)

    @staticmethod
    async def verify(db: AsyncSession, phone: str, otp: str, now: Optional[datetime] = None) -> OtpResult:
        now = now or datetime.now(timezone.utc)
        challenge = await OtpService._get_challenge(db, phone)

        if not challenge:
            return OtpResult(False, "OTP not found or expired")

        if now > _as_utc(challenge.expires_at):
            await db.delete(challenge)
            await db.commit()
            return OtpResult(False, "OTP has expired")

        if challenge.attempts >= challenge.max_attempts:
            await db.delete(challenge)
            await db.commit()
            return OtpResult(False, "Too many incorrect attempts. Please request a new OTP.")

        if challenge.otp_code == otp:
            await db.delete(challenge)
            await db.commit()
            return OtpResult(True, "OTP verified successfully")

        challenge.attempts += 1
        await db.commit()
        remaining = challenge.max_attempts - challenge.attempts
        return OtpResult(False, f"Invalid OTP. {remaining} attempts remaining.")

    @staticmethod
    async def purge_expired(db: AsyncSession, now: Optional[datetime] = None) -> int:
        now = now or datetime.now(timezone.utc)
        result = await db.execute(delete(OtpChallenge).where(OtpChallenge.expires_at < now))
        await db.commit()
        return result.rowcount or 0
