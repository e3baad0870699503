from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.database import get_db
from app.api.deps import get_current_seller
from app.config import settings
from app.models.seller import Seller, VerificationStatus
from app.models.admin import Admin
from app.core.security import verify_password, create_access_token, create_admin_token
from app.core.exceptions import UnauthorizedException, BadRequestException, LockedException
from app.schemas.auth import (
    OTPRequest, OTPVerify, OTPSentResponse, SellerTokenResponse, SellerSessionUser,
    RefreshTokenResponse, AdminLogin, AdminTokenResponse, AdminSessionUser,
)
from app.schemas.common import MessageResponse
from app.schemas.seller import SellerProfileResponse
from app.services.otp_service import OtpService
from app.services.admin_service import AdminService
from app.utils.logger import logger

router = APIRouter()


def _seller_token(seller: Seller) -> str:
    return create_access_token(data={
        "sub": str(seller.id),
        "phone": seller.phone,
        "verification_status": seller.verification_status.value,
    })


@router.post("/send-otp", response_model=OTPSentResponse)
async def send_otp(request: OTPRequest, db: AsyncSession = Depends(get_db)):
    result = await OtpService.send(db, request.phone)
    if not result.success:
        raise BadRequestException(result.message)

    # Echo the code only outside production so the mocked SMS flow can be tested
    expose = settings.APP_ENV in ("development", "test")
    return OTPSentResponse(message=result.message, otp=result.otp if expose else None)


@router.post("/verify-otp", response_model=SellerTokenResponse)
async def verify_otp(request: OTPVerify, db: AsyncSession = Depends(get_db)):
    result = await OtpService.verify(db, request.phone, request.otp)
    if not result.success:
        raise BadRequestException(result.message)

    seller_result = await db.execute(select(Seller).where(Seller.phone == request.phone))
    seller = seller_result.scalar_one_or_none()

    if not seller:
        seller = Seller(
            phone=request.phone,
            verification_status=VerificationStatus.PENDING,
            categories=[],
            document_paths=[],
            alternate_documents=[],
        )
        db.add(seller)
        await db.commit()
        await db.refresh(seller)
        logger.info(f"Seller created for phone {request.phone}: {seller.id}")

    return SellerTokenResponse(
        message="OTP verified successfully",
        access_token=_seller_token(seller),
        user=SellerSessionUser(
            id=seller.id,
            phone=seller.phone,
            name=seller.name,
            verification_status=seller.verification_status,
            union_membership=seller.union_membership,
            is_new_user=not seller.is_profile_complete,
        ),
    )


@router.post("/refresh-token", response_model=RefreshTokenResponse)
async def refresh_token(seller: Seller = Depends(get_current_seller)):
    return RefreshTokenResponse(message="Token refreshed successfully", access_token=_seller_token(seller))


@router.get("/me", response_model=SellerProfileResponse)
async def get_me(seller: Seller = Depends(get_current_seller)):
    return seller


@router.post("/logout", response_model=MessageResponse)
async def logout():
    # Tokens are stateless; the client discards its copy
    return MessageResponse(message="Logged out successfully")


@router.post("/admin/login", response_model=AdminTokenResponse)
async def admin_login(credentials: AdminLogin, request: Request, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Admin).where(Admin.username == credentials.username))
    admin = result.scalar_one_or_none()

    if not admin or not admin.is_active:
        raise UnauthorizedException("Invalid credentials")

    if admin.is_locked():
        raise LockedException("Account is temporarily locked due to too many failed attempts")

    if not verify_password(credentials.password, admin.password_hash):
        admin.register_failed_login()
        await db.commit()
        logger.warning(f"Failed admin login for {admin.username} ({admin.login_attempts} attempts)")
        raise UnauthorizedException("Invalid credentials")

    admin.register_successful_login()
    AdminService.record_activity(db, admin, "login", "system", request)
    await db.commit()

    logger.info(f"Admin logged in: {admin.username}")
    return AdminTokenResponse(
        message="Login successful",
        access_token=create_admin_token(data={"sub": str(admin.id), "username": admin.username, "role": admin.role.value}),
        admin=AdminSessionUser.model_validate(admin),
    )
