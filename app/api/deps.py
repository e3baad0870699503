from fastapi import Depends
from typing import Optional
from uuid import UUID
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from app.database import get_db
from app.core.security import decode_access_token, decode_admin_token
from app.core.permissions import AdminPermission, has_permission
from app.core.exceptions import UnauthorizedException, ForbiddenException
from app.models.seller import Seller, VerificationStatus
from app.models.admin import Admin

security = HTTPBearer()


def _subject_id(payload: dict) -> Optional[UUID]:
    try:
        return UUID(str(payload.get("sub")))
    except ValueError:
        return None


async def get_current_seller(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Seller:
    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise UnauthorizedException("Invalid authentication credentials")

    seller_id = _subject_id(payload)
    if seller_id is None:
        raise UnauthorizedException("Invalid authentication credentials")

    result = await db.execute(select(Seller).where(Seller.id == seller_id))
    seller = result.scalar_one_or_none()

    if seller is None:
        raise UnauthorizedException("Invalid token - user not found")

    return seller


async def require_verified_seller(seller: Seller = Depends(get_current_seller)) -> Seller:
    if seller.verification_status != VerificationStatus.VERIFIED:
        raise ForbiddenException(
            f"Account verification required (current status: {seller.verification_status.value})"
        )
    return seller


async def get_current_admin(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Admin:
    payload = decode_admin_token(credentials.credentials)
    if payload is None:
        raise UnauthorizedException("Invalid admin token")

    admin_id = _subject_id(payload)
    if admin_id is None:
        raise UnauthorizedException("Invalid admin token")

    result = await db.execute(select(Admin).where(Admin.id == admin_id))
    admin = result.scalar_one_or_none()

    if admin is None or not admin.is_active:
        raise UnauthorizedException("Invalid admin token")

    return admin


def require_permission(permission: AdminPermission):
    async def dependency(admin: Admin = Depends(get_current_admin)) -> Admin:
        if not has_permission(admin.role, admin.permissions, permission):
            raise ForbiddenException(f"Permission '{permission.value}' required")
        return admin
    return dependency
