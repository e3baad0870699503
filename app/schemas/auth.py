from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from uuid import UUID
from app.core.permissions import AdminRole
from app.models.seller import VerificationStatus, MembershipStatus
from app.utils.validators import validate_phone


def _normalize_phone(v: str) -> str:
    v = "".join(ch for ch in (v or "") if ch.isdigit() or ch == "+")
    if not validate_phone(v):
        raise ValueError("Please provide a valid phone number")
    return v


class OTPRequest(BaseModel):
    phone: str

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return _normalize_phone(v)


class OTPVerify(BaseModel):
    phone: str
    otp: str = Field(..., min_length=6, max_length=6, pattern=r"^\d{6}$")

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v):
        return _normalize_phone(v)


class OTPSentResponse(BaseModel):
    message: str
    otp: Optional[str] = None


class UnionMembershipResponse(BaseModel):
    id: Optional[str] = None
    issue_date: Optional[datetime] = None
    expiry_date: Optional[datetime] = None
    status: Optional[MembershipStatus] = None
    reason: Optional[str] = None


class SellerSessionUser(BaseModel):
    id: UUID
    phone: str
    name: Optional[str] = None
    verification_status: VerificationStatus
    union_membership: UnionMembershipResponse
    is_new_user: bool


class SellerTokenResponse(BaseModel):
    message: str
    access_token: str
    token_type: str = "bearer"
    user: SellerSessionUser


class RefreshTokenResponse(BaseModel):
    message: str
    access_token: str
    token_type: str = "bearer"


class AdminLogin(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)


class AdminSessionUser(BaseModel):
    id: UUID
    username: str
    role: AdminRole
    permissions: List[str]
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True


class AdminTokenResponse(BaseModel):
    message: str
    access_token: str
    token_type: str = "bearer"
    admin: AdminSessionUser
