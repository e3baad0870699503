from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Dict, Any
from datetime import datetime
from uuid import UUID
from app.models.seller import (
    SellerCategory,
    SellerLanguage,
    BusinessScale,
    DocumentType,
    VerificationStatus,
    TicketStatus,
)
from app.models.verification import VerificationRecordStatus
from app.schemas.auth import UnionMembershipResponse


class SellerRegistration(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    region: str = Field(..., min_length=2, max_length=50)
    city: str = Field(..., min_length=2, max_length=50)
    village: Optional[str] = Field(None, max_length=50)
    categories: List[SellerCategory] = Field(..., min_length=1)
    language: SellerLanguage = SellerLanguage.ENGLISH
    scale: BusinessScale
    capacity: Optional[str] = Field(None, max_length=200)
    has_documents: bool = False
    document_type: Optional[DocumentType] = None


class SellerProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    region: Optional[str] = Field(None, min_length=2, max_length=50)
    city: Optional[str] = Field(None, min_length=2, max_length=50)
    village: Optional[str] = Field(None, max_length=50)
    categories: Optional[List[SellerCategory]] = Field(None, min_length=1)
    language: Optional[SellerLanguage] = None
    scale: Optional[BusinessScale] = None
    capacity: Optional[str] = Field(None, max_length=200)


class AlternateDocumentResponse(BaseModel):
    type: str
    path: str
    description: Optional[str] = None
    uploaded_at: Optional[datetime] = None


class SupportTicketResponse(BaseModel):
    id: UUID
    issue: str
    description: str
    status: TicketStatus
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SellerProfileResponse(BaseModel):
    id: UUID
    phone: str
    name: Optional[str] = None
    email: Optional[str] = None
    region: Optional[str] = None
    city: Optional[str] = None
    village: Optional[str] = None
    categories: List[SellerCategory] = []
    language: Optional[SellerLanguage] = None
    scale: Optional[BusinessScale] = None
    capacity: Optional[str] = None
    has_documents: bool
    document_type: Optional[DocumentType] = None
    document_paths: List[str] = []
    alternate_documents: List[AlternateDocumentResponse] = []
    verification_status: VerificationStatus
    verification_badge_color: str
    union_membership: UnionMembershipResponse
    referral_code: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProvisionalDetailsResponse(BaseModel):
    is_provisional: bool
    expiry_date: Optional[datetime] = None
    renewal_count: int
    max_renewals: int


class VerificationSummary(BaseModel):
    status: VerificationRecordStatus
    admin_notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    provisional_details: ProvisionalDetailsResponse


class VerificationStatusResponse(BaseModel):
    verification_status: VerificationStatus
    union_membership: UnionMembershipResponse
    has_documents: bool
    document_type: Optional[DocumentType] = None
    verification: Optional[VerificationSummary] = None
    is_provisional_expired: Optional[bool] = None
    can_renew: Optional[bool] = None


class DocumentUploadResponse(BaseModel):
    message: str
    documents: List[Dict[str, Any]]
    verification_status: VerificationStatus
    union_membership: Optional[UnionMembershipResponse] = None


class RegistrationResponse(BaseModel):
    message: str
    id: UUID
    name: Optional[str] = None
    verification_status: VerificationStatus
    union_membership: UnionMembershipResponse


class SupportTicketCreate(BaseModel):
    issue: str = Field(..., min_length=10, max_length=200)
    description: str = Field(..., min_length=20, max_length=1000)
