from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from datetime import datetime
from uuid import UUID
from app.core.verification import AdminAction
from app.models.seller import DocumentType, MembershipStatus, VerificationStatus
from app.models.verification import HistoryAction
from app.schemas.auth import UnionMembershipResponse
from app.schemas.seller import SellerProfileResponse, VerificationSummary


class VerifyRequest(BaseModel):
    action: AdminAction
    notes: Optional[str] = Field(None, max_length=1000)
    rejection_reason: Optional[str] = Field(None, max_length=500)


class MembershipUpdate(BaseModel):
    status: MembershipStatus
    reason: Optional[str] = Field(None, max_length=500)


class HistoryEntryResponse(BaseModel):
    action: HistoryAction
    timestamp: datetime
    admin_id: Optional[UUID] = None
    notes: Optional[str] = None


class VerificationDetail(VerificationSummary):
    id: UUID
    document_type: DocumentType
    documents: List[str] = []
    alternate_documents: List[Dict[str, Any]] = []
    reviewed_by: Optional[UUID] = None
    history: List[HistoryEntryResponse] = []


class AdminSellerDetail(SellerProfileResponse):
    verification: Optional[VerificationDetail] = None
    verification_state: Optional[str] = None
    products: List[Dict[str, Any]] = []


class VerifyResponse(BaseModel):
    message: str
    seller_id: UUID
    verification_status: VerificationStatus
    union_membership: UnionMembershipResponse
    verification: VerificationSummary


class MembershipResponse(BaseModel):
    message: str
    union_membership: UnionMembershipResponse


class DashboardStatistics(BaseModel):
    total_sellers: int
    verified_sellers: int
    provisional_sellers: int
    pending_sellers: int
    total_products: int
    active_products: int


class DashboardResponse(BaseModel):
    statistics: DashboardStatistics
    recent_sellers: List[Dict[str, Any]]
    recent_products: List[Dict[str, Any]]


class CountBucket(BaseModel):
    key: str
    count: int


class AnalyticsResponse(BaseModel):
    period: str
    registration_trends: List[CountBucket]
    category_distribution: List[CountBucket]
    regional_distribution: List[CountBucket]
