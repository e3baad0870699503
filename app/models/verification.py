from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Integer, JSON, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
from app.models.seller import DocumentType
import uuid
from enum import Enum

DEFAULT_MAX_RENEWALS = 2


class VerificationRecordStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    UNDER_REVIEW = "under-review"


class HistoryAction(str, Enum):
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under-review"
    APPROVED = "approved"
    REJECTED = "rejected"
    RESUBMITTED = "resubmitted"


class Verification(Base):
    __tablename__ = "verifications"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    seller_id = Column(UUID(as_uuid=True), ForeignKey("sellers.id"), nullable=False, unique=True)
    document_type = Column(SQLEnum(DocumentType), nullable=False)
    documents = Column(JSON, default=list, nullable=False)
    alternate_documents = Column(JSON, default=list, nullable=False)  # [{type, path, description, uploaded_at}]
    status = Column(
        SQLEnum(VerificationRecordStatus), default=VerificationRecordStatus.PENDING, nullable=False, index=True
    )
    admin_notes = Column(String(1000))
    rejection_reason = Column(String(500))
    reviewed_by = Column(UUID(as_uuid=True), ForeignKey("admins.id"), index=True)
    reviewed_at = Column(DateTime(timezone=True))

    # Provisional membership details
    is_provisional = Column(Boolean, default=False, nullable=False, index=True)
    provisional_expiry_date = Column(DateTime(timezone=True), index=True)
    renewal_count = Column(Integer, default=0, nullable=False)
    max_renewals = Column(Integer, default=DEFAULT_MAX_RENEWALS, nullable=False)

    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    seller = relationship("Seller")
    history = relationship(
        "VerificationHistory",
        back_populates="verification",
        order_by="VerificationHistory.sequence",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def provisional_details(self) -> dict:
        return {
            "is_provisional": bool(self.is_provisional),
            "expiry_date": self.provisional_expiry_date,
            "renewal_count": self.renewal_count or 0,
            "max_renewals": DEFAULT_MAX_RENEWALS if self.max_renewals is None else self.max_renewals,
        }


class VerificationHistory(Base):
    """Audit trail entry; rows are inserted, never updated."""

    __tablename__ = "verification_history"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    verification_id = Column(UUID(as_uuid=True), ForeignKey("verifications.id"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)
    action = Column(SQLEnum(HistoryAction), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)
    admin_id = Column(UUID(as_uuid=True), ForeignKey("admins.id"))
    notes = Column(String(1000))

    verification = relationship("Verification", back_populates="history")
