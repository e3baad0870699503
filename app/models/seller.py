from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Integer, Text, JSON, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
from datetime import datetime, timezone
import secrets
import string
import uuid
from enum import Enum


class SellerCategory(str, Enum):
    AGRICULTURE = "Agriculture"
    HANDICRAFTS = "Handicrafts"
    SERVICES = "Services"
    MANUFACTURING = "Manufacturing"
    TEXTILES = "Textiles"
    FOOD_PROCESSING = "Food Processing"
    TECHNOLOGY = "Technology"
    OTHER = "Other"


class SellerLanguage(str, Enum):
    ENGLISH = "English"
    HINDI = "Hindi"
    BOTH = "Both"


class BusinessScale(str, Enum):
    MICRO = "Micro"
    SMALL = "Small"
    MEDIUM = "Medium"


class DocumentType(str, Enum):
    PAN = "PAN"
    AADHAAR = "Aadhaar"
    VOTER_ID = "Voter ID"
    DRIVING_LICENSE = "Driving License"
    RATION_CARD = "Ration Card"
    NONE = "None"


class AlternateDocumentType(str, Enum):
    SHOP_LICENSE = "Shop License"
    COMMUNITY_LETTER = "Community Letter"
    WORK_PHOTO = "Work Photo"
    OTHER = "Other"


class VerificationStatus(str, Enum):
    VERIFIED = "verified"
    PROVISIONAL = "provisional"
    PENDING = "pending"


class MembershipStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    SUSPENDED = "suspended"


class TicketStatus(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"


BADGE_COLORS = {
    VerificationStatus.VERIFIED: "green",
    VerificationStatus.PROVISIONAL: "yellow",
    VerificationStatus.PENDING: "gray",
}


def generate_union_membership_id() -> str:
    """UU + two-digit year + six random digits, e.g. UU26483920."""
    year = datetime.now(timezone.utc).strftime("%y")
    return f"UU{year}{secrets.randbelow(900000) + 100000}"


def generate_referral_code() -> str:
    alphabet = string.ascii_uppercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(6))


class Seller(Base):
    __tablename__ = "sellers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    phone = Column(String(20), unique=True, index=True, nullable=False)
    name = Column(String(100))
    email = Column(String(255))

    region = Column(String(50), index=True)
    city = Column(String(50))
    village = Column(String(50))

    categories = Column(JSON, default=list, nullable=False)
    language = Column(SQLEnum(SellerLanguage), default=SellerLanguage.ENGLISH, nullable=False)
    scale = Column(SQLEnum(BusinessScale))
    capacity = Column(String(200))

    has_documents = Column(Boolean, default=False, nullable=False)
    document_type = Column(SQLEnum(DocumentType))
    document_paths = Column(JSON, default=list, nullable=False)
    alternate_documents = Column(JSON, default=list, nullable=False)  # [{type, path, description}]

    verification_status = Column(
        SQLEnum(VerificationStatus), default=VerificationStatus.PENDING, nullable=False, index=True
    )

    # Union membership; id and referral code are assigned once, on INSERT
    union_membership_id = Column(String(16), unique=True, default=generate_union_membership_id)
    union_issue_date = Column(DateTime(timezone=True))
    union_expiry_date = Column(DateTime(timezone=True))
    union_status = Column(SQLEnum(MembershipStatus), default=MembershipStatus.ACTIVE, nullable=False)
    union_status_reason = Column(String(500))

    referral_code = Column(String(6), unique=True, default=generate_referral_code)
    referred_by_id = Column(UUID(as_uuid=True), ForeignKey("sellers.id"))

    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    support_tickets = relationship(
        "SellerSupportTicket",
        back_populates="seller",
        order_by="SellerSupportTicket.created_at",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    referred_by = relationship("Seller", remote_side=[id])

    __mapper_args__ = {"version_id_col": version}

    @property
    def verification_badge_color(self) -> str:
        return BADGE_COLORS.get(self.verification_status, "gray")

    @property
    def is_profile_complete(self) -> bool:
        return bool(self.name)

    @property
    def union_membership(self) -> dict:
        return {
            "id": self.union_membership_id,
            "issue_date": self.union_issue_date,
            "expiry_date": self.union_expiry_date,
            "status": self.union_status,
            "reason": self.union_status_reason,
        }


class SellerSupportTicket(Base):
    __tablename__ = "seller_support_tickets"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    seller_id = Column(UUID(as_uuid=True), ForeignKey("sellers.id"), nullable=False, index=True)
    issue = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    status = Column(SQLEnum(TicketStatus), default=TicketStatus.OPEN, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    seller = relationship("Seller", back_populates="support_tickets")
