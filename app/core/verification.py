"""
Seller verification and provisional membership transitions.

A seller's membership is tracked in two records: the ``Verification`` row is
the admin-facing decision ledger, and the seller's ``verification_status`` and
``union_*`` columns are a projection of it. Every transition below mutates
both objects in memory and returns them; none of them performs I/O. Callers
persist the pair in one transaction (see ``VerificationService``).

Combined states (see ``combined_state``)::

    UNVERIFIED     --documents-->      DOCS_SUBMITTED
    UNVERIFIED     --alternate docs--> ALT_DOCS_SUBMITTED
    any            --approve-->        VERIFIED
    any            --reject-->         REJECTED  --documents--> DOCS_SUBMITTED
    any            --provisional-->    PROVISIONAL_UNDER_REVIEW

Provisional grants always run for ninety days. Expiry is computed on read;
nothing downgrades an expired seller automatically. Renewal is modelled
(``renewal_count``/``max_renewals``) but no transition performs one.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.seller import (
    Seller,
    DocumentType,
    AlternateDocumentType,
    VerificationStatus,
    MembershipStatus,
)
from app.models.verification import (
    Verification,
    VerificationHistory,
    VerificationRecordStatus,
    HistoryAction,
    DEFAULT_MAX_RENEWALS,
)
from app.utils.validators import FileCandidate

PROVISIONAL_PERIOD = timedelta(days=90)


class AdminAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    PROVISIONAL = "provisional"


class VerificationState(str, Enum):
    UNVERIFIED = "unverified"
    DOCS_SUBMITTED = "docs_submitted"
    ALT_DOCS_SUBMITTED = "alt_docs_submitted"
    VERIFIED = "verified"
    REJECTED = "rejected"
    PROVISIONAL_UNDER_REVIEW = "provisional_under_review"


@dataclass
class AlternateDocumentSubmission:
    file: FileCandidate
    type: AlternateDocumentType = AlternateDocumentType.OTHER
    description: str = ""


@dataclass
class TransitionResult:
    seller: Seller
    verification: Verification
    created: bool = False


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite returns naive datetimes for timezone-aware columns
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def provisional_expiry_from(now: datetime) -> datetime:
    return now + PROVISIONAL_PERIOD


# ---------------------------------------------------------------------------
# Verification record access
# ---------------------------------------------------------------------------

async def find_verification_by_seller(db: AsyncSession, seller_id: UUID) -> Optional[Verification]:
    result = await db.execute(select(Verification).where(Verification.seller_id == seller_id))
    return result.scalar_one_or_none()


def create_verification(
    seller_id: UUID,
    document_type: Optional[DocumentType] = None,
    initial_status: VerificationRecordStatus = VerificationRecordStatus.PENDING,
) -> Verification:
    """Build a new, not yet persisted, verification record for a seller."""
    verification = Verification(
        seller_id=seller_id,
        document_type=document_type or DocumentType.NONE,
        documents=[],
        alternate_documents=[],
        status=initial_status,
        is_provisional=False,
        renewal_count=0,
        max_renewals=DEFAULT_MAX_RENEWALS,
    )
    return verification


def append_history(
    verification: Verification,
    action: HistoryAction,
    admin_id: Optional[UUID] = None,
    notes: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Verification:
    """Add an entry to the end of the audit trail. Earlier entries are left untouched."""
    entry = VerificationHistory(
        sequence=len(verification.history) + 1,
        action=action,
        timestamp=now or utcnow(),
        admin_id=admin_id,
        notes=notes,
    )
    verification.history.append(entry)
    return verification


def can_renew_provisional(verification: Optional[Verification]) -> bool:
    if verification is None or not verification.is_provisional:
        return False
    max_renewals = DEFAULT_MAX_RENEWALS if verification.max_renewals is None else verification.max_renewals
    return (verification.renewal_count or 0) < max_renewals


def is_provisional_expired(verification: Optional[Verification], now: Optional[datetime] = None) -> bool:
    if verification is None or not verification.is_provisional:
        return False
    expiry = as_utc(verification.provisional_expiry_date)
    if expiry is None:
        return False
    return (now or utcnow()) > expiry


def combined_state(seller: Seller, verification: Optional[Verification]) -> Optional[VerificationState]:
    """
    Project the seller and verification records onto a single state.

    Returns None when the two records disagree, which only happens if they
    were written separately and one write was lost.
    """
    if verification is None:
        return VerificationState.UNVERIFIED

    status = verification.status
    seller_status = seller.verification_status

    if status == VerificationRecordStatus.APPROVED and seller_status == VerificationStatus.VERIFIED:
        return VerificationState.VERIFIED
    if status == VerificationRecordStatus.REJECTED and seller_status == VerificationStatus.PENDING:
        return VerificationState.REJECTED
    if status == VerificationRecordStatus.UNDER_REVIEW and seller_status == VerificationStatus.PROVISIONAL:
        if not verification.is_provisional:
            return None
        if verification.alternate_documents and not verification.documents:
            return VerificationState.ALT_DOCS_SUBMITTED
        return VerificationState.PROVISIONAL_UNDER_REVIEW
    if status == VerificationRecordStatus.PENDING and seller_status == VerificationStatus.PENDING:
        if verification.documents:
            return VerificationState.DOCS_SUBMITTED
        return VerificationState.UNVERIFIED
    return None


def _has_prior_submission(verification: Verification) -> bool:
    return bool(
        verification.documents
        or verification.alternate_documents
        or verification.status == VerificationRecordStatus.REJECTED
    )


# ---------------------------------------------------------------------------
# Seller-initiated transitions
# ---------------------------------------------------------------------------

def apply_seller_declaration(
    seller: Seller,
    verification: Optional[Verification],
    has_documents: bool,
    document_type: Optional[DocumentType] = None,
    now: Optional[datetime] = None,
) -> TransitionResult:
    """
    Profile completion: the seller declares whether standard ID documents exist.

    Declaring none grants a provisional membership straight away. A verified
    seller keeps their status; only the declaration fields change.
    """
    now = now or utcnow()
    seller.has_documents = has_documents
    if document_type is not None:
        seller.document_type = document_type
    elif not has_documents:
        seller.document_type = DocumentType.NONE

    created = verification is None
    if created:
        verification = create_verification(seller.id, seller.document_type)

    if seller.verification_status == VerificationStatus.VERIFIED:
        return TransitionResult(seller=seller, verification=verification, created=created)

    if has_documents:
        seller.verification_status = VerificationStatus.PENDING
        verification.status = VerificationRecordStatus.PENDING
    else:
        seller.verification_status = VerificationStatus.PROVISIONAL
        if seller.union_expiry_date is None:
            seller.union_expiry_date = provisional_expiry_from(now)
        verification.status = VerificationRecordStatus.UNDER_REVIEW
        verification.is_provisional = True
        verification.provisional_expiry_date = seller.union_expiry_date

    if seller.document_type is not None:
        verification.document_type = seller.document_type

    return TransitionResult(seller=seller, verification=verification, created=created)


def apply_seller_document_submission(
    seller: Seller,
    verification: Optional[Verification],
    validated_files: Sequence[FileCandidate],
    document_type: Optional[DocumentType] = None,
    now: Optional[datetime] = None,
) -> TransitionResult:
    """Standard identity documents were accepted: append them and queue for review."""
    if not validated_files:
        raise ValueError("At least one validated document is required")

    now = now or utcnow()
    paths = [f.storage_path for f in validated_files]

    if document_type is None and seller.document_type not in (None, DocumentType.NONE):
        document_type = seller.document_type
    document_type = document_type or DocumentType.PAN

    seller.document_paths = list(seller.document_paths or []) + paths
    seller.has_documents = True
    seller.verification_status = VerificationStatus.PENDING
    seller.document_type = document_type

    created = verification is None
    if created:
        verification = create_verification(seller.id, document_type)
    elif _has_prior_submission(verification):
        append_history(
            verification,
            HistoryAction.RESUBMITTED,
            notes=f"{len(paths)} identity document(s) resubmitted",
            now=now,
        )
    verification.document_type = document_type

    verification.documents = list(verification.documents or []) + paths
    verification.status = VerificationRecordStatus.PENDING

    return TransitionResult(seller=seller, verification=verification, created=created)


def apply_seller_alternate_submission(
    seller: Seller,
    verification: Optional[Verification],
    validated_alt_docs: Sequence[AlternateDocumentSubmission],
    now: Optional[datetime] = None,
) -> TransitionResult:
    """
    Alternate evidence was accepted: grant a provisional membership.

    An expiry already on the seller is kept, so resubmitting cannot extend
    the provisional window.
    """
    if not validated_alt_docs:
        raise ValueError("At least one validated alternate document is required")

    now = now or utcnow()
    seller_entries = [
        {
            "type": AlternateDocumentType(doc.type).value,
            "path": doc.file.storage_path,
            "description": doc.description or "",
        }
        for doc in validated_alt_docs
    ]
    verification_entries = [dict(entry, uploaded_at=now.isoformat()) for entry in seller_entries]

    seller.alternate_documents = list(seller.alternate_documents or []) + seller_entries
    seller.verification_status = VerificationStatus.PROVISIONAL
    if seller.union_expiry_date is None:
        seller.union_expiry_date = provisional_expiry_from(now)

    created = verification is None
    if created:
        verification = create_verification(seller.id, DocumentType.NONE)
    elif _has_prior_submission(verification):
        append_history(
            verification,
            HistoryAction.RESUBMITTED,
            notes=f"{len(seller_entries)} alternate document(s) resubmitted",
            now=now,
        )

    verification.alternate_documents = list(verification.alternate_documents or []) + verification_entries
    verification.status = VerificationRecordStatus.UNDER_REVIEW
    verification.is_provisional = True
    verification.provisional_expiry_date = seller.union_expiry_date

    return TransitionResult(seller=seller, verification=verification, created=created)


# ---------------------------------------------------------------------------
# Admin decisions
# ---------------------------------------------------------------------------

def _approve(seller: Seller, verification: Verification, rejection_reason: Optional[str], now: datetime) -> None:
    seller.verification_status = VerificationStatus.VERIFIED
    seller.union_status = MembershipStatus.ACTIVE
    if seller.union_issue_date is None:
        seller.union_issue_date = now
    verification.status = VerificationRecordStatus.APPROVED


def _reject(seller: Seller, verification: Verification, rejection_reason: Optional[str], now: datetime) -> None:
    # Back to pending, not a dead end: the seller may resubmit
    seller.verification_status = VerificationStatus.PENDING
    verification.status = VerificationRecordStatus.REJECTED
    verification.rejection_reason = rejection_reason


def _grant_provisional(seller: Seller, verification: Verification, rejection_reason: Optional[str], now: datetime) -> None:
    expiry = provisional_expiry_from(now)
    seller.verification_status = VerificationStatus.PROVISIONAL
    seller.union_status = MembershipStatus.ACTIVE
    if seller.union_issue_date is None:
        seller.union_issue_date = now
    seller.union_expiry_date = expiry
    verification.status = VerificationRecordStatus.UNDER_REVIEW
    verification.is_provisional = True
    verification.provisional_expiry_date = expiry


_ADMIN_TRANSITIONS: Dict[AdminAction, Callable[[Seller, Verification, Optional[str], datetime], None]] = {
    AdminAction.APPROVE: _approve,
    AdminAction.REJECT: _reject,
    AdminAction.PROVISIONAL: _grant_provisional,
}

HISTORY_ACTIONS: Dict[AdminAction, HistoryAction] = {
    AdminAction.APPROVE: HistoryAction.APPROVED,
    AdminAction.REJECT: HistoryAction.REJECTED,
    AdminAction.PROVISIONAL: HistoryAction.UNDER_REVIEW,
}


def apply_admin_decision(
    seller: Seller,
    verification: Optional[Verification],
    action: AdminAction,
    notes: Optional[str] = None,
    rejection_reason: Optional[str] = None,
    admin_id: Optional[UUID] = None,
    now: Optional[datetime] = None,
) -> TransitionResult:
    """
    Apply an admin's approve/reject/provisional decision.

    A seller without a verification record gets one on the spot, so any
    action, rejection included, is valid as the first review.
    """
    action = AdminAction(action)
    now = now or utcnow()

    created = verification is None
    if created:
        verification = create_verification(seller.id, seller.document_type)

    _ADMIN_TRANSITIONS[action](seller, verification, rejection_reason, now)

    verification.admin_notes = notes
    verification.reviewed_by = admin_id
    verification.reviewed_at = now
    append_history(verification, HISTORY_ACTIONS[action], admin_id=admin_id, notes=notes, now=now)

    return TransitionResult(seller=seller, verification=verification, created=created)


def summarize(verification: Optional[Verification]) -> Optional[dict]:
    """Admin/seller facing summary of a verification record."""
    if verification is None:
        return None
    return {
        "status": verification.status,
        "admin_notes": verification.admin_notes,
        "rejection_reason": verification.rejection_reason,
        "reviewed_at": verification.reviewed_at,
        "provisional_details": verification.provisional_details,
    }


def history_entries(verification: Verification) -> List[dict]:
    return [
        {
            "action": entry.action,
            "timestamp": entry.timestamp,
            "admin_id": entry.admin_id,
            "notes": entry.notes,
        }
        for entry in verification.history
    ]
