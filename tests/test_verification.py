import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from app.core.exceptions import ConflictException, PersistenceException
from app.core.verification import (
    PROVISIONAL_PERIOD,
    AdminAction,
    AlternateDocumentSubmission,
    VerificationState,
    append_history,
    apply_admin_decision,
    apply_seller_alternate_submission,
    apply_seller_declaration,
    apply_seller_document_submission,
    can_renew_provisional,
    combined_state,
    create_verification,
    find_verification_by_seller,
    is_provisional_expired,
)
from app.database import AsyncSessionLocal
from app.models.seller import AlternateDocumentType, DocumentType, MembershipStatus, VerificationStatus
from app.models.verification import HistoryAction, Verification, VerificationRecordStatus
from app.services.storage_service import StorageService
from app.services.verification_service import VerificationService
from app.utils.validators import FileCandidate

from tests.conftest import make_seller

MB = 1024 * 1024
T0 = datetime(2026, 3, 1, 10, 30, tzinfo=timezone.utc)
ADMIN_ID = uuid.uuid4()


def stored(name, mimetype="image/jpeg", size=MB):
    return FileCandidate(mimetype=mimetype, size=size, original_filename=name, storage_path=f"/uploads/{name}")


def submitted_seller():
    """A seller who has just uploaded two PAN card scans."""
    seller = make_seller()
    result = apply_seller_document_submission(
        seller, None, [stored("pan-front.jpg"), stored("pan-back.jpg")], DocumentType.PAN, now=T0
    )
    return result.seller, result.verification


def test_first_document_submission_creates_pending_record():
    seller, verification = submitted_seller()

    assert verification.status == VerificationRecordStatus.PENDING
    assert len(verification.documents) == 2
    assert verification.document_type == DocumentType.PAN
    assert verification.history == []
    assert seller.verification_status == VerificationStatus.PENDING
    assert seller.has_documents is True
    assert seller.document_paths == ["/uploads/pan-front.jpg", "/uploads/pan-back.jpg"]
    assert seller.union_expiry_date is None
    assert combined_state(seller, verification) == VerificationState.DOCS_SUBMITTED


def test_untyped_submission_uses_declared_document_type():
    seller = make_seller(document_type=DocumentType.VOTER_ID)

    result = apply_seller_document_submission(seller, None, [stored("voter-id.jpg")], now=T0)

    assert seller.document_type == DocumentType.VOTER_ID
    assert result.verification.document_type == DocumentType.VOTER_ID


def test_untyped_submission_without_declaration_keeps_records_in_step():
    seller = make_seller()

    result = apply_seller_document_submission(seller, None, [stored("id.jpg")], now=T0)

    assert seller.document_type == DocumentType.PAN
    assert result.verification.document_type == seller.document_type


def test_document_submission_requires_files():
    with pytest.raises(ValueError):
        apply_seller_document_submission(make_seller(), None, [], DocumentType.PAN)


def test_alternate_submission_grants_provisional_membership():
    seller = make_seller()
    work_photo = AlternateDocumentSubmission(
        file=stored("loom.png", "image/png", 2 * MB),
        type=AlternateDocumentType.WORK_PHOTO,
        description="Weaving at the family loom",
    )
    result = apply_seller_alternate_submission(seller, None, [work_photo], now=T0)
    verification = result.verification

    assert seller.verification_status == VerificationStatus.PROVISIONAL
    assert seller.union_expiry_date == T0 + timedelta(days=90)
    assert seller.alternate_documents == [
        {"type": "Work Photo", "path": "/uploads/loom.png", "description": "Weaving at the family loom"}
    ]
    assert verification.status == VerificationRecordStatus.UNDER_REVIEW
    assert verification.provisional_details["is_provisional"] is True
    assert verification.provisional_details["expiry_date"] == T0 + timedelta(days=90)
    assert verification.alternate_documents[0]["uploaded_at"] == T0.isoformat()
    assert combined_state(seller, verification) == VerificationState.ALT_DOCS_SUBMITTED


def test_alternate_resubmission_keeps_existing_expiry():
    seller = make_seller()
    first = apply_seller_alternate_submission(
        seller, None, [AlternateDocumentSubmission(file=stored("a.png", "image/png"))], now=T0
    )
    later = T0 + timedelta(days=30)
    second = apply_seller_alternate_submission(
        seller, first.verification, [AlternateDocumentSubmission(file=stored("b.png", "image/png"))], now=later
    )

    assert seller.union_expiry_date == T0 + PROVISIONAL_PERIOD
    assert second.verification.provisional_expiry_date == T0 + PROVISIONAL_PERIOD
    assert len(second.verification.alternate_documents) == 2
    assert [h.action for h in second.verification.history] == [HistoryAction.RESUBMITTED]


def test_approve_sets_issue_date_and_activates_membership():
    seller, verification = submitted_seller()
    approved_at = T0 + timedelta(days=2)

    apply_admin_decision(seller, verification, AdminAction.APPROVE, notes="Clear scans", admin_id=ADMIN_ID, now=approved_at)

    assert seller.verification_status == VerificationStatus.VERIFIED
    assert seller.union_status == MembershipStatus.ACTIVE
    assert seller.union_issue_date == approved_at
    assert verification.status == VerificationRecordStatus.APPROVED
    assert verification.reviewed_by == ADMIN_ID
    assert verification.reviewed_at == approved_at
    assert verification.admin_notes == "Clear scans"
    assert combined_state(seller, verification) == VerificationState.VERIFIED


def test_second_approval_keeps_first_issue_date():
    seller, verification = submitted_seller()
    first = T0 + timedelta(days=1)

    apply_admin_decision(seller, verification, AdminAction.APPROVE, admin_id=ADMIN_ID, now=first)
    apply_admin_decision(seller, verification, AdminAction.APPROVE, admin_id=ADMIN_ID, now=first + timedelta(days=5))

    assert seller.union_issue_date == first


def test_rejection_records_reason_and_one_history_entry():
    seller, verification = submitted_seller()

    apply_admin_decision(
        seller, verification, AdminAction.REJECT, rejection_reason="Blurry PAN card", admin_id=ADMIN_ID, now=T0
    )

    assert seller.verification_status == VerificationStatus.PENDING
    assert verification.status == VerificationRecordStatus.REJECTED
    assert verification.rejection_reason == "Blurry PAN card"
    assert len(verification.history) == 1
    assert verification.history[0].action == HistoryAction.REJECTED
    assert verification.history[0].admin_id == ADMIN_ID
    assert combined_state(seller, verification) == VerificationState.REJECTED


def test_rejected_seller_can_resubmit():
    seller, verification = submitted_seller()
    apply_admin_decision(seller, verification, AdminAction.REJECT, rejection_reason="Blurry", now=T0)

    result = apply_seller_document_submission(
        seller, verification, [stored("pan-sharp.jpg")], DocumentType.PAN, now=T0 + timedelta(hours=3)
    )

    assert result.created is False
    assert seller.verification_status == VerificationStatus.PENDING
    assert verification.status == VerificationRecordStatus.PENDING
    assert len(verification.documents) == 3
    assert [h.action for h in verification.history] == [HistoryAction.REJECTED, HistoryAction.RESUBMITTED]
    assert combined_state(seller, verification) == VerificationState.DOCS_SUBMITTED


def test_rejection_without_record_creates_one():
    seller = make_seller(document_type=DocumentType.AADHAAR)

    result = apply_admin_decision(seller, None, AdminAction.REJECT, rejection_reason="No documents", now=T0)

    assert result.created is True
    assert result.verification.seller_id == seller.id
    assert result.verification.document_type == DocumentType.AADHAAR
    assert result.verification.status == VerificationRecordStatus.REJECTED


def test_provisional_grant_expiry_boundaries():
    seller, verification = submitted_seller()

    apply_admin_decision(seller, verification, AdminAction.PROVISIONAL, admin_id=ADMIN_ID, now=T0)

    expiry = T0 + timedelta(days=90)
    assert seller.union_expiry_date == expiry
    assert verification.provisional_expiry_date == expiry
    assert verification.history[-1].action == HistoryAction.UNDER_REVIEW
    assert combined_state(seller, verification) == VerificationState.PROVISIONAL_UNDER_REVIEW
    assert not is_provisional_expired(verification, T0 + timedelta(days=89, hours=23, minutes=59))
    assert not is_provisional_expired(verification, expiry)
    assert is_provisional_expired(verification, T0 + timedelta(days=90, seconds=1))


def test_admin_provisional_grant_overwrites_expiry():
    seller = make_seller()
    apply_seller_alternate_submission(seller, None, [AlternateDocumentSubmission(file=stored("a.png", "image/png"))], now=T0)
    first_expiry = seller.union_expiry_date

    later = T0 + timedelta(days=10)
    result = apply_admin_decision(seller, None, AdminAction.PROVISIONAL, now=later)

    assert seller.union_expiry_date == later + timedelta(days=90)
    assert seller.union_expiry_date > first_expiry
    assert result.verification.provisional_expiry_date == seller.union_expiry_date


def test_renewal_capped_at_max_renewals():
    verification = create_verification(uuid.uuid4(), DocumentType.NONE)
    assert not can_renew_provisional(verification)

    verification.is_provisional = True
    assert can_renew_provisional(verification)

    verification.renewal_count = 2
    assert verification.is_provisional
    assert not can_renew_provisional(verification)


def test_history_is_append_only():
    seller, verification = submitted_seller()
    actions = [AdminAction.REJECT, AdminAction.PROVISIONAL, AdminAction.APPROVE]
    snapshots = []

    for step, action in enumerate(actions):
        apply_admin_decision(
            seller, verification, action, notes=f"step {step}", admin_id=ADMIN_ID, now=T0 + timedelta(days=step)
        )
        for index, snapshot in enumerate(snapshots):
            entry = verification.history[index]
            assert (entry.sequence, entry.action, entry.timestamp, entry.admin_id, entry.notes) == snapshot
        latest = verification.history[-1]
        snapshots.append((latest.sequence, latest.action, latest.timestamp, latest.admin_id, latest.notes))

    assert len(verification.history) == len(actions)
    assert [h.sequence for h in verification.history] == [1, 2, 3]


def test_append_history_numbers_entries():
    verification = create_verification(uuid.uuid4())
    append_history(verification, HistoryAction.SUBMITTED, now=T0)
    append_history(verification, HistoryAction.UNDER_REVIEW, admin_id=ADMIN_ID, notes="checking", now=T0)

    assert [(h.sequence, h.action) for h in verification.history] == [
        (1, HistoryAction.SUBMITTED),
        (2, HistoryAction.UNDER_REVIEW),
    ]


def test_unknown_admin_action_rejected():
    seller, verification = submitted_seller()
    with pytest.raises(ValueError):
        apply_admin_decision(seller, verification, "suspend")


def test_declaring_no_documents_grants_provisional():
    seller = make_seller()
    result = apply_seller_declaration(seller, None, has_documents=False, now=T0)

    assert result.created is True
    assert seller.document_type == DocumentType.NONE
    assert seller.verification_status == VerificationStatus.PROVISIONAL
    assert seller.union_expiry_date == T0 + PROVISIONAL_PERIOD
    assert result.verification.is_provisional is True


def test_declaration_leaves_verified_seller_alone():
    seller, verification = submitted_seller()
    apply_admin_decision(seller, verification, AdminAction.APPROVE, now=T0)

    apply_seller_declaration(seller, verification, has_documents=False, now=T0 + timedelta(days=1))

    assert seller.verification_status == VerificationStatus.VERIFIED
    assert verification.status == VerificationRecordStatus.APPROVED


def test_mismatched_records_have_no_combined_state():
    seller, verification = submitted_seller()
    seller.verification_status = VerificationStatus.VERIFIED
    assert combined_state(seller, verification) is None


async def test_concurrent_admin_decisions_keep_first_and_conflict_on_second(seller, admin, db):
    submission = apply_seller_document_submission(seller, None, [stored("pan.jpg")], DocumentType.PAN, now=T0)
    await VerificationService.persist_transition(db, submission)

    async with AsyncSessionLocal() as first, AsyncSessionLocal() as second:
        seller_a = await VerificationService.get_seller(first, seller.id)
        verification_a = await find_verification_by_seller(first, seller.id)
        seller_b = await VerificationService.get_seller(second, seller.id)
        verification_b = await find_verification_by_seller(second, seller.id)

        approved = apply_admin_decision(seller_a, verification_a, AdminAction.APPROVE, admin_id=admin.id, now=T0)
        await VerificationService.persist_transition(first, approved)

        rejected = apply_admin_decision(
            seller_b, verification_b, AdminAction.REJECT, rejection_reason="Blurry scan", admin_id=admin.id, now=T0
        )
        with pytest.raises(ConflictException):
            await VerificationService.persist_transition(second, rejected)

    async with AsyncSessionLocal() as fresh:
        stored_seller = await VerificationService.get_seller(fresh, seller.id)
        stored_verification = await find_verification_by_seller(fresh, seller.id)

        assert stored_seller.verification_status == VerificationStatus.VERIFIED
        assert stored_verification.status == VerificationRecordStatus.APPROVED
        assert stored_verification.rejection_reason is None
        assert [h.action for h in stored_verification.history] == [HistoryAction.APPROVED]


async def test_failed_commit_rolls_back_both_records_and_removes_uploads(seller, db, monkeypatch):
    upload = StorageService.upload_root() / "pan-scan.jpg"
    upload.write_bytes(b"\xff\xd8scan")
    document = FileCandidate(
        mimetype="image/jpeg", size=6, original_filename="pan-scan.jpg", storage_path=str(upload)
    )
    result = apply_seller_document_submission(seller, None, [document], DocumentType.PAN, now=T0)

    async def commit_after_disk_failure():
        await db.flush()
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", commit_after_disk_failure)

    with pytest.raises(PersistenceException):
        await VerificationService.persist_transition(db, result, [str(upload)], context="document submission")

    assert not upload.exists()
    async with AsyncSessionLocal() as fresh:
        records = await fresh.execute(select(Verification).where(Verification.seller_id == seller.id))
        assert records.scalar_one_or_none() is None

        stored_seller = await VerificationService.get_seller(fresh, seller.id)
        assert stored_seller.document_paths == []
        assert stored_seller.has_documents is False
