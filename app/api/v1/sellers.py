from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
from app.database import get_db
from app.api.deps import get_current_seller
from app.models.seller import Seller, SellerSupportTicket, DocumentType, AlternateDocumentType, TicketStatus
from app.core.exceptions import FileValidationException, BadRequestException
from app.core.verification import (
    AlternateDocumentSubmission,
    apply_seller_declaration,
    apply_seller_document_submission,
    apply_seller_alternate_submission,
    find_verification_by_seller,
)
from app.schemas.seller import (
    SellerRegistration, SellerProfileUpdate, SellerProfileResponse, RegistrationResponse,
    DocumentUploadResponse, VerificationStatusResponse, SupportTicketCreate, SupportTicketResponse,
)
from app.services.storage_service import StorageService
from app.services.verification_service import VerificationService
from app.utils.validators import validate_batch
from app.utils.logger import logger

router = APIRouter()

PROFILE_FIELDS = ("name", "email", "region", "city", "village", "categories", "language", "scale", "capacity")


def _apply_profile(seller: Seller, fields: dict) -> None:
    for key in PROFILE_FIELDS:
        if key not in fields:
            continue
        value = fields[key]
        if key == "categories" and value is not None:
            value = [c.value if hasattr(c, "value") else c for c in value]
        setattr(seller, key, value)


@router.post("/register", response_model=RegistrationResponse)
async def register_seller(
    registration: SellerRegistration,
    seller: Seller = Depends(get_current_seller),
    db: AsyncSession = Depends(get_db)
):
    """Complete the seller profile and declare whether identity documents are available"""
    _apply_profile(seller, registration.model_dump(include=set(PROFILE_FIELDS)))

    verification = await find_verification_by_seller(db, seller.id)
    result = apply_seller_declaration(
        seller,
        verification,
        has_documents=registration.has_documents,
        document_type=registration.document_type,
    )
    await VerificationService.persist_transition(db, result, context="registration")

    return RegistrationResponse(
        message="Registration completed successfully",
        id=seller.id,
        name=seller.name,
        verification_status=seller.verification_status,
        union_membership=seller.union_membership,
    )


@router.get("/profile", response_model=SellerProfileResponse)
async def get_profile(seller: Seller = Depends(get_current_seller)):
    return seller


@router.put("/profile", response_model=SellerProfileResponse)
async def update_profile(
    update: SellerProfileUpdate,
    seller: Seller = Depends(get_current_seller),
    db: AsyncSession = Depends(get_db)
):
    _apply_profile(seller, update.model_dump(exclude_unset=True))
    await db.commit()
    await db.refresh(seller)
    logger.info(f"Seller profile updated: {seller.id}")
    return seller


@router.post("/upload-documents", response_model=DocumentUploadResponse)
async def upload_documents(
    documents: List[UploadFile] = File(...),
    document_type: Optional[DocumentType] = Form(None),
    seller: Seller = Depends(get_current_seller),
    db: AsyncSession = Depends(get_db)
):
    """Upload standard identity documents (PAN, Aadhaar, ...)"""
    if document_type == DocumentType.NONE:
        raise BadRequestException("Use the alternate documents upload when no identity document is available")

    uploads = await StorageService.read_uploads(documents)
    validation = validate_batch([candidate for candidate, _ in uploads])
    if not validation.is_valid:
        raise FileValidationException(validation.errors)

    verification = await find_verification_by_seller(db, seller.id)
    saved = StorageService.save_all(uploads)
    written = [c.storage_path for c in saved]

    try:
        result = apply_seller_document_submission(seller, verification, saved, document_type)
    except ValueError as e:
        StorageService.cleanup(written)
        raise BadRequestException(str(e))
    await VerificationService.persist_transition(db, result, written, context="document submission")

    return DocumentUploadResponse(
        message="Documents uploaded successfully",
        documents=StorageService.describe(saved),
        verification_status=seller.verification_status,
    )


@router.post("/alternate-documents", response_model=DocumentUploadResponse)
async def upload_alternate_documents(
    alternate_documents: List[UploadFile] = File(...),
    types: List[AlternateDocumentType] = Form([]),
    descriptions: List[str] = Form([]),
    seller: Seller = Depends(get_current_seller),
    db: AsyncSession = Depends(get_db)
):
    """Upload alternate evidence (shop license, work photo, ...) for sellers without identity documents"""
    uploads = await StorageService.read_uploads(alternate_documents)
    validation = validate_batch([candidate for candidate, _ in uploads])
    if not validation.is_valid:
        raise FileValidationException(validation.errors)

    verification = await find_verification_by_seller(db, seller.id)
    saved = StorageService.save_all(uploads)
    written = [c.storage_path for c in saved]

    submissions = [
        AlternateDocumentSubmission(
            file=candidate,
            type=types[index] if index < len(types) else AlternateDocumentType.OTHER,
            description=descriptions[index] if index < len(descriptions) else "",
        )
        for index, candidate in enumerate(saved)
    ]
    try:
        result = apply_seller_alternate_submission(seller, verification, submissions)
    except ValueError as e:
        StorageService.cleanup(written)
        raise BadRequestException(str(e))
    await VerificationService.persist_transition(db, result, written, context="alternate document submission")

    return DocumentUploadResponse(
        message="Alternate documents uploaded successfully",
        documents=StorageService.describe(saved),
        verification_status=seller.verification_status,
        union_membership=seller.union_membership,
    )


@router.get("/verification-status", response_model=VerificationStatusResponse, response_model_exclude_none=True)
async def get_verification_status(
    seller: Seller = Depends(get_current_seller),
    db: AsyncSession = Depends(get_db)
):
    return await VerificationService.get_verification_status(db, seller.id)


@router.post("/report-issue", response_model=SupportTicketResponse, status_code=status.HTTP_201_CREATED)
async def report_issue(
    ticket_data: SupportTicketCreate,
    seller: Seller = Depends(get_current_seller),
    db: AsyncSession = Depends(get_db)
):
    ticket = SellerSupportTicket(
        seller_id=seller.id,
        issue=ticket_data.issue.strip(),
        description=ticket_data.description.strip(),
        status=TicketStatus.OPEN,
    )
    db.add(ticket)
    await db.commit()
    await db.refresh(ticket)

    logger.info(f"Support ticket {ticket.id} opened by seller {seller.id}")
    return ticket


@router.get("/support-tickets", response_model=List[SupportTicketResponse])
async def get_support_tickets(
    seller: Seller = Depends(get_current_seller),
    db: AsyncSession = Depends(get_db)
):
    await db.refresh(seller, attribute_names=["support_tickets"])
    return seller.support_tickets
