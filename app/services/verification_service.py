from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError
from app.core.exceptions import NotFoundException, ConflictException, PersistenceException
from app.core.verification import (
    TransitionResult,
    find_verification_by_seller,
    is_provisional_expired,
    can_renew_provisional,
    summarize,
    utcnow,
)
from app.models.seller import Seller
from app.services.storage_service import StorageService
from app.utils.logger import logger


class VerificationService:
    @staticmethod
    async def get_seller(db: AsyncSession, seller_id: UUID) -> Seller:
        result = await db.execute(select(Seller).where(Seller.id == seller_id))
        seller = result.scalar_one_or_none()
        if not seller:
            raise NotFoundException("Seller", str(seller_id))
        return seller

    @staticmethod
    async def persist_transition(
        db: AsyncSession,
        result: TransitionResult,
        written_files: Iterable[str] = (),
        context: str = "verification",
    ) -> TransitionResult:
        """
        Save the seller and its verification record in one transaction.

        Both rows are versioned, so a concurrent update of either one fails the
        whole commit instead of leaving the two records out of step. Uploaded
        files written for this transition are deleted when the commit fails.
        """
        written_files = list(written_files)
        seller_id = result.seller.id
        db.add(result.seller)
        if result.created:
            db.add(result.verification)

        try:
            await db.commit()
        except (StaleDataError, IntegrityError) as e:
            await db.rollback()
            StorageService.cleanup(written_files)
            logger.warning(f"Concurrent {context} update for seller {seller_id}: {e}")
            raise ConflictException("Seller verification was modified concurrently, please retry")
        except SQLAlchemyError as e:
            await db.rollback()
            StorageService.cleanup(written_files)
            logger.error(
                f"Failed to persist {context} transition for seller {seller_id}; "
                f"seller and verification rolled back together: {e}",
                exc_info=True,
            )
            raise PersistenceException()

        logger.info(
            f"{context} transition saved for seller {result.seller.id}: "
            f"seller={result.seller.verification_status.value} verification={result.verification.status.value}"
        )
        return result

    @staticmethod
    async def get_verification_status(
        db: AsyncSession, seller_id: UUID, now: Optional[datetime] = None
    ) -> dict:
        seller = await VerificationService.get_seller(db, seller_id)
        verification = await find_verification_by_seller(db, seller.id)

        response = {
            "verification_status": seller.verification_status,
            "union_membership": seller.union_membership,
            "has_documents": seller.has_documents,
            "document_type": seller.document_type,
            "verification": summarize(verification),
        }

        if verification is not None and verification.is_provisional:
            response["is_provisional_expired"] = is_provisional_expired(verification, now or utcnow())
            response["can_renew"] = can_renew_provisional(verification)

        return response
