from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_, cast, String
from typing import Optional
from collections import Counter
from datetime import datetime, timedelta, timezone
from uuid import UUID
from app.database import get_db
from app.api.deps import get_current_admin, require_permission
from app.models.admin import Admin
from app.models.seller import Seller, SellerCategory, VerificationStatus
from app.models.verification import Verification
from app.models.product import Product, ProductStatus
from app.core.permissions import AdminPermission
from app.core.exceptions import BadRequestException
from app.core.verification import (
    apply_admin_decision,
    find_verification_by_seller,
    combined_state,
    summarize,
    history_entries,
)
from app.schemas.admin import (
    VerifyRequest, VerifyResponse, MembershipUpdate, MembershipResponse,
    AdminSellerDetail, DashboardResponse, DashboardStatistics, AnalyticsResponse, CountBucket,
)
from app.schemas.common import PaginatedResponse
from app.schemas.seller import SellerProfileResponse
from app.services.admin_service import AdminService
from app.services.verification_service import VerificationService
from app.utils.logger import logger

router = APIRouter()

SORTABLE_FIELDS = {
    "created_at": Seller.created_at,
    "name": Seller.name,
    "region": Seller.region,
    "verification_status": Seller.verification_status,
}

ANALYTICS_PERIODS = {"7d": 7, "30d": 30, "90d": 90}


def _seller_payload(seller: Seller) -> dict:
    return SellerProfileResponse.model_validate(seller).model_dump()


@router.get("/sellers", response_model=PaginatedResponse)
async def list_sellers(
    status: Optional[str] = Query(None, description="verified, provisional, pending or all"),
    category: Optional[SellerCategory] = None,
    region: Optional[str] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    sort_by: str = Query("created_at"),
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    admin: Admin = Depends(require_permission(AdminPermission.VERIFY_SELLERS)),
    db: AsyncSession = Depends(get_db)
):
    """List sellers with verification summaries"""
    query = select(Seller)

    if status and status != "all":
        try:
            query = query.where(Seller.verification_status == VerificationStatus(status))
        except ValueError:
            raise BadRequestException(f"Unknown verification status: {status}")
    if category:
        # categories is a JSON array; match the quoted member in its text form
        query = query.where(cast(Seller.categories, String).like(f'%"{category.value}"%'))
    if region:
        query = query.where(Seller.region.ilike(f"%{region}%"))
    if search:
        query = query.where(or_(
            Seller.name.ilike(f"%{search}%"),
            Seller.phone.ilike(f"%{search}%"),
            Seller.email.ilike(f"%{search}%"),
        ))

    total_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = total_result.scalar() or 0

    sort_column = SORTABLE_FIELDS.get(sort_by, Seller.created_at)
    query = query.order_by(sort_column.desc() if sort_order == "desc" else sort_column.asc())
    result = await db.execute(query.offset((page - 1) * limit).limit(limit))
    sellers = result.scalars().all()

    verifications = {}
    if sellers:
        v_result = await db.execute(
            select(Verification).where(Verification.seller_id.in_([s.id for s in sellers]))
        )
        verifications = {v.seller_id: v for v in v_result.scalars().all()}

    items = []
    for seller in sellers:
        item = _seller_payload(seller)
        item["verification"] = summarize(verifications.get(seller.id))
        items.append(item)

    return PaginatedResponse.build(items, total, page, limit)


@router.get("/sellers/{seller_id}", response_model=AdminSellerDetail)
async def get_seller_detail(
    seller_id: UUID,
    admin: Admin = Depends(require_permission(AdminPermission.VERIFY_SELLERS)),
    db: AsyncSession = Depends(get_db)
):
    seller = await VerificationService.get_seller(db, seller_id)
    verification = await find_verification_by_seller(db, seller.id)

    products_result = await db.execute(
        select(Product).where(Product.seller_id == seller.id).order_by(Product.created_at.desc())
    )
    products = [
        {"id": p.id, "name": p.name, "category": p.category, "status": p.status, "created_at": p.created_at}
        for p in products_result.scalars().all()
    ]

    detail = _seller_payload(seller)
    detail["products"] = products
    state = combined_state(seller, verification)
    detail["verification_state"] = state.value if state else None
    if verification is not None:
        detail["verification"] = dict(
            summarize(verification),
            id=verification.id,
            document_type=verification.document_type,
            documents=verification.documents or [],
            alternate_documents=verification.alternate_documents or [],
            reviewed_by=verification.reviewed_by,
            history=history_entries(verification),
        )
    return detail


@router.put("/verify/{seller_id}", response_model=VerifyResponse)
async def verify_seller(
    seller_id: UUID,
    decision: VerifyRequest,
    request: Request,
    admin: Admin = Depends(require_permission(AdminPermission.VERIFY_SELLERS)),
    db: AsyncSession = Depends(get_db)
):
    """Approve, reject or provisionally approve a seller"""
    seller = await VerificationService.get_seller(db, seller_id)
    verification = await find_verification_by_seller(db, seller.id)

    result = apply_admin_decision(
        seller,
        verification,
        decision.action,
        notes=decision.notes,
        rejection_reason=decision.rejection_reason,
        admin_id=admin.id,
    )
    AdminService.record_activity(db, admin, f"verify-{decision.action.value}", str(seller.id), request)
    await VerificationService.persist_transition(db, result, context=f"admin {decision.action.value}")

    logger.info(f"Admin {admin.username} applied {decision.action.value} to seller {seller.id}")
    past_tense = {"approve": "approved", "reject": "rejected", "provisional": "provisionally approved"}
    return VerifyResponse(
        message=f"Seller verification {past_tense[decision.action.value]} successfully",
        seller_id=seller.id,
        verification_status=seller.verification_status,
        union_membership=seller.union_membership,
        verification=summarize(result.verification),
    )


@router.put("/membership/{seller_id}", response_model=MembershipResponse)
async def update_membership(
    seller_id: UUID,
    update: MembershipUpdate,
    request: Request,
    admin: Admin = Depends(require_permission(AdminPermission.MANAGE_MEMBERSHIP)),
    db: AsyncSession = Depends(get_db)
):
    """Activate, suspend or expire a seller's union membership"""
    seller = await VerificationService.get_seller(db, seller_id)

    seller.union_status = update.status
    if update.reason:
        seller.union_status_reason = update.reason

    AdminService.record_activity(db, admin, f"membership-{update.status.value}", str(seller.id), request)
    await db.commit()

    logger.info(f"Admin {admin.username} set membership of seller {seller.id} to {update.status.value}")
    return MembershipResponse(
        message=f"Union membership set to {update.status.value}",
        union_membership=seller.union_membership,
    )


async def _count(db: AsyncSession, query) -> int:
    result = await db.execute(query)
    return result.scalar() or 0


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    admin: Admin = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Get admin dashboard statistics"""
    statistics = DashboardStatistics(
        total_sellers=await _count(db, select(func.count(Seller.id))),
        verified_sellers=await _count(
            db, select(func.count(Seller.id)).where(Seller.verification_status == VerificationStatus.VERIFIED)
        ),
        provisional_sellers=await _count(
            db, select(func.count(Seller.id)).where(Seller.verification_status == VerificationStatus.PROVISIONAL)
        ),
        pending_sellers=await _count(
            db, select(func.count(Seller.id)).where(Seller.verification_status == VerificationStatus.PENDING)
        ),
        total_products=await _count(db, select(func.count(Product.id))),
        active_products=await _count(
            db, select(func.count(Product.id)).where(Product.status == ProductStatus.ACTIVE)
        ),
    )

    sellers_result = await db.execute(select(Seller).order_by(Seller.created_at.desc()).limit(5))
    recent_sellers = [
        {
            "id": s.id,
            "name": s.name,
            "phone": s.phone,
            "verification_status": s.verification_status,
            "created_at": s.created_at,
        }
        for s in sellers_result.scalars().all()
    ]

    products_result = await db.execute(
        select(Product, Seller.name)
        .join(Seller, Product.seller_id == Seller.id)
        .order_by(Product.created_at.desc())
        .limit(5)
    )
    recent_products = [
        {
            "id": p.id,
            "name": p.name,
            "category": p.category,
            "status": p.status,
            "seller_name": seller_name,
            "created_at": p.created_at,
        }
        for p, seller_name in products_result.all()
    ]

    return DashboardResponse(statistics=statistics, recent_sellers=recent_sellers, recent_products=recent_products)


@router.get("/analytics", response_model=AnalyticsResponse)
async def get_analytics(
    period: str = Query("30d"),
    admin: Admin = Depends(require_permission(AdminPermission.VIEW_ANALYTICS)),
    db: AsyncSession = Depends(get_db)
):
    """Registration trends plus category and regional distribution"""
    if period not in ANALYTICS_PERIODS:
        period = "30d"
    end_date = datetime.now(timezone.utc)
    start_date = end_date - timedelta(days=ANALYTICS_PERIODS[period])

    day = func.date(Seller.created_at)
    trends_result = await db.execute(
        select(day, func.count(Seller.id))
        .where(Seller.created_at >= start_date, Seller.created_at <= end_date)
        .group_by(day)
        .order_by(day)
    )
    registration_trends = [CountBucket(key=str(d), count=c) for d, c in trends_result.all()]

    # Category counts unwind the JSON array in Python to stay database-agnostic
    categories_result = await db.execute(select(Seller.categories))
    category_counter = Counter()
    for (categories,) in categories_result.all():
        category_counter.update(categories or [])
    category_distribution = [
        CountBucket(key=k, count=c) for k, c in sorted(category_counter.items(), key=lambda kv: (-kv[1], kv[0]))
    ]

    count_col = func.count(Seller.id)
    regions_result = await db.execute(
        select(Seller.region, count_col).group_by(Seller.region).order_by(count_col.desc())
    )
    regional_distribution = [
        CountBucket(key=region or "Unknown", count=c) for region, c in regions_result.all()
    ]

    return AnalyticsResponse(
        period=period,
        registration_trends=registration_trends,
        category_distribution=category_distribution,
        regional_distribution=regional_distribution,
    )
