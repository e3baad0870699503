from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_
from typing import List, Optional
from decimal import Decimal
from uuid import UUID
from app.database import get_db
from app.api.deps import get_current_seller, require_verified_seller
from app.models.seller import Seller, SellerCategory
from app.models.product import Product, ProductStatus
from app.core.exceptions import NotFoundException, ForbiddenException, FileValidationException, BadRequestException
from app.schemas.product import ProductCreate, ProductUpdate, ProductResponse
from app.schemas.common import MessageResponse, PaginatedResponse
from app.services.storage_service import StorageService
from app.utils.validators import validate_batch, MAX_FILES_PER_UPLOAD
from app.utils.logger import logger

router = APIRouter()


async def _get_product(db: AsyncSession, product_id: UUID) -> Product:
    result = await db.execute(select(Product).where(Product.id == product_id))
    product = result.scalar_one_or_none()
    if not product:
        raise NotFoundException("Product", str(product_id))
    return product


async def _get_owned_product(db: AsyncSession, product_id: UUID, seller: Seller) -> Product:
    product = await _get_product(db, product_id)
    if product.seller_id != seller.id:
        raise ForbiddenException("You can only modify your own products")
    return product


async def _paginate(db: AsyncSession, query, page: int, limit: int) -> PaginatedResponse:
    total_result = await db.execute(select(func.count()).select_from(query.subquery()))
    total = total_result.scalar() or 0

    result = await db.execute(
        query.order_by(Product.created_at.desc()).offset((page - 1) * limit).limit(limit)
    )
    items = [ProductResponse.model_validate(p) for p in result.scalars().all()]
    return PaginatedResponse.build(items, total, page, limit)


@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    product_data: ProductCreate,
    seller: Seller = Depends(require_verified_seller),
    db: AsyncSession = Depends(get_db)
):
    """List a new product (verified sellers only)"""
    product = Product(
        seller_id=seller.id,
        name=product_data.name.strip(),
        description=product_data.description.strip(),
        category=product_data.category,
        tags=[tag.strip() for tag in product_data.tags if tag.strip()],
        price=product_data.price,
        currency=product_data.currency,
        max_units=product_data.max_units,
        available_units=product_data.max_units,
        lead_time=product_data.lead_time,
        status=ProductStatus.ACTIVE,
        images=[],
        specifications=product_data.specifications,
    )
    db.add(product)
    await db.commit()
    await db.refresh(product)

    logger.info(f"Product created: {product.id} by seller {seller.id}")
    return product


@router.get("/", response_model=PaginatedResponse)
async def list_products(
    status: str = Query(ProductStatus.ACTIVE.value),
    category: Optional[SellerCategory] = None,
    search: Optional[str] = None,
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    """Public product catalogue"""
    query = select(Product)
    if status != "all":
        try:
            query = query.where(Product.status == ProductStatus(status))
        except ValueError:
            raise BadRequestException(f"Unknown product status: {status}")
    if category:
        query = query.where(Product.category == category)
    if search:
        query = query.where(or_(
            Product.name.ilike(f"%{search}%"),
            Product.description.ilike(f"%{search}%"),
        ))
    if min_price is not None:
        query = query.where(Product.price >= min_price)
    if max_price is not None:
        query = query.where(Product.price <= max_price)

    return await _paginate(db, query, page, limit)


@router.get("/my-products", response_model=PaginatedResponse)
async def get_my_products(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    seller: Seller = Depends(get_current_seller),
    db: AsyncSession = Depends(get_db)
):
    return await _paginate(db, select(Product).where(Product.seller_id == seller.id), page, limit)


@router.get("/seller/{seller_id}", response_model=PaginatedResponse)
async def get_seller_products(
    seller_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db)
):
    query = select(Product).where(Product.seller_id == seller_id, Product.status == ProductStatus.ACTIVE)
    return await _paginate(db, query, page, limit)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: UUID, db: AsyncSession = Depends(get_db)):
    return await _get_product(db, product_id)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: UUID,
    update: ProductUpdate,
    seller: Seller = Depends(get_current_seller),
    db: AsyncSession = Depends(get_db)
):
    product = await _get_owned_product(db, product_id, seller)

    for field, value in update.model_dump(exclude_unset=True).items():
        setattr(product, field, value)
    if product.available_units is not None and product.available_units > product.max_units:
        product.available_units = product.max_units

    await db.commit()
    await db.refresh(product)
    logger.info(f"Product updated: {product.id}")
    return product


@router.delete("/{product_id}", response_model=MessageResponse)
async def delete_product(
    product_id: UUID,
    seller: Seller = Depends(get_current_seller),
    db: AsyncSession = Depends(get_db)
):
    product = await _get_owned_product(db, product_id, seller)
    images = list(product.images or [])

    await db.delete(product)
    await db.commit()
    StorageService.cleanup(images)

    logger.info(f"Product deleted: {product_id}")
    return MessageResponse(message="Product deleted successfully")


@router.post("/{product_id}/images", response_model=ProductResponse)
async def upload_product_images(
    product_id: UUID,
    images: List[UploadFile] = File(...),
    seller: Seller = Depends(get_current_seller),
    db: AsyncSession = Depends(get_db)
):
    """Attach images to a product; the product keeps at most five"""
    product = await _get_owned_product(db, product_id, seller)

    uploads = await StorageService.read_uploads(images)
    validation = validate_batch([candidate for candidate, _ in uploads])
    if not validation.is_valid:
        raise FileValidationException(validation.errors)

    existing = list(product.images or [])
    if len(existing) + len(uploads) > MAX_FILES_PER_UPLOAD:
        raise FileValidationException([f"Maximum {MAX_FILES_PER_UPLOAD} images allowed per product"])

    saved = StorageService.save_all(uploads)
    written = [c.storage_path for c in saved]
    product.images = existing + written
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        StorageService.cleanup(written)
        logger.error(f"Failed to attach images to product {product_id}", exc_info=True)
        raise
    await db.refresh(product)
    return product
