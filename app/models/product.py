from sqlalchemy import Column, String, Integer, Numeric, DateTime, ForeignKey, Text, JSON, Enum as SQLEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
from app.models.seller import SellerCategory
import uuid
from enum import Enum


class ProductStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    OUT_OF_STOCK = "out-of-stock"
    DISCONTINUED = "discontinued"


class Currency(str, Enum):
    INR = "INR"
    USD = "USD"


class Product(Base):
    __tablename__ = "products"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    seller_id = Column(UUID(as_uuid=True), ForeignKey("sellers.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(SQLEnum(SellerCategory), nullable=False, index=True)
    tags = Column(JSON, default=list, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    currency = Column(SQLEnum(Currency), default=Currency.INR, nullable=False)
    max_units = Column(Integer, nullable=False)
    available_units = Column(Integer, nullable=False)
    lead_time = Column(String(100), nullable=False)
    status = Column(SQLEnum(ProductStatus), default=ProductStatus.ACTIVE, nullable=False, index=True)
    images = Column(JSON, default=list, nullable=False)
    specifications = Column(JSON, default=dict, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    seller = relationship("Seller")

    @property
    def is_available(self) -> bool:
        return self.status == ProductStatus.ACTIVE and (self.available_units or 0) > 0
