from pydantic import BaseModel, Field, model_validator
from typing import Optional, List, Dict
from datetime import datetime
from decimal import Decimal
from uuid import UUID
from app.models.product import ProductStatus, Currency
from app.models.seller import SellerCategory


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    description: str = Field(..., min_length=10, max_length=1000)
    category: SellerCategory
    tags: List[str] = []
    price: Decimal = Field(..., ge=0)
    currency: Currency = Currency.INR
    max_units: int = Field(..., ge=1)
    lead_time: str = Field(..., min_length=1, max_length=100)
    specifications: Dict[str, str] = {}

    @model_validator(mode="after")
    def check_tags(self):
        if any(len(tag) > 50 for tag in self.tags):
            raise ValueError("Tags must be at most 50 characters")
        return self


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = Field(None, min_length=10, max_length=1000)
    category: Optional[SellerCategory] = None
    tags: Optional[List[str]] = None
    price: Optional[Decimal] = Field(None, ge=0)
    max_units: Optional[int] = Field(None, ge=1)
    available_units: Optional[int] = Field(None, ge=0)
    lead_time: Optional[str] = Field(None, min_length=1, max_length=100)
    status: Optional[ProductStatus] = None
    specifications: Optional[Dict[str, str]] = None


class ProductResponse(BaseModel):
    id: UUID
    seller_id: UUID
    name: str
    description: str
    category: SellerCategory
    tags: List[str] = []
    price: Decimal
    currency: Currency
    max_units: int
    available_units: int
    lead_time: str
    status: ProductStatus
    images: List[str] = []
    specifications: Dict[str, str] = {}
    is_available: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
