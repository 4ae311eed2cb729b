"""
Order Service Data Models

Pydantic models for bullion orders, line items, custody snapshots,
pricing breakdowns and pagination.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from decimal import Decimal
from enum import Enum


class OrderStatus(str, Enum):
    """Order status enumeration"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OrderType(str, Enum):
    """Order type enumeration"""
    BUY = "buy"
    SELL = "sell"


class PaymentMethodType(str, Enum):
    """Accepted payment method types"""
    CARD = "card"
    BANK_TRANSFER = "bank_transfer"
    CRYPTO = "crypto"


class UserRole(str, Enum):
    """Caller role"""
    USER = "user"
    ADMIN = "admin"


class RequestContext(BaseModel):
    """Authenticated caller identity, passed to every service call"""
    user_id: str = Field(..., min_length=1)
    role: UserRole = UserRole.USER

    @field_validator('user_id')
    def validate_user_id(cls, v):
        if not v.strip():
            raise ValueError('user_id must not be blank')
        return v

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


# Core Order Models

class OrderItem(BaseModel):
    """Order line item (immutable once created)"""
    model_config = ConfigDict(frozen=True)

    id: str
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal


class CustodyServiceRef(BaseModel):
    """Custody service snapshot attached to an order"""
    id: str
    name: str
    fee: Optional[Decimal] = None
    currency: Optional[str] = None
    payment_frequency: Optional[str] = None


class CustodianRef(BaseModel):
    """Custodian snapshot attached to an order"""
    id: str
    name: str


class Order(BaseModel):
    """Order aggregate: header, items and custody snapshots"""
    id: str
    user_id: str
    type: OrderType
    status: OrderStatus
    order_number: str
    items: List[OrderItem] = Field(default_factory=list)
    currency: str
    subtotal: Decimal
    taxes: Decimal = Decimal("0")
    total_amount: Decimal
    custody_service: Optional[CustodyServiceRef] = None
    custodian: Optional[CustodianRef] = None
    custody_service_id: Optional[str] = None
    payment_status: str = "pending"
    created_at: datetime
    updated_at: datetime


# Request Models

class OrderItemRequest(BaseModel):
    """Raw line item as submitted by the caller"""
    product_id: Optional[str] = None
    quantity: Optional[int] = None


class ShippingAddress(BaseModel):
    """Shipping address; every field is required once an address is given"""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


class PaymentMethod(BaseModel):
    """Payment method reference"""
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None


class OrderCreateRequest(BaseModel):
    """
    Create order request

    Fields are deliberately permissive so that OrderValidator can report
    precise, field-level failures.
    """
    user_id: Optional[str] = Field(None, description="User placing the order")
    type: Optional[str] = Field(None, description="buy or sell (case-insensitive)")
    items: Optional[List[OrderItemRequest]] = Field(None, description="Line items")
    currency: Optional[str] = Field(None, description="ISO 4217 currency code")
    shipping_address: Optional[ShippingAddress] = None
    payment_method: Optional[PaymentMethod] = None
    custody_service_id: Optional[str] = Field(None, description="Custody service to attach")


class OrderListOptions(BaseModel):
    """List/pagination options"""
    page: int = 1
    limit: Optional[int] = None
    status: Optional[str] = None
    type: Optional[str] = None


class OrderFilter(BaseModel):
    """Normalized order filter handed to the repository"""
    user_id: Optional[str] = None
    status: Optional[OrderStatus] = None
    type: Optional[OrderType] = None


# Collaborator Data Models

class EnrichedItem(BaseModel):
    """Line item resolved by the product enrichment port"""
    product_id: str
    product_name: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    available: bool = True
    available_quantity: Optional[int] = None
    currency: Optional[str] = None


class PricingBreakdown(BaseModel):
    """Pricing calculator output"""
    subtotal: Decimal
    taxes: Decimal = Decimal("0")
    total_amount: Decimal


# Response Models

class Pagination(BaseModel):
    """Pagination metadata"""
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_previous: bool


class CreateOrderResult(BaseModel):
    """Result of a successful create_order call"""
    order: Order
    pricing: PricingBreakdown


class OrderListResponse(BaseModel):
    """Order list response"""
    orders: List[Order]
    pagination: Pagination


class OrderServiceStatus(BaseModel):
    """Order service health response"""
    service: str = "order_service"
    status: str = "operational"
    version: str = "1.0.0"
    database_connected: bool
    timestamp: Optional[datetime] = None
    details: Dict[str, Any] = Field(default_factory=dict)
