"""
Pydantic schemas for Order operations
"""

from pydantic import BaseModel, Field, validator
from typing import Optional, List
from datetime import datetime
from enum import Enum

class OrderStatus(str, Enum):
    """Order lifecycle; any value may follow any other"""
    PENDING = "PENDING"
    RECEIVED = "RECEIVED"
    ORDERED = "ORDERED"
    DELIVERED = "DELIVERED"

def _upper_status(v):
    if isinstance(v, str):
        return v.strip().upper()
    return v

class OrderItemCreate(BaseModel):
    """One cart line submitted with an order"""
    product_id: int = Field(..., description="Catalog product id")
    product_name: str = Field(..., min_length=1, max_length=200, description="Product name at order time")
    quantity: int = Field(..., ge=1, description="Ordered quantity")
    unit_price: float = Field(..., ge=0, description="Unit price at order time")
    total: float = Field(..., ge=0, description="quantity x unit_price as computed by the client")

    @validator('product_name')
    def validate_product_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Product name is required')
        return v

class OrderCreate(BaseModel):
    """Schema for submitting a new order"""
    order_number: Optional[str] = Field(None, max_length=50, description="Client order number, generated when omitted")
    order_date: Optional[str] = Field(None, max_length=30, description="Order date as shown to the customer")
    customer_name: str = Field(..., max_length=200)
    customer_address: str = Field(...)
    customer_phone: str = Field(..., max_length=30)
    customer_email: str = Field(..., max_length=200)
    ship_to_address: Optional[str] = Field(None)
    billing_name: Optional[str] = Field(None, max_length=200)
    billing_address: Optional[str] = Field(None)
    billing_tax_number: Optional[str] = Field(None, max_length=50)
    subtotal: float = Field(..., ge=0, description="Sum of line totals as computed by the client")
    items: List[OrderItemCreate] = Field(..., min_length=1, description="At least one line item")

    @validator('customer_name', 'customer_address', 'customer_phone', 'customer_email')
    def validate_required_text(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Field must not be blank')
        return v

    @validator('order_number', 'order_date', 'ship_to_address', 'billing_name', 'billing_address', 'billing_tax_number')
    def blank_to_none(cls, v):
        if v is None:
            return v
        v = v.strip()
        return v or None

class OrderItemResponse(BaseModel):
    id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: float
    total: float

    class Config:
        from_attributes = True

class OrderResponse(BaseModel):
    """Order header with its line items"""
    id: int
    order_number: str
    order_date: str
    customer_name: str
    customer_address: str
    customer_phone: str
    customer_email: str
    ship_to_address: Optional[str]
    billing_name: Optional[str]
    billing_address: Optional[str]
    billing_tax_number: Optional[str]
    subtotal: float
    status: str
    created_at: Optional[datetime]
    updated_at: Optional[datetime]
    items: List[OrderItemResponse] = []

    class Config:
        from_attributes = True

class OrderCreatedResponse(BaseModel):
    success: bool = True
    order_id: int = Field(..., alias="orderId")
    order_number: str = Field(..., alias="orderNumber")

class OrderLookupResponse(BaseModel):
    """What a customer sees on the order status page"""
    order_number: str
    order_date: str
    customer_phone: str
    status: str
    subtotal: float

    class Config:
        from_attributes = True

class StatusChange(BaseModel):
    id: int
    status: OrderStatus

    @validator('status', pre=True)
    def normalize_status(cls, v):
        return _upper_status(v)

class StatusUpdateRequest(BaseModel):
    """Either an explicit batch or a set of ids moved to one status"""
    batch_updates: Optional[List[StatusChange]] = Field(None, alias="batchUpdates")
    order_ids: Optional[List[int]] = Field(None, alias="orderIds")
    status: Optional[OrderStatus] = None

    @validator('status', pre=True)
    def normalize_status(cls, v):
        return _upper_status(v)

class StatusUpdateResult(BaseModel):
    id: int
    status: Optional[str]
    success: bool
    error: Optional[str] = None

class StatusUpdateResponse(BaseModel):
    success: bool
    updated: int
    failed: int
    skipped: int = 0
    results: List[StatusUpdateResult]
