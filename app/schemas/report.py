"""
Pydantic schemas for the reporting dashboard projections
"""

from pydantic import BaseModel
from typing import Optional, List

class OrderDetailRow(BaseModel):
    id: Optional[int]
    order_number: str
    order_date: str
    customer_name: str
    customer_phone: str
    customer_email: str
    billing_tax_number: Optional[str]
    subtotal: float
    status: str

class ProductTotalRow(BaseModel):
    product_id: int
    product_name: str
    quantity: int
    total: float

class PhoneProductTotalRow(BaseModel):
    customer_phone: str
    customer_name: str
    product_id: int
    product_name: str
    quantity: int
    total: float

class LineItemRow(BaseModel):
    order_id: Optional[int]
    order_number: str
    order_date: str
    customer_name: str
    customer_phone: str
    product_name: str
    quantity: int
    total: float
    status: str

class OrderDetailReport(BaseModel):
    rows: List[OrderDetailRow]
    count: int

class ProductTotalReport(BaseModel):
    rows: List[ProductTotalRow]
    count: int

class PhoneProductTotalReport(BaseModel):
    rows: List[PhoneProductTotalRow]
    count: int

class LineItemReport(BaseModel):
    rows: List[LineItemRow]
    count: int
