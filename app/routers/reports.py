"""
Reporting dashboard endpoints (staff only)
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session
from dataclasses import asdict
from typing import List, Optional
import logging

from app.database import get_db
from app.limiter import limiter
from app.schemas.report import (
    OrderDetailReport, ProductTotalReport, PhoneProductTotalReport, LineItemReport
)
from app.services import order_aggregation
from app.services.order_aggregation import OrderRecord
from app.services.order_service import OrderService
from app.services.activity_logger import ActivityLogger
from app.auth.auth_handler import StaffPrincipal, admin_required, staff_required

logger = logging.getLogger(__name__)

router = APIRouter()

SORT_ORDER_PATTERN = "^(asc|desc)$"

def _load_records(db: Session) -> List[OrderRecord]:
    return [OrderRecord.from_model(order) for order in OrderService(db).list_orders()]

def _project(projection, records, search, sort_by, order):
    try:
        rows = projection(records, search=search, sort_by=sort_by, descending=(order == "desc"))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"rows": [asdict(row) for row in rows], "count": len(rows)}

@router.get("/orders", response_model=OrderDetailReport)
@limiter.limit("60/minute")
async def order_detail_report(
    request: Request,
    search: Optional[str] = Query(None, description="Order number, phone, email, tax number or customer name"),
    sort_by: Optional[str] = Query("order_number"),
    order: str = Query("desc", pattern=SORT_ORDER_PATTERN),
    current_user: StaffPrincipal = Depends(staff_required),
    db: Session = Depends(get_db)
):
    """One row per order"""
    return _project(order_aggregation.detail_rows, _load_records(db), search, sort_by, order)

@router.get("/products", response_model=ProductTotalReport)
@limiter.limit("60/minute")
async def product_total_report(
    request: Request,
    search: Optional[str] = Query(None, description="Product name fragment"),
    sort_by: Optional[str] = Query(None),
    order: str = Query("asc", pattern=SORT_ORDER_PATTERN),
    current_user: StaffPrincipal = Depends(staff_required),
    db: Session = Depends(get_db)
):
    """Quantity and amount per product"""
    return _project(order_aggregation.product_totals, _load_records(db), search, sort_by, order)

@router.get("/phone-products", response_model=PhoneProductTotalReport)
@limiter.limit("60/minute")
async def phone_product_total_report(
    request: Request,
    search: Optional[str] = Query(None, description="Product name fragment"),
    sort_by: Optional[str] = Query(None),
    order: str = Query("asc", pattern=SORT_ORDER_PATTERN),
    current_user: StaffPrincipal = Depends(staff_required),
    db: Session = Depends(get_db)
):
    """Quantity and amount per customer phone and product"""
    return _project(order_aggregation.phone_product_totals, _load_records(db), search, sort_by, order)

@router.get("/line-items", response_model=LineItemReport)
@limiter.limit("60/minute")
async def line_item_report(
    request: Request,
    search: Optional[str] = Query(None, description="Order number or phone fragment"),
    sort_by: Optional[str] = Query(None),
    order: str = Query("asc", pattern=SORT_ORDER_PATTERN),
    current_user: StaffPrincipal = Depends(staff_required),
    db: Session = Depends(get_db)
):
    """Every order line with its order header fields"""
    return _project(order_aggregation.line_item_rows, _load_records(db), search, sort_by, order)

@router.get("/activity")
@limiter.limit("20/minute")
async def recent_activity(
    request: Request,
    limit: int = Query(100, ge=1, le=500),
    action: Optional[str] = Query(None, description="Filter by action, e.g. order_created"),
    current_user: StaffPrincipal = Depends(admin_required),
    db: Session = Depends(get_db)
):
    """Recent audit trail entries (Admin only)"""
    activities = ActivityLogger(db).get_recent_activities(limit=limit, action=action)
    return {
        "activities": [
            {
                "id": activity.id,
                "action": activity.action,
                "endpoint": activity.endpoint,
                "method": activity.method,
                "status_code": activity.status_code,
                "username": activity.username,
                "details": activity.details,
                "error_message": activity.error_message,
                "created_at": activity.created_at.isoformat() if activity.created_at else None,
            }
            for activity in activities
        ],
        "count": len(activities),
    }
