"""
Order submission, lookup and status management endpoints
"""

from fastapi import APIRouter, BackgroundTasks, Depends, File, HTTPException, Query, Request, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session
from typing import List
import logging

from app.database import get_db
from app.limiter import limiter
from app.schemas.order import (
    OrderCreate, OrderCreatedResponse, OrderResponse, OrderLookupResponse,
    StatusUpdateRequest, StatusUpdateResponse
)
from app.services.order_service import OrderService
from app.services.status_service import StatusService
from app.services.notification_service import SlackNotifier, get_notifier
from app.services.activity_logger import ActivityLogger
from app.auth.auth_handler import StaffPrincipal, admin_required, staff_required
from app.utils.error_handler import OrderValidationError

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/", response_model=OrderCreatedResponse, status_code=201)
@limiter.limit("20/minute")
async def create_order(
    request: Request,
    order: OrderCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    notifier: SlackNotifier = Depends(get_notifier)
):
    """Submit a new order with its line items"""
    db_order = OrderService(db).create_order(order)

    # Detached copy: the session is closed before background tasks run
    snapshot = OrderResponse.from_orm(db_order)
    background_tasks.add_task(notifier.notify_order_created, snapshot)

    await ActivityLogger(db).log_request(
        request,
        action="order_created",
        status_code=201,
        details={"order_number": snapshot.order_number, "items": len(snapshot.items), "subtotal": snapshot.subtotal}
    )

    return OrderCreatedResponse(orderId=snapshot.id, orderNumber=snapshot.order_number)

@router.get("/", response_model=List[OrderResponse])
@limiter.limit("30/minute")
async def list_orders(
    request: Request,
    current_user: StaffPrincipal = Depends(staff_required),
    db: Session = Depends(get_db)
):
    """All orders with nested line items, newest first"""
    return OrderService(db).list_orders()

@router.get("/lookup", response_model=List[OrderLookupResponse])
@limiter.limit("30/minute")
async def lookup_orders(
    request: Request,
    search: str = Query(..., min_length=1, max_length=50, description="Order number or phone number fragment"),
    db: Session = Depends(get_db)
):
    """Order status lookup for customers"""
    return OrderService(db).lookup_orders(search)

@router.post("/status", response_model=StatusUpdateResponse)
@limiter.limit("20/minute")
async def update_order_status(
    request: Request,
    status_request: StatusUpdateRequest,
    current_user: StaffPrincipal = Depends(admin_required),
    db: Session = Depends(get_db)
):
    """Apply a status batch or move selected orders to one status"""
    result = StatusService(db).update_statuses(status_request)

    await ActivityLogger(db).log_request(
        request,
        action="status_updated",
        status_code=200,
        username=current_user.username,
        details={"updated": result.updated, "failed": result.failed}
    )
    return result

@router.get("/status/export")
@limiter.limit("10/minute")
async def export_order_status(
    request: Request,
    current_user: StaffPrincipal = Depends(admin_required),
    db: Session = Depends(get_db)
):
    """Download id,order_number,status as CSV"""
    content = StatusService(db).export_csv()
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="order-status.csv"'}
    )

@router.post("/status/import", response_model=StatusUpdateResponse)
@limiter.limit("10/minute")
async def import_order_status(
    request: Request,
    file: UploadFile = File(..., description="CSV with id and status columns"),
    current_user: StaffPrincipal = Depends(admin_required),
    db: Session = Depends(get_db)
):
    """Apply statuses from an edited export file"""
    raw = await file.read()
    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError:
        raise OrderValidationError("Status file must be UTF-8 encoded CSV", error_code="INVALID_STATUS_FILE")

    result = StatusService(db).import_csv(content)

    await ActivityLogger(db).log_request(
        request,
        action="status_imported",
        status_code=200,
        username=current_user.username,
        details={"file": file.filename, "updated": result.updated, "failed": result.failed, "skipped": result.skipped}
    )
    return result

@router.get("/{order_id}", response_model=OrderResponse)
@limiter.limit("30/minute")
async def get_order(
    request: Request,
    order_id: int,
    current_user: StaffPrincipal = Depends(staff_required),
    db: Session = Depends(get_db)
):
    """Get a specific order by ID"""
    order = OrderService(db).get_order(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order
