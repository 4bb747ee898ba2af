"""
Order status updates from checkbox selections, batches and CSV files
"""

import csv
import io
import logging
from typing import List, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.order import Order
from app.schemas.order import OrderStatus, StatusUpdateRequest, StatusUpdateResponse, StatusUpdateResult
from app.utils.error_handler import OrderValidationError, StoreError, commit_or_raise

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["id", "order_number", "status"]

def normalize_status_request(request: StatusUpdateRequest) -> List[Tuple[int, str]]:
    """Turn either request shape into (id, status) pairs"""
    has_batch = request.batch_updates is not None
    has_selection = request.order_ids is not None or request.status is not None

    if has_batch and has_selection:
        raise OrderValidationError(
            "Send either batchUpdates or orderIds with status, not both",
            error_code="INVALID_STATUS_REQUEST",
        )
    if has_batch:
        return [(change.id, change.status.value) for change in request.batch_updates]
    if request.order_ids is not None and request.status is not None:
        return [(order_id, request.status.value) for order_id in request.order_ids]

    raise OrderValidationError(
        "Invalid request: provide batchUpdates or orderIds with status",
        error_code="INVALID_STATUS_REQUEST",
    )

def parse_status_csv(content: str) -> Tuple[List[Tuple[int, str]], int]:
    """Read id/status rows from an exported CSV.

    Rows without an id or status, or with an id that is not an integer, are
    dropped. Returns the usable (id, status) pairs and the number dropped.
    """
    reader = csv.DictReader(io.StringIO(content.lstrip("\ufeff")))
    pairs = []
    skipped = 0
    for row in reader:
        raw_id = (row.get("id") or "").strip()
        raw_status = (row.get("status") or "").strip().upper()
        if not raw_id or not raw_status:
            skipped += 1
            continue
        try:
            order_id = int(raw_id)
        except ValueError:
            skipped += 1
            continue
        pairs.append((order_id, raw_status))
    return pairs, skipped

class StatusService:
    """Service applying status changes to existing orders"""

    def __init__(self, db: Session):
        self.db = db

    def apply_updates(self, updates: List[Tuple[int, str]], skipped: int = 0) -> StatusUpdateResponse:
        """Apply each (id, status) independently and report per-id results.

        Unknown ids and unrecognised statuses are reported as failures and do
        not block the other updates. A failed commit applies nothing.
        """
        allowed = {status.value for status in OrderStatus}
        results: List[StatusUpdateResult] = []

        try:
            ids = {order_id for order_id, _ in updates}
            orders = {
                order.id: order
                for order in self.db.query(Order).filter(Order.id.in_(ids)).all()
            } if ids else {}
        except SQLAlchemyError as e:
            logger.error(f"Failed to load orders for status update: {e}")
            raise StoreError("Failed to load orders for status update", e)

        for order_id, status in updates:
            if status not in allowed:
                results.append(StatusUpdateResult(
                    id=order_id, status=status, success=False,
                    error=f"Unknown status '{status}'"
                ))
                continue
            order = orders.get(order_id)
            if order is None:
                results.append(StatusUpdateResult(
                    id=order_id, status=status, success=False, error="Order not found"
                ))
                continue
            order.status = status
            results.append(StatusUpdateResult(id=order_id, status=status, success=True))

        commit_or_raise(self.db, "update order statuses")

        updated = sum(1 for result in results if result.success)
        failed = len(results) - updated
        logger.info(f"Status update applied: {updated} updated, {failed} failed, {skipped} skipped")

        return StatusUpdateResponse(
            success=failed == 0,
            updated=updated,
            failed=failed,
            skipped=skipped,
            results=results,
        )

    def update_statuses(self, request: StatusUpdateRequest) -> StatusUpdateResponse:
        return self.apply_updates(normalize_status_request(request))

    def import_csv(self, content: str) -> StatusUpdateResponse:
        pairs, skipped = parse_status_csv(content)
        return self.apply_updates(pairs, skipped=skipped)

    def export_csv(self) -> str:
        """id,order_number,status for every order, newest first"""
        try:
            rows = (
                self.db.query(Order.id, Order.order_number, Order.status)
                .order_by(Order.created_at.desc(), Order.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to export order statuses: {e}")
            raise StoreError("Failed to export order statuses", e)

        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(CSV_COLUMNS)
        for row in rows:
            writer.writerow([row.id, row.order_number, row.status])
        return buffer.getvalue()
