"""
Order submission and retrieval
Handles validation, totals verification and the atomic header + lines write
"""

import logging
import math
import time
import uuid
from datetime import date
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.models.order import Order, OrderItem
from app.schemas.order import OrderCreate, OrderStatus
from app.utils.error_handler import OrderValidationError, StoreError, commit_or_raise

logger = logging.getLogger(__name__)

# Float amounts arrive over JSON; totals may differ by at most this much
AMOUNT_TOLERANCE = 0.01

def generate_order_number() -> str:
    """ORD-<epoch millis>-<random hex>"""
    millis = int(time.time() * 1000)
    return f"ORD-{millis}-{uuid.uuid4().hex[:4].upper()}"

def amounts_match(expected: float, actual: float) -> bool:
    return math.isclose(expected, actual, rel_tol=0, abs_tol=AMOUNT_TOLERANCE)

def _duplicate_order_number(order_number: str) -> OrderValidationError:
    return OrderValidationError(
        f"Order with number '{order_number}' already exists",
        error_code="DUPLICATE_ORDER_NUMBER",
    )

class OrderService:
    """Service for order operations"""

    def __init__(self, db: Session):
        self.db = db

    def _order_number_taken(self, order_number: str) -> bool:
        try:
            return self.db.query(Order.id).filter(Order.order_number == order_number).first() is not None
        except SQLAlchemyError as e:
            raise StoreError("Failed to check order number", e)

    def _verify_totals(self, order_data: OrderCreate) -> List[float]:
        """Recompute every line total and the subtotal; returns the line totals"""
        line_totals = []
        for index, item in enumerate(order_data.items):
            expected = item.unit_price * item.quantity
            if not amounts_match(expected, item.total):
                raise OrderValidationError(
                    f"Line {index + 1} total does not match quantity x unit price",
                    details={
                        "line": index + 1,
                        "product_id": item.product_id,
                        "expected": expected,
                        "received": item.total,
                    }
                )
            line_totals.append(expected)

        expected_subtotal = sum(line_totals)
        if not amounts_match(expected_subtotal, order_data.subtotal):
            raise OrderValidationError(
                "Order subtotal does not match the sum of its line items",
                details={"expected": expected_subtotal, "received": order_data.subtotal}
            )
        return line_totals

    def create_order(self, order_data: OrderCreate) -> Order:
        """Validate and persist an order with its lines in one transaction"""
        line_totals = self._verify_totals(order_data)

        order_number = order_data.order_number or generate_order_number()
        if self._order_number_taken(order_number):
            raise _duplicate_order_number(order_number)

        db_order = Order(
            order_number=order_number,
            order_date=order_data.order_date or date.today().isoformat(),
            customer_name=order_data.customer_name,
            customer_address=order_data.customer_address,
            customer_phone=order_data.customer_phone,
            customer_email=order_data.customer_email,
            ship_to_address=order_data.ship_to_address,
            billing_name=order_data.billing_name,
            billing_address=order_data.billing_address,
            billing_tax_number=order_data.billing_tax_number,
            subtotal=sum(line_totals),
            status=OrderStatus.PENDING.value,
        )
        for item, line_total in zip(order_data.items, line_totals):
            db_order.items.append(
                OrderItem(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    total=line_total,
                )
            )

        self.db.add(db_order)
        try:
            commit_or_raise(self.db, "create order")
        except StoreError as e:
            # A concurrent request inserted the same number after our check
            if isinstance(e.original_error, IntegrityError) and "order_number" in str(e.original_error):
                raise _duplicate_order_number(order_number)
            raise
        self.db.refresh(db_order)

        logger.info(f"Created order {db_order.order_number} (id={db_order.id}) with {len(db_order.items)} items")
        return db_order

    def list_orders(self) -> List[Order]:
        """All orders with their lines, newest first"""
        try:
            return (
                self.db.query(Order)
                .options(selectinload(Order.items))
                .order_by(Order.created_at.desc(), Order.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to list orders: {e}")
            raise StoreError("Failed to retrieve orders", e)

    def get_order(self, order_id: int) -> Optional[Order]:
        try:
            return (
                self.db.query(Order)
                .options(selectinload(Order.items))
                .filter(Order.id == order_id)
                .first()
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to get order {order_id}: {e}")
            raise StoreError("Failed to retrieve order", e)

    def lookup_orders(self, search: str) -> List[Order]:
        """Orders whose number or phone contains the search term.

        The term is matched literally, so LIKE wildcards in it match only
        themselves.
        """
        term = search.strip().lower()
        try:
            return (
                self.db.query(Order)
                .filter(
                    or_(
                        func.lower(Order.order_number).contains(term, autoescape=True),
                        func.lower(Order.customer_phone).contains(term, autoescape=True),
                    )
                )
                .order_by(Order.created_at.desc(), Order.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to look up orders for '{search}': {e}")
            raise StoreError("Failed to look up orders", e)
