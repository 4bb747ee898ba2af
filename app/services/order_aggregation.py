"""
Order aggregation for the reporting dashboard

Every projection is a pure function of the full order collection. Results are
recomputed on each call; sums are taken from line-level totals only, so the
header subtotal never influences a report.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Hashable, Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")
A = TypeVar("A")
R = TypeVar("R")

UNKNOWN_CUSTOMER = "Unknown"

# Order dates are ISO or US M/D/YYYY as the ordering page renders them
_DATE_FORMATS = ("%m/%d/%Y",)

@dataclass
class LineRecord:
    """Line item as seen by the aggregation engine"""
    product_id: int
    product_name: str
    quantity: int
    total: float

@dataclass
class OrderRecord:
    """Order header plus lines, detached from the ORM session"""
    id: Optional[int]
    order_number: str
    order_date: str
    customer_name: Optional[str]
    customer_phone: str
    customer_email: str
    billing_tax_number: Optional[str]
    subtotal: float
    status: str
    lines: List[LineRecord] = field(default_factory=list)

    @classmethod
    def from_model(cls, order: Any) -> "OrderRecord":
        return cls(
            id=order.id,
            order_number=order.order_number or "",
            order_date=order.order_date or "",
            customer_name=order.customer_name,
            customer_phone=order.customer_phone or "",
            customer_email=order.customer_email or "",
            billing_tax_number=order.billing_tax_number,
            subtotal=order.subtotal or 0,
            status=order.status or "",
            lines=[
                LineRecord(
                    product_id=item.product_id,
                    product_name=item.product_name,
                    quantity=item.quantity,
                    total=item.total,
                )
                for item in order.items
            ],
        )

@dataclass
class OrderDetail:
    id: Optional[int]
    order_number: str
    order_date: str
    customer_name: str
    customer_phone: str
    customer_email: str
    billing_tax_number: Optional[str]
    subtotal: float
    status: str

@dataclass
class ProductTotal:
    product_id: int
    product_name: str
    quantity: int
    total: float

@dataclass
class PhoneProductTotal:
    customer_phone: str
    customer_name: str
    product_id: int
    product_name: str
    quantity: int
    total: float

@dataclass
class LineItemDetail:
    order_id: Optional[int]
    order_number: str
    order_date: str
    customer_name: str
    customer_phone: str
    product_name: str
    quantity: int
    total: float
    status: str

def group_and_sum(
    items: Iterable[T],
    key: Callable[[T], Hashable],
    start: Callable[[T], A],
    accumulate: Callable[[A, T], None],
) -> List[A]:
    """Group items by key and fold each group into one accumulator.

    The first item seen for a key creates the accumulator through ``start``;
    every later item with that key is folded in by ``accumulate``. Groups come
    back in first-seen order.
    """
    groups: Dict[Hashable, A] = {}
    for item in items:
        group_key = key(item)
        if group_key in groups:
            accumulate(groups[group_key], item)
        else:
            groups[group_key] = start(item)
    return list(groups.values())

def parse_order_date(value: Optional[str]) -> Optional[float]:
    """Timestamp for an order date, or None when it cannot be parsed"""
    if not value:
        return None
    text = value.strip()
    parsed = None
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()

def _contains(term: str, *values: Optional[str]) -> bool:
    return any(term in (value or "").lower() for value in values)

def _sort_rows(
    rows: List[R],
    sort_by: Optional[str],
    descending: bool,
    sort_keys: Dict[str, Callable[[R], Any]],
) -> List[R]:
    """Stable sort; rows whose key is None go last in either direction"""
    if not sort_by:
        return rows
    if sort_by not in sort_keys:
        raise ValueError(f"Cannot sort by '{sort_by}'. Choose one of: {', '.join(sort_keys)}")

    key = sort_keys[sort_by]
    keyed = [(key(row), row) for row in rows]
    sortable = [(k, row) for k, row in keyed if k is not None]
    unsortable = [row for k, row in keyed if k is None]

    ordered = sorted(sortable, key=lambda pair: pair[0], reverse=descending)
    return [row for _, row in ordered] + unsortable

def _order_lines(orders: Iterable[OrderRecord]) -> Iterator[Tuple[OrderRecord, LineRecord]]:
    for order in orders:
        for line in order.lines:
            yield order, line

DETAIL_SORT_KEYS: Dict[str, Callable[[OrderDetail], Any]] = {
    "order_number": lambda row: row.order_number,
    "order_date": lambda row: parse_order_date(row.order_date),
    "customer_name": lambda row: row.customer_name,
    "subtotal": lambda row: row.subtotal,
}

PRODUCT_SORT_KEYS: Dict[str, Callable[[ProductTotal], Any]] = {
    "product_name": lambda row: row.product_name,
    "quantity": lambda row: row.quantity,
    "total": lambda row: row.total,
}

PHONE_PRODUCT_SORT_KEYS: Dict[str, Callable[[PhoneProductTotal], Any]] = {
    "customer_phone": lambda row: row.customer_phone,
    "product_name": lambda row: row.product_name,
    "quantity": lambda row: row.quantity,
    "total": lambda row: row.total,
}

LINE_ITEM_SORT_KEYS: Dict[str, Callable[[LineItemDetail], Any]] = {
    "customer_phone": lambda row: row.customer_phone,
    "order_number": lambda row: row.order_number,
    "order_date": lambda row: parse_order_date(row.order_date),
}

def detail_rows(
    orders: Sequence[OrderRecord],
    search: Optional[str] = None,
    sort_by: Optional[str] = "order_number",
    descending: bool = True,
) -> List[OrderDetail]:
    """One row per order, newest order number first by default"""
    rows = [
        OrderDetail(
            id=order.id,
            order_number=order.order_number,
            order_date=order.order_date,
            customer_name=order.customer_name or "",
            customer_phone=order.customer_phone,
            customer_email=order.customer_email,
            billing_tax_number=order.billing_tax_number,
            subtotal=order.subtotal,
            status=order.status,
        )
        for order in orders
    ]
    if search:
        term = search.lower()
        rows = [
            row for row in rows
            if _contains(
                term,
                row.order_number,
                row.customer_phone,
                row.customer_email,
                row.billing_tax_number,
                row.customer_name,
            )
        ]
    return _sort_rows(rows, sort_by, descending, DETAIL_SORT_KEYS)

def product_totals(
    orders: Sequence[OrderRecord],
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    descending: bool = False,
) -> List[ProductTotal]:
    """Quantity and amount per product across every order"""

    def start(pair: Tuple[OrderRecord, LineRecord]) -> ProductTotal:
        _, line = pair
        return ProductTotal(line.product_id, line.product_name, line.quantity, line.total)

    def accumulate(acc: ProductTotal, pair: Tuple[OrderRecord, LineRecord]) -> None:
        _, line = pair
        acc.quantity += line.quantity
        acc.total += line.total

    rows = group_and_sum(_order_lines(orders), lambda pair: pair[1].product_id, start, accumulate)
    if search:
        term = search.lower()
        rows = [row for row in rows if _contains(term, row.product_name)]
    return _sort_rows(rows, sort_by, descending, PRODUCT_SORT_KEYS)

def phone_product_totals(
    orders: Sequence[OrderRecord],
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    descending: bool = False,
) -> List[PhoneProductTotal]:
    """Quantity and amount per (customer phone, product)"""

    def start(pair: Tuple[OrderRecord, LineRecord]) -> PhoneProductTotal:
        order, line = pair
        return PhoneProductTotal(
            customer_phone=order.customer_phone,
            customer_name=order.customer_name or UNKNOWN_CUSTOMER,
            product_id=line.product_id,
            product_name=line.product_name,
            quantity=line.quantity,
            total=line.total,
        )

    def accumulate(acc: PhoneProductTotal, pair: Tuple[OrderRecord, LineRecord]) -> None:
        _, line = pair
        acc.quantity += line.quantity
        acc.total += line.total

    rows = group_and_sum(
        _order_lines(orders),
        lambda pair: (pair[0].customer_phone, pair[1].product_id),
        start,
        accumulate,
    )
    if search:
        term = search.lower()
        rows = [row for row in rows if _contains(term, row.product_name)]
    return _sort_rows(rows, sort_by, descending, PHONE_PRODUCT_SORT_KEYS)

def line_item_rows(
    orders: Sequence[OrderRecord],
    search: Optional[str] = None,
    sort_by: Optional[str] = None,
    descending: bool = False,
) -> List[LineItemDetail]:
    """Orders flattened to one row per line item"""
    rows = [
        LineItemDetail(
            order_id=order.id,
            order_number=order.order_number,
            order_date=order.order_date,
            customer_name=order.customer_name or "",
            customer_phone=order.customer_phone,
            product_name=line.product_name,
            quantity=line.quantity,
            total=line.total,
            status=order.status,
        )
        for order, line in _order_lines(orders)
    ]
    if search:
        term = search.lower()
        rows = [row for row in rows if _contains(term, row.order_number, row.customer_phone)]
    return _sort_rows(rows, sort_by, descending, LINE_ITEM_SORT_KEYS)

class SortState:
    """Click-to-toggle sort directions, remembered per field"""

    def __init__(self):
        self._descending: Dict[str, bool] = {}
        self.active: Optional[str] = None

    def toggle(self, field_name: str) -> Tuple[str, bool]:
        """Flip the direction for one field; the first click sorts ascending"""
        descending = not self._descending.get(field_name, True)
        self._descending[field_name] = descending
        self.active = field_name
        return field_name, descending

    def is_descending(self, field_name: str) -> bool:
        return self._descending.get(field_name, False)
