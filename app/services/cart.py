"""
Cart arithmetic shared by ordering clients and tests
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from app.schemas.order import OrderItemCreate

@dataclass
class CartLine:
    product_id: int
    product_name: str
    unit_price: float
    quantity: int = 1
    description: Optional[str] = None

    @property
    def total(self) -> float:
        return self.unit_price * self.quantity

class Cart:
    """Products picked from the catalog, keyed by product id"""

    def __init__(self):
        self._lines: Dict[int, CartLine] = {}

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines.values())

    def add_product(self, product) -> CartLine:
        """Add one unit of a catalog product"""
        line = self._lines.get(product.id)
        if line:
            line.quantity += 1
        else:
            line = CartLine(
                product_id=product.id,
                product_name=product.name,
                unit_price=product.price,
                description=getattr(product, "description", None),
            )
            self._lines[product.id] = line
        return line

    def update_quantity(self, product_id: int, delta: int) -> Optional[CartLine]:
        """Adjust a quantity; a line never drops below one unit"""
        line = self._lines.get(product_id)
        if line is None:
            return None
        new_quantity = line.quantity + delta
        if new_quantity > 0:
            line.quantity = new_quantity
        return line

    def remove_product(self, product_id: int) -> bool:
        return self._lines.pop(product_id, None) is not None

    def clear(self) -> None:
        self._lines.clear()

    @property
    def subtotal(self) -> float:
        return sum(line.total for line in self._lines.values())

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def to_order_items(self) -> List[OrderItemCreate]:
        return [
            OrderItemCreate(
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                total=line.total,
            )
            for line in self._lines.values()
        ]
