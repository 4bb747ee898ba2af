"""
Read access to the product catalog with a static fallback list
"""

import logging
from typing import List, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.product import Product
from app.schemas.product import ProductResponse

logger = logging.getLogger(__name__)

# Served when the catalog table cannot be read so ordering stays usable
FALLBACK_PRODUCTS = [
    ProductResponse(id=1, name="Laptop Dell XPS 13", price=25000000,
                    description="High-performance laptop with Intel Core i7, 16GB RAM, 512GB SSD"),
    ProductResponse(id=2, name="iPhone 15 Pro", price=30000000,
                    description="Latest iPhone with A17 Pro chip, 256GB storage, titanium design"),
    ProductResponse(id=3, name="Samsung Galaxy S24", price=22000000,
                    description="Flagship Android phone with Snapdragon 8 Gen 3, 12GB RAM"),
    ProductResponse(id=4, name="MacBook Air M3", price=35000000,
                    description="Ultra-thin laptop with M3 chip, 16GB RAM, stunning Retina display"),
    ProductResponse(id=5, name='iPad Pro 12.9"', price=28000000,
                    description="Professional tablet with M2 chip, 256GB storage, ProMotion display"),
    ProductResponse(id=6, name="Sony WH-1000XM5", price=8000000,
                    description="Premium noise-cancelling wireless headphones with exceptional audio"),
    ProductResponse(id=7, name="Dell UltraSharp Monitor", price=12000000,
                    description="27-inch 4K monitor with USB-C connectivity and excellent color accuracy"),
    ProductResponse(id=8, name="Logitech MX Master 3S", price=2500000,
                    description="Advanced wireless mouse with ergonomic design and precision tracking"),
]

class ProductCatalog:
    """Service for listing orderable products"""

    def __init__(self, db: Session):
        self.db = db

    def list_active_products(self) -> Tuple[List[ProductResponse], str]:
        """Active products ordered by name, plus where they came from"""
        try:
            products = (
                self.db.query(Product)
                .filter(Product.is_active == True)
                .order_by(Product.name)
                .all()
            )
            return [ProductResponse.from_orm(product) for product in products], "database"
        except SQLAlchemyError as e:
            logger.warning(f"Product catalog unavailable, serving fallback list: {e}")
            try:
                self.db.rollback()
            except SQLAlchemyError:
                logger.debug("Rollback after catalog failure also failed")
            return [product.model_copy() for product in FALLBACK_PRODUCTS], "fallback"
