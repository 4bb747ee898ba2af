"""
Product catalog endpoints
"""

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session
from typing import List
import logging

from app.database import get_db
from app.limiter import limiter
from app.schemas.product import ProductResponse
from app.services.product_catalog import ProductCatalog

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/", response_model=List[ProductResponse])
@limiter.limit("60/minute")
async def list_products(
    request: Request,
    response: Response,
    db: Session = Depends(get_db)
):
    """Active products ordered by name; falls back to a built-in list if the catalog is down"""
    products, source = ProductCatalog(db).list_active_products()
    response.headers["X-Catalog-Source"] = source
    return products
