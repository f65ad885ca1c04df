from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from gardencart.db import get_db
from gardencart.repositories.product_repo import ProductRepository
from gardencart.server.serializers import product_to_wire

router = APIRouter(prefix="/api/marketplace/products", tags=["catalogue"])


class ProductUpdateIn(BaseModel):
    price: Optional[Decimal] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)


@router.get("", summary="List products")
def list_products(
    q: Optional[str] = Query(None, description="search term"),
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
):
    items, total = ProductRepository(db).list(q=q, page=page, size=size)
    return {
        "success": True,
        "products": [product_to_wire(p) for p in items],
        "total": total,
    }


@router.get("/{product_id}", summary="Get product")
def get_product(product_id: str, db: Session = Depends(get_db)):
    p = ProductRepository(db).get(product_id)
    if not p:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"success": True, "product": product_to_wire(p)}


@router.put("/{product_id}", summary="Update price / stock")
def update_product(product_id: str, payload: ProductUpdateIn, db: Session = Depends(get_db)):
    p = ProductRepository(db).get(product_id)
    if not p:
        raise HTTPException(status_code=404, detail="Product not found")
    if payload.price is not None:
        p.price = payload.price
    if payload.stock is not None:
        p.stock = payload.stock
    db.commit()
    db.refresh(p)
    return {"success": True, "product": product_to_wire(p)}
