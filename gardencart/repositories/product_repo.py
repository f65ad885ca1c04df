from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from gardencart.models.product import Product


class ProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id) -> Optional[Product]:
        try:
            pid = int(product_id)
        except (TypeError, ValueError):
            return None
        return (
            self.db.query(Product)
            .filter(Product.id == pid, Product.active == True)  # noqa: E712
            .first()
        )

    def get_by_sku(self, sku: str) -> Optional[Product]:
        return self.db.query(Product).filter(Product.sku == sku).first()

    def list(
        self, q: Optional[str] = None, page: int = 1, size: int = 20
    ) -> Tuple[List[Product], int]:
        query = self.db.query(Product).filter(Product.active == True)  # noqa: E712
        if q:
            like = f"%{q}%"
            query = query.filter(
                (Product.name.ilike(like)) | (Product.description.ilike(like))
            )
        total = query.with_entities(func.count()).scalar() or 0
        items = query.order_by(Product.name).offset((page - 1) * size).limit(size).all()
        return items, total

    def create_or_update(
        self,
        sku: str,
        name: str,
        price: Decimal,
        stock: int = 0,
        description: str = None,
        category: str = None,
        images: list = None,
    ) -> Product:
        p = self.get_by_sku(sku)
        if p:
            p.name = name
            p.price = price
            p.stock = stock
            p.description = description
            p.category = category
            p.images = images or []
        else:
            p = Product(
                sku=sku,
                name=name,
                price=price,
                stock=stock,
                description=description,
                category=category,
                images=images or [],
            )
            self.db.add(p)
        self.db.flush()
        return p
