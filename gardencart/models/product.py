from sqlalchemy import JSON, Boolean, Column, Integer, Numeric, String, Text

from gardencart.db import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    sku = Column(String(64), unique=True, index=True, nullable=False)
    name = Column(String(256), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(64), nullable=True)
    price = Column(Numeric(12, 2), nullable=False, default=0)
    images = Column(JSON, nullable=False, default=list)
    active = Column(Boolean, default=True, nullable=False)
    stock = Column(Integer, default=0, nullable=False)

    def __repr__(self):
        return f"<Product sku={self.sku} name={self.name}>"
