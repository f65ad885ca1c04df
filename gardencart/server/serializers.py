from gardencart.models.cart_item import CartItem
from gardencart.models.order import Order
from gardencart.models.product import Product
from gardencart.models.user import User


def user_to_wire(u: User) -> dict:
    return {
        "_id": str(u.id),
        "email": u.email,
        "name": u.name,
        "gardenType": u.garden_type,
        "experienceLevel": u.experience_level,
        "location": u.location,
    }


def product_to_wire(p: Product) -> dict:
    return {
        "_id": str(p.id),
        "sku": p.sku,
        "name": p.name,
        "description": p.description,
        "category": p.category,
        "price": p.price,
        "stock": p.stock,
        "images": p.images or [],
    }


def cart_item_to_wire(it: CartItem) -> dict:
    p = it.product
    return {
        "_id": str(it.id),
        "product": {
            "_id": str(p.id),
            "name": p.name,
            "price": p.price,
            "stock": p.stock,
            "images": p.images or [],
        },
        "quantity": it.quantity,
    }


def order_to_wire(o: Order) -> dict:
    return {
        "_id": str(o.id),
        "orderNumber": o.order_number,
        "items": [
            {
                "product": str(ln.product_id),
                "name": ln.name,
                "quantity": ln.quantity,
                "price": ln.unit_price,
            }
            for ln in o.lines
        ],
        "shippingAddress": o.shipping_address,
        "paymentMethod": o.payment_method,
        "customerNotes": o.customer_notes or "",
        "subtotal": o.subtotal,
        "shipping": o.shipping,
        "tax": o.tax,
        "discount": o.discount,
        "totalAmount": o.total,
        "status": o.status,
        "createdAt": o.created_at.isoformat() if o.created_at else None,
    }
