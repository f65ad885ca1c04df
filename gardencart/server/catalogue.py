from decimal import Decimal
from typing import Dict, Iterable

from sqlalchemy.orm import Session

from gardencart.repositories.product_repo import ProductRepository

DEFAULT_CATALOGUE = [
    {"sku": "SEED-TOM", "name": "Tomato Seeds (50 pcs)", "category": "seeds", "price": 120, "stock": 200},
    {"sku": "SEED-CHL", "name": "Green Chilli Seeds", "category": "seeds", "price": 80, "stock": 150},
    {"sku": "FERT-VERMI", "name": "Vermicompost 5kg", "category": "fertilizer", "price": 350, "stock": 60},
    {"sku": "POT-CER-10", "name": "Ceramic Pot 10in", "category": "pots", "price": 650, "stock": 25},
    {"sku": "TOOL-TROWEL", "name": "Hand Trowel", "category": "tools", "price": 250, "stock": 40},
    {"sku": "PLANT-MONST", "name": "Monstera Deliciosa", "category": "plants", "price": 1200, "stock": 8},
]


def _normalize_entry(entry: Dict) -> Dict:
    """Accept `price` as number or string; `images` may be a single string."""
    images = entry.get("images") or entry.get("image") or []
    if isinstance(images, str):
        images = [images]
    return {
        "sku": entry.get("sku") or entry.get("id"),
        "name": entry.get("name") or entry.get("title") or "",
        "price": Decimal(str(entry.get("price", 0))),
        "stock": int(entry.get("stock", 0)),
        "description": entry.get("description"),
        "category": entry.get("category"),
        "images": images,
    }


def seed_catalogue(db: Session, entries: Iterable[Dict] = DEFAULT_CATALOGUE) -> int:
    """Create or refresh catalogue products; returns how many were written."""
    repo = ProductRepository(db)
    count = 0
    for raw in entries:
        entry = _normalize_entry(raw)
        if not entry["sku"]:
            continue
        repo.create_or_update(**entry)
        count += 1
    db.commit()
    return count
