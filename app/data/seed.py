# app/data/seed.py
from decimal import Decimal

from sqlalchemy.orm import Session

from app.data.database import SessionLocal
from app.data.models.product import ProductModel
from app.repos.product_repo import ProductRepo
from app.utils.logging import get_logger

logger = get_logger(__name__)

SAMPLE_PRODUCTS = [
    ("Laptop", "High-performance laptop for professionals", "999.99", 10,
     "https://images.unsplash.com/photo-1496181133206-80ce9b88a853?w=400", "Electronics"),
    ("Smartphone", "Latest model with amazing features", "699.99", 15,
     "https://images.unsplash.com/photo-1511707171634-5f897ff02aa9?w=400", "Electronics"),
    ("Headphones", "Wireless noise-cancelling headphones", "199.99", 20,
     "https://images.unsplash.com/photo-1505740420928-5e560c06d30e?w=400", "Electronics"),
    ("Coffee Maker", "Programmable coffee maker", "79.99", 25,
     "https://images.unsplash.com/photo-1517668808822-9ebb02f2a0e6?w=400", "Home"),
    ("Backpack", "Durable travel backpack", "49.99", 30,
     "https://images.unsplash.com/photo-1553062407-98eeb64c6a62?w=400", "Fashion"),
    ("Running Shoes", "Comfortable athletic shoes", "89.99", 18,
     "https://images.unsplash.com/photo-1542291026-7eec264c27ff?w=400", "Fashion"),
    ("Desk Lamp", "LED desk lamp with adjustable brightness", "34.99", 22,
     "https://images.unsplash.com/photo-1507473885765-e6ed057f782c?w=400", "Home"),
    ("Water Bottle", "Insulated stainless steel water bottle", "24.99", 40,
     "https://images.unsplash.com/photo-1602143407151-7111542de6e8?w=400", "Sports"),
]


def seed_products(db: Session) -> int:
    repo = ProductRepo(db)
    # not forcing: only seed if empty
    if repo.count_products():
        return 0

    for name, description, price, stock, image_url, category in SAMPLE_PRODUCTS:
        repo.create_product(
            ProductModel(
                name=name,
                description=description,
                price=Decimal(price),
                stock_quantity=stock,
                image_url=image_url,
                category=category,
            )
        )
    db.commit()
    logger.info(f"Seeded {len(SAMPLE_PRODUCTS)} sample products")
    return len(SAMPLE_PRODUCTS)


def seed():
    db = SessionLocal()
    try:
        seed_products(db)
    finally:
        db.close()


if __name__ == "__main__":
    seed()
