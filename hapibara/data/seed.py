# hapibara/data/seed.py
from decimal import Decimal

from hapibara.data.database import SessionLocal, engine, init_db
from hapibara.data.models import ProductModel, UserModel
from hapibara.repos.product_repo import ProductRepo
from hapibara.repos.user_repo import UserRepo
from hapibara.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

USERS = [
    {"email": "admin@hapibara.com", "name": "HapiBara Admin"},
    {"email": "sarah@example.com", "name": "Sarah Green"},
    {"email": "marcus@example.com", "name": "Marcus Chen"},
]

PRODUCTS = [
    {
        "name": "Organic Coconut Oil - Cold Pressed",
        "slug": "organic-coconut-oil-cold-pressed",
        "description": "Premium quality, cold-pressed coconut oil perfect for cooking and skincare",
        "category": "food",
        "brand": "Pure Harvest Co.",
        "price": Decimal("24.99"),
        "original_price": Decimal("29.99"),
        "inventory": 150,
    },
    {
        "name": "Bamboo Fiber Bowl Set",
        "slug": "bamboo-fiber-bowl-set",
        "description": "Eco-friendly, lightweight bowls perfect for smoothie bowls and mindful eating",
        "category": "household",
        "brand": "EcoLife",
        "price": Decimal("32.00"),
        "original_price": None,
        "inventory": 75,
    },
    {
        "name": "Calming Lavender Body Oil",
        "slug": "calming-lavender-body-oil",
        "description": "Organic lavender-infused body oil for relaxation and skin nourishment",
        "category": "skincare",
        "brand": "Mindful Beauty",
        "price": Decimal("28.50"),
        "original_price": Decimal("34.00"),
        "inventory": 120,
    },
]


def seed(session_factory=SessionLocal, bind=engine) -> bool:
    """Inserts demo users and products. Returns False when the catalog is already filled."""
    init_db(bind)
    db = session_factory()
    try:
        # not forcing: only seed if empty
        if db.query(ProductModel).first():
            logger.info("Seed skipped, products already present")
            return False

        users, products = UserRepo(db), ProductRepo(db)
        for u in USERS:
            users.create_user(UserModel(**u))
        for p in PRODUCTS:
            products.create_product(ProductModel(**p))
        db.commit()
        logger.info("Seed finished", users=len(USERS), products=len(PRODUCTS))
        return True
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging()
    seed()
