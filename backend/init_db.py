"""Initialize the database with default categories and an admin user."""

from sqlalchemy.orm import Session, sessionmaker

from authentication.auth import get_password_hash
from models.config import settings
from repositories.database import Base, SessionLocal, engine
from repositories.db_models import Category, CategoryStatus, User, UserRole

DEFAULT_CATEGORIES = [
    "Web Development",
    "Data Science",
    "Mobile Development",
    "Design",
    "Business",
    "Marketing",
]


def get_default_categories() -> list[str]:
    """Names of the categories every fresh install starts with."""
    return list(DEFAULT_CATEGORIES)


def seed(db: Session) -> dict:
    """
    Insert default categories and the bootstrap admin when missing.

    Returns:
        Counts of created rows, keyed by "categories" and "admin".
    """
    created = {"categories": 0, "admin": 0}

    existing = {name.lower() for (name,) in db.query(Category.name).all()}
    for name in get_default_categories():
        if name.lower() not in existing:
            db.add(Category(name=name, status=CategoryStatus.APPROVED))
            created["categories"] += 1

    admin_email = settings.ADMIN_EMAIL.lower()
    if not db.query(User).filter(User.email == admin_email).first():
        db.add(
            User(
                name="Administrator",
                email=admin_email,
                hashed_password=get_password_hash(settings.ADMIN_PASSWORD),
                role=UserRole.ADMIN,
            )
        )
        created["admin"] = 1

    db.commit()
    return created


def init_db(session_factory: sessionmaker = SessionLocal) -> None:
    """Create tables and seed default data."""
    Base.metadata.create_all(bind=engine)
    db = session_factory()

    try:
        created = seed(db)
        if created["categories"]:
            print(f"[OK] {created['categories']} default categories created")
        if created["admin"]:
            print("[OK] Admin user created")
            print(f"  Email: {settings.ADMIN_EMAIL}")
            print("  Password: (from ADMIN_PASSWORD in .env)")
            print("  IMPORTANT: Change this password in production!")

        print("\n[OK] Database initialization complete!")

    except Exception as e:
        print(f"Error initializing database: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    init_db()
