import logging
from sqlalchemy.orm import Session, sessionmaker
from .models import User

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_ID = "user-admin"
DEFAULT_ADMIN_NAME = "Administrador"


def ensure_default_admin(session_factory: sessionmaker) -> bool:
    """Create a Super-Admin when the users table is empty. Returns True if one was added."""
    db: Session = session_factory()
    try:
        if db.query(User).first() is not None:
            return False
        db.add(User(id=DEFAULT_ADMIN_ID, name=DEFAULT_ADMIN_NAME, role="Super-Admin"))
        db.commit()
        logger.info(f"👤 Seeded default Super-Admin: {DEFAULT_ADMIN_ID}")
        return True
    finally:
        db.close()
