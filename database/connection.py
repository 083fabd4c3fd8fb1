import logging
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from app.config import get_settings
from .models import Base

logger = logging.getLogger(__name__)


def build_engine(url: str):
    if url.startswith("sqlite"):
        # Allow multithreaded test client usage
        return create_engine(url, connect_args={"check_same_thread": False})
    elif url.startswith("postgresql"):
        return create_engine(
            url,
            pool_pre_ping=True,
            pool_recycle=300,
            connect_args={"connect_timeout": 10}
        )
    return create_engine(url)


DATABASE_URL = get_settings().database_url

engine = build_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
logger.info(f"Database engine created for: {DATABASE_URL.split('://')[0]}://...")


def create_tables(bind=None):
    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables created successfully")


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
