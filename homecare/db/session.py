from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from homecare.core.config import settings

# SQLite connections are shared across FastAPI's threadpool
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=not settings.USE_SQLITE,
    connect_args={"check_same_thread": False} if settings.USE_SQLITE else {}
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
