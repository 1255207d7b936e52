from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from salesync.core.config import settings

engine = create_engine(settings.DATABASE_URL, pool_pre_ping=True, future=True)

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
