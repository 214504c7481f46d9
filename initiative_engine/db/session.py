# product_lifecycle_engine/initiative_engine/db/session.py

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from initiative_engine.config import settings  # expects DATABASE_URL

engine = create_engine(settings.DATABASE_URL, future=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
