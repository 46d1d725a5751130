from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from app.config import settings


class Base(DeclarativeBase):
    pass


_engine = None


def get_engine():
    global _engine
    if _engine is None:
        if settings.database_url.startswith("sqlite"):
            _engine = create_engine(settings.database_url)
        else:
            _engine = create_engine(
                settings.database_url,
                pool_pre_ping=True,
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_timeout=settings.db_pool_timeout,
                pool_recycle=settings.db_pool_recycle,
            )
    return _engine


SessionLocal = sessionmaker(autoflush=False, autocommit=False)


def get_db():
    """Centralized database session dependency for FastAPI.

    Yields a database session and ensures it is closed after the request.
    Use this as a dependency in FastAPI route handlers.

    Example:
        @app.get("/companies/{company_id}/clients")
        def list_clients(company_id: int, db: Session = Depends(get_db)):
            return ClientFilters(db, company_id).all()
    """
    db = SessionLocal(bind=get_engine())
    try:
        yield db
    finally:
        db.close()
