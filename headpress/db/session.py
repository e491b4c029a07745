# headpress/db/session.py
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from headpress.core.config import settings

connect_args = {}
if settings.DATABASE_URI.startswith("sqlite"):
    connect_args["check_same_thread"] = False

# SQLAlchemy engine built from the configured URI.
engine = create_engine(settings.DATABASE_URI, connect_args=connect_args, pool_pre_ping=True)

# Session factory; one session per request.
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
