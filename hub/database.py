from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, declarative_base

from hub.core.config import get_settings

settings = get_settings()
SQLALCHEMY_DATABASE_URL = settings.database_url

# Render/Heroku style URLs start with postgres://
if SQLALCHEMY_DATABASE_URL.startswith("postgres://"):
    SQLALCHEMY_DATABASE_URL = SQLALCHEMY_DATABASE_URL.replace("postgres://", "postgresql://", 1)

connect_args = {}
if SQLALCHEMY_DATABASE_URL.startswith("sqlite"):
    # Only needed for SQLite
    connect_args = {"check_same_thread": False}

engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args=connect_args, pool_pre_ping=True
)


def enable_sqlite_foreign_keys(target_engine):
    """SQLite ignores ON DELETE / FK constraints unless asked per connection."""
    if target_engine.dialect.name != "sqlite":
        return

    @event.listens_for(target_engine, "connect")
    def _set_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


enable_sqlite_foreign_keys(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Every model derives from this Base
Base = declarative_base()


# Request-scoped session. Anything not committed when the handler raises is rolled back,
# so multi-step mutations either land completely or not at all.
def get_db():
    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
