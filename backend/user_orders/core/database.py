from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker


class Base(DeclarativeBase):
    """Base class for all database models"""


def create_db_engine(database_url: str, **engine_options) -> Engine:
    """Create the database engine - manages the connection pool"""
    # pool_pre_ping drops connections the server closed while idle
    engine_options.setdefault("pool_pre_ping", True)
    return create_engine(database_url, **engine_options)


def create_session_factory(engine: Engine) -> sessionmaker:
    """
    Create the session factory the data access layer is built with.

    Tables are created here if they don't exist yet.
    """
    # Registers the models on Base.metadata before create_all
    from user_orders.models import order, user  # noqa: F401

    Base.metadata.create_all(bind=engine)
    # Session factory - the store opens one session per operation
    # autoflush=False: Nothing is flushed before queries, writes go out on commit
    # expire_on_commit=False: Loaded attributes stay readable after commit,
    # records are converted to schemas once the session is closed
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
