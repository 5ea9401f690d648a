# teashop/database.py
from sqlalchemy.engine import URL
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from teashop.core.config import Settings, get_settings

settings = get_settings()


def build_database_url(cfg: Settings) -> str:
    """
    Resolve the database URL from settings.

    Precedence:
      1. DATABASE_URL as given
      2. DB_HOST => Postgres via psycopg2
      3. SQLite file at SQLITE_PATH
    """
    if cfg.DATABASE_URL:
        return cfg.DATABASE_URL

    if cfg.DB_HOST:
        query = {"sslmode": cfg.DB_SSLMODE} if cfg.DB_SSLMODE else {}
        url = URL.create(
            "postgresql+psycopg2",
            username=cfg.DB_USER,
            password=cfg.DB_PASSWORD,
            host=cfg.DB_HOST,
            port=cfg.DB_PORT,
            database=cfg.DB_NAME,
            query=query,
        )
        return url.render_as_string(hide_password=False)

    return f"sqlite:///{cfg.SQLITE_PATH}"


def _engine_kwargs(db_url: str) -> dict:
    # ---------------------------------------------------------
    # SQLite:
    #   - check_same_thread=False: FastAPI runs sync routes in a threadpool
    #   - in-memory databases must share one connection (StaticPool)
    #
    # Postgres:
    #   - pool_pre_ping=True: validate connections before using them
    #   - small pool, no overflow
    # ---------------------------------------------------------
    if db_url.startswith("sqlite"):
        kwargs: dict = {"connect_args": {"check_same_thread": False}}
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return kwargs

    return {
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 5,
    }


db_url = build_database_url(settings)

engine = create_engine(
    db_url,
    echo=False,        # set to True if you want to debug SQL queries
    **_engine_kwargs(db_url),
)


def create_db_and_tables() -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(engine)


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(engine) as session:
        yield session
