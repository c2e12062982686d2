import os
from urllib.parse import quote_plus

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()
engine = None
SessionLocal = None


def _read_int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer") from exc


def _build_sqlserver_url() -> str:
    driver = os.getenv("SQLSERVER_DRIVER", "")
    host = os.getenv("SQLSERVER_HOST", "")
    port = os.getenv("SQLSERVER_PORT", "")
    database = os.getenv("SQLSERVER_DB", "")
    user = os.getenv("SQLSERVER_USER_LOGIN", "")
    password = os.getenv("SQLSERVER_USER_PASSWORD", "")

    missing = [key for key, value in {
        "SQLSERVER_HOST": host,
        "SQLSERVER_PORT": port,
        "SQLSERVER_DB": database,
        "SQLSERVER_DRIVER": driver,
        "SQLSERVER_USER_LOGIN": user,
        "SQLSERVER_USER_PASSWORD": password,
    }.items() if not value]
    if missing:
        raise RuntimeError(f"Missing database configuration: {', '.join(missing)}")

    driver_encoded = quote_plus(driver)
    password_encoded = quote_plus(password)
    return (
        f"mssql+pyodbc://{user}:{password_encoded}@{host}:{port}/{database}"
        f"?driver={driver_encoded}&Encrypt=yes&TrustServerCertificate=yes"
    )


def BuildConnectionUrl() -> str:
    url = os.getenv("DATABASE_URL", "").strip()
    if url:
        return url
    return _build_sqlserver_url()


def _configure_sqlite(sqlite_engine) -> None:
    # pysqlite defers BEGIN on its own, which breaks SAVEPOINT handling.
    @event.listens_for(sqlite_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(sqlite_engine, "begin")
    def _on_begin(connection):
        connection.exec_driver_sql("BEGIN")


def BuildEngine(url: str):
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
        sqlite_engine = create_engine(url, **options)
        _configure_sqlite(sqlite_engine)
        return sqlite_engine
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=_read_int_env("SQLALCHEMY_POOL_SIZE", 10),
        max_overflow=_read_int_env("SQLALCHEMY_MAX_OVERFLOW", 20),
        pool_timeout=_read_int_env("SQLALCHEMY_POOL_TIMEOUT", 60),
    )


def _ensure_engine():
    global engine, SessionLocal
    if engine is None:
        engine = BuildEngine(BuildConnectionUrl())
        SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def OpenSession():
    if SessionLocal is None:
        _ensure_engine()
    return SessionLocal()


def GetDb():
    db = OpenSession()
    try:
        yield db
    finally:
        db.close()
