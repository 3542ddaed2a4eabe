"""
Conexión a base de datos PostgreSQL

Este módulo centraliza el acceso a la base de datos:
- SQLAlchemy (declaración del esquema y create_all)
- psycopg2 directo (todas las queries de repositorios, en SQL raw)
"""
import logging
import time
from functools import lru_cache

import psycopg2
from psycopg2.extras import RealDictCursor
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base

from .config import settings

logger = logging.getLogger(__name__)


# ============================================================================
# SQLAlchemy Configuration (schema only)
# ============================================================================

# Base para modelos
Base = declarative_base()


@lru_cache(maxsize=1)
def get_engine():
    """SQLAlchemy engine, created on first use"""
    return create_engine(
        settings.DATABASE_URL,
        pool_pre_ping=True,  # Verificar conexión antes de usar
    )


def create_schema(engine=None):
    """
    Create every table declared in app.models (idempotent)

    Usage:
        python -c "from app.core.database import create_schema; create_schema()"
    """
    import app.models  # noqa: F401  registers tables on Base.metadata

    engine = engine or get_engine()
    Base.metadata.create_all(bind=engine)
    logger.info(f"Schema ready: {', '.join(sorted(Base.metadata.tables))}")


# ============================================================================
# psycopg2 Connections with Retry Logic
# ============================================================================

def get_db_connection_dict_with_retry(max_retries=None, retry_delay=None):
    """
    Get a psycopg2 connection with RealDictCursor and automatic retry

    Retries only on OperationalError (network/SSL drops), with exponential
    backoff between attempts. Any other error fails immediately.

    Args:
        max_retries: Maximum number of connection attempts (default: settings.DB_CONNECT_RETRIES)
        retry_delay: Initial delay between retries in seconds (default: settings.DB_RETRY_DELAY)

    Returns:
        psycopg2 connection with RealDictCursor

    Example:
        conn = get_db_connection_dict_with_retry()
        cursor = conn.cursor()
        cursor.execute("SELECT * FROM orders")
        results = cursor.fetchall()  # Returns list of dicts
        cursor.close()
        conn.close()
    """
    max_retries = max_retries or settings.DB_CONNECT_RETRIES
    retry_delay = settings.DB_RETRY_DELAY if retry_delay is None else retry_delay

    database_url = settings.DATABASE_URL
    if not database_url:
        raise RuntimeError("DATABASE_URL not configured")

    last_error = None

    for attempt in range(1, max_retries + 1):
        try:
            logger.debug(f"Database connection attempt {attempt}/{max_retries}")
            conn = psycopg2.connect(database_url, cursor_factory=RealDictCursor)
            logger.debug(f"Database connection successful on attempt {attempt}")
            return conn

        except psycopg2.OperationalError as e:
            last_error = e
            error_msg = str(e)

            if "SSL connection has been closed unexpectedly" in error_msg:
                logger.warning(f"SSL connection error on attempt {attempt}/{max_retries}: {error_msg}")
            else:
                logger.warning(f"Connection error on attempt {attempt}/{max_retries}: {error_msg}")

            if attempt < max_retries:
                delay = retry_delay * (2 ** (attempt - 1))
                logger.info(f"Retrying in {delay:.2f} seconds...")
                time.sleep(delay)
            else:
                logger.error(f"All {max_retries} connection attempts failed")

    raise last_error
