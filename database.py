import os
import logging
import psycopg2
from psycopg2.extras import RealDictCursor

from config.settings import DATABASE_URL, BASE_DIR

logger = logging.getLogger(__name__)

SCHEMA_PATH = os.path.join(BASE_DIR, "schema.sql")


def get_db_connection():
    """
    Open a psycopg2 connection with dict rows.
    Callers own the connection and must close it.
    """
    conn = psycopg2.connect(
        DATABASE_URL,
        cursor_factory=RealDictCursor
    )
    return conn


def init_schema():
    """Apply schema.sql if present. Statements are idempotent."""
    if not os.path.exists(SCHEMA_PATH):
        logger.warning("Schema file not found at %s", SCHEMA_PATH)
        return

    conn = None
    try:
        conn = get_db_connection()
        with open(SCHEMA_PATH, "r") as f:
            with conn.cursor() as cursor:
                cursor.execute(f.read())
        conn.commit()
        logger.info("Database schema applied")
    finally:
        if conn:
            conn.close()
