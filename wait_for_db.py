import os
import time
import logging
from urllib.parse import urlparse

import psycopg2

from travonex.core.logging import setup_logging

setup_logging()
logger = logging.getLogger("wait_for_db")

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise SystemExit("DATABASE_URL is not set")

# SQLAlchemy URL may start with postgresql+psycopg2://
url = DATABASE_URL.replace("postgresql+psycopg2://", "postgresql://").replace("postgres://", "postgresql://")
p = urlparse(url)

host = p.hostname or "db"
port = p.port or 5432
user = p.username or "travonex"
password = p.password or "travonex"
dbname = (p.path or "/travonex").lstrip("/") or "travonex"

timeout_s = int(os.getenv("DB_WAIT_TIMEOUT", "60"))
start = time.time()

logger.info("waiting for Postgres at %s:%s db=%s user=%s (timeout=%ss)", host, port, dbname, user, timeout_s)
while True:
    try:
        conn = psycopg2.connect(host=host, port=port, user=user, password=password, dbname=dbname)
        conn.close()
        logger.info("Postgres is ready")
        break
    except psycopg2.OperationalError as e:
        if time.time() - start > timeout_s:
            logger.error("timed out waiting for DB: %s", e)
            raise
        time.sleep(1)
