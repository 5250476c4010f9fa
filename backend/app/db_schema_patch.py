from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from sqlalchemy import text
from sqlalchemy.engine import Engine

logger = logging.getLogger(__name__)

# Columns we must ensure exist in the "tournamentmatch" table.
# (name, sqlite_type, postgres_type)
REQUIRED_MATCH_COLUMNS: List[Tuple[str, str, str]] = [
    ("match_type", "VARCHAR DEFAULT 'SINGLE_ELIMINATION_1V1'", "VARCHAR DEFAULT 'SINGLE_ELIMINATION_1V1'"),
    ("current_pairing_id", "VARCHAR", "VARCHAR"),
    ("published_pairing_id", "VARCHAR", "VARCHAR"),
]


def _is_sqlite(engine: Engine) -> bool:
    return engine.dialect.name.lower() == "sqlite"


def _get_existing_columns_sqlite(engine: Engine, table_name: str) -> Dict[str, str]:
    cols: Dict[str, str] = {}
    with engine.connect() as conn:
        res = conn.execute(text(f"PRAGMA table_info({table_name});")).fetchall()
        # PRAGMA table_info returns rows: (cid, name, type, notnull, dflt_value, pk)
        for row in res:
            cols[str(row[1])] = str(row[2])
    return cols


def _get_existing_columns_postgres(engine: Engine, table_name: str) -> Dict[str, str]:
    cols: Dict[str, str] = {}
    sql = """
    SELECT column_name, data_type
    FROM information_schema.columns
    WHERE table_schema = 'public' AND table_name = :table_name;
    """
    with engine.connect() as conn:
        res = conn.execute(text(sql), {"table_name": table_name}).fetchall()
        for row in res:
            cols[str(row[0])] = str(row[1])
    return cols


def _table_exists(engine: Engine, table: str) -> bool:
    if _is_sqlite(engine):
        sql = "SELECT name FROM sqlite_master WHERE type='table' AND name=:table_name"
    else:
        sql = """
        SELECT 1 FROM information_schema.tables
        WHERE table_schema = 'public' AND table_name = :table_name
        """
    with engine.connect() as conn:
        return conn.execute(text(sql), {"table_name": table}).fetchone() is not None


def _ensure_columns(engine: Engine, table: str, required: List[Tuple[str, str, str]]) -> List[str]:
    """Add any missing columns from *required*. Returns the names that were added."""
    if not _table_exists(engine, table):
        # create_all will build it with every column
        return []

    added: List[str] = []
    if _is_sqlite(engine):
        existing = _get_existing_columns_sqlite(engine, table)
        with engine.begin() as conn:
            for name, sqlite_type, _pg_type in required:
                if name in existing:
                    continue
                # SQLite supports ADD COLUMN without IF NOT EXISTS
                conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {name} {sqlite_type};"))
                added.append(name)
    else:
        existing = _get_existing_columns_postgres(engine, table)
        with engine.begin() as conn:
            for name, _sqlite_type, pg_type in required:
                if name in existing:
                    continue
                conn.execute(text(f"ALTER TABLE {table} ADD COLUMN IF NOT EXISTS {name} {pg_type};"))
                added.append(name)
    return added


def ensure_match_columns(engine: Engine) -> None:
    """
    Idempotently adds the pairing pointer columns to the match table if missing.
    Safe to run at every startup.
    """
    try:
        from app.models.tournament_match import TournamentMatch

        added = _ensure_columns(engine, TournamentMatch.__table__.name, REQUIRED_MATCH_COLUMNS)
        if added:
            logger.info("Added match columns: %s", ", ".join(added))
    except Exception as e:
        logger.warning(f"Failed to ensure match columns (this is OK if table doesn't exist yet): {e}")
