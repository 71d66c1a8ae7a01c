from __future__ import annotations

import logging
import re
from contextlib import closing
from pathlib import Path
from typing import Iterator

from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"

# schema.sql names its own database; the configured one wins.
_DATABASE_DIRECTIVE = re.compile(r"^\s*(CREATE\s+DATABASE|USE)\b.*?;\s*$", re.IGNORECASE | re.MULTILINE)


def schema_statements(sql: str) -> Iterator[str]:
    """Split schema.sql into statements.

    Statements end with ';' at the end of a line. Comment lines and database
    directives are dropped.
    """
    sql = _DATABASE_DIRECTIVE.sub("", sql)
    buf: list[str] = []
    for line in sql.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("--"):
            continue
        buf.append(line)
        if stripped.endswith(";"):
            yield "\n".join(buf).rstrip().rstrip(";")
            buf.clear()
    if buf:
        yield "\n".join(buf).strip()


def ensure_database_exists(config: DBConfig) -> None:
    with closing(DatabaseConnection(config).connect(with_database=False)) as conn:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> int:
    """Create the database and every table that is missing. Returns the statement count."""

    config = DBConfig.from_dict(db_config)
    ensure_database_exists(config)

    count = 0
    with closing(DatabaseConnection(config).connect()) as conn:
        cur = conn.cursor()
        for stmt in schema_statements(Path(schema_path).read_text(encoding="utf-8")):
            cur.execute(stmt)
            count += 1
        conn.commit()
    logger.info("Applied %s schema statements to %s", count, config.database)
    return count


def list_tables(db_config: dict) -> list[str]:
    with closing(DatabaseConnection(DBConfig.from_dict(db_config)).connect()) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return sorted(str(r[0]) for r in cur.fetchall())
