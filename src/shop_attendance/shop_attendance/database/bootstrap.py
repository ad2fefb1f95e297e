from __future__ import annotations

import logging
import re
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

import mysql.connector
from werkzeug.security import generate_password_hash

logger = logging.getLogger(__name__)

_DELIMITER_RE = re.compile(r"^\s*DELIMITER\s+(\S+)\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str


@dataclass(frozen=True)
class DemoUser:
    email: str
    name: str
    password: str
    role: str


DEMO_USERS = (
    DemoUser("admin@shop.local", "Admin Demo", "admin123", "admin"),
    DemoUser("manager@shop.local", "Manager Demo", "manager123", "manager"),
    DemoUser("employee@shop.local", "Employee Demo", "employee123", "employee"),
)


def _as_target(db_config: dict) -> DBTarget:
    return DBTarget(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "shop_attendance")),
    )


@contextmanager
def _connect(target: DBTarget, *, with_database: bool = True) -> Iterator:
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    conn = mysql.connector.connect(**kwargs)
    try:
        yield conn
    finally:
        conn.close()


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script into statements.

    Understands quoted strings and client-side ``DELIMITER`` switches, which
    the stored procedure bodies need.
    """
    delimiter = ";"
    buf: list[str] = []
    in_single = False
    in_double = False

    for line in sql.splitlines(keepends=True):
        if not in_single and not in_double:
            m = _DELIMITER_RE.match(line)
            if m:
                delimiter = m.group(1)
                continue

        i = 0
        while i < len(line):
            ch = line[i]
            if ch == "\\" and (in_single or in_double):
                buf.append(line[i : i + 2])
                i += 2
                continue
            if ch == "'" and not in_double:
                in_single = not in_single
            elif ch == '"' and not in_single:
                in_double = not in_double
            elif not in_single and not in_double and line.startswith(delimiter, i):
                stmt = "".join(buf).strip()
                buf.clear()
                if stmt:
                    yield stmt
                i += len(delimiter)
                continue
            buf.append(ch)
            i += 1

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_sql(cur, sql: str) -> None:
    for stmt in _iter_sql_statements(sql):
        cur.execute(stmt)


def ensure_database_exists(db_config: dict) -> None:
    target = _as_target(db_config)
    with _connect(target, with_database=False) as conn:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    target = _as_target(db_config)
    ensure_database_exists(db_config)

    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))
    with _connect(target) as conn:
        cur = conn.cursor()
        _exec_sql(cur, sql)
        conn.commit()
    logger.info("applied %s to %s", Path(schema_path).name, target.database)


def ensure_demo_users(db_config: dict, users: Iterable[DemoUser] = DEMO_USERS) -> None:
    target = _as_target(db_config)

    with _connect(target) as conn:
        cur = conn.cursor(dictionary=True)
        for u in users:
            password_hash = generate_password_hash(u.password)
            cur.execute("SELECT user_id FROM users WHERE email=%s", (u.email,))
            existing = cur.fetchone()
            if existing:
                cur.execute(
                    """
                    UPDATE users
                    SET name=%s, password_hash=%s, role=%s, is_active=1
                    WHERE email=%s
                    """,
                    (u.name, password_hash, u.role, u.email),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO users (user_id, email, name, password_hash, role)
                    VALUES (%s, %s, %s, %s, %s)
                    """,
                    (str(uuid.uuid4()), u.email, u.name, password_hash, u.role),
                )
        conn.commit()


def list_tables(db_config: dict) -> list[str]:
    target = _as_target(db_config)
    with _connect(target) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
