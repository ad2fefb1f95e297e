from __future__ import annotations

from pathlib import Path

from src.shop_attendance.shop_attendance.database.bootstrap import (
    DEMO_USERS,
    _iter_sql_statements,
    _strip_create_db_and_use,
)

SCHEMA = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def test_splits_on_semicolons_outside_quotes():
    sql = "INSERT INTO t VALUES ('a;b');\nSELECT \"x;y\";\n\nSELECT 1"
    assert list(_iter_sql_statements(sql)) == [
        "INSERT INTO t VALUES ('a;b')",
        'SELECT "x;y"',
        "SELECT 1",
    ]


def test_delimiter_switch_keeps_procedure_body_whole():
    sql = (
        "DROP PROCEDURE IF EXISTS p;\n"
        "DELIMITER $$\n"
        "CREATE PROCEDURE p()\n"
        "BEGIN\n"
        "    SELECT 1;\n"
        "    SELECT 2;\n"
        "END$$\n"
        "DELIMITER ;\n"
        "SELECT 3;\n"
    )
    stmts = list(_iter_sql_statements(sql))

    assert len(stmts) == 3
    assert stmts[0] == "DROP PROCEDURE IF EXISTS p"
    assert stmts[1].startswith("CREATE PROCEDURE p()")
    assert stmts[1].endswith("END")
    assert "SELECT 1;" in stmts[1] and "SELECT 2;" in stmts[1]
    assert stmts[2] == "SELECT 3"


def test_strip_create_db_and_use():
    sql = "CREATE DATABASE IF NOT EXISTS x;\nUSE x;\nCREATE TABLE t (id INT);\n"
    assert list(_iter_sql_statements(_strip_create_db_and_use(sql))) == ["CREATE TABLE t (id INT)"]


def test_schema_file_yields_both_procedures():
    sql = _strip_create_db_and_use(SCHEMA.read_text(encoding="utf-8"))
    stmts = list(_iter_sql_statements(sql))

    procedures = [s for s in stmts if "CREATE PROCEDURE" in s]
    assert len(procedures) == 2
    assert "auto_start_attendance" in procedures[0]
    assert "end_current_attendance" in procedures[1]
    assert all(p.rstrip().endswith("END") for p in procedures)
    assert not any("DELIMITER" in s for s in stmts)
    assert not any(s.lstrip().upper().startswith("USE ") for s in stmts)
    for table in ("users", "attendance", "sessions"):
        assert any(f"CREATE TABLE IF NOT EXISTS {table} " in s for s in stmts)


def test_demo_users_cover_every_role():
    assert sorted(u.role for u in DEMO_USERS) == ["admin", "employee", "manager"]
