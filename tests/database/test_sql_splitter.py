from __future__ import annotations

from pathlib import Path

from approval_system.database.bootstrap import _strip_create_db_and_use, iter_sql_statements

SCHEMA = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def test_splitter_ignores_semicolons_in_quotes_and_comments():
    sql = "-- note; ignored\nINSERT INTO t VALUES ('a;b');\nSELECT 1;"

    assert list(iter_sql_statements(sql)) == ["INSERT INTO t VALUES ('a;b')", "SELECT 1"]


def test_schema_creates_the_three_tables():
    sql = _strip_create_db_and_use(SCHEMA.read_text(encoding="utf-8"))
    statements = list(iter_sql_statements(sql))

    assert len(statements) == 3
    assert all(s.startswith("CREATE TABLE IF NOT EXISTS") for s in statements)
    assert "approval_history" in statements[2]
