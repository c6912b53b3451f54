from pathlib import Path

from src.tuition_system.tuition_system.database.bootstrap import split_statements


def test_semicolons_inside_literals_do_not_split():
    sql = """
    -- comment; ignored
    CREATE TABLE t (note VARCHAR(10) DEFAULT 'a;b');
    INSERT INTO t VALUES ('it\\'s; fine');
    SELECT 1
    """

    stmts = list(split_statements(sql))

    assert len(stmts) == 3
    assert stmts[0].startswith("CREATE TABLE t")
    assert "'a;b'" in stmts[0]
    assert stmts[2] == "SELECT 1"


def test_shipped_schema_defines_every_table():
    schema = Path(__file__).resolve().parents[1] / "database" / "schema.sql"
    stmts = list(split_statements(schema.read_text(encoding="utf-8")))

    created = " ".join(s for s in stmts if s.upper().startswith("CREATE TABLE"))
    for table in ("users", "subjects", "timetable", "appointments", "class_attendance"):
        assert table in created
