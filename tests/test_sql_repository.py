"""
SQL Server repository tests against a fake pymssql connection.
Run: pytest tests/test_sql_repository.py -v
"""

import pymssql
import pytest

from conftest import make_job, make_technician
from models import sql_repository
from models.sql_repository import SqlJobRepository, SqlServerClient, SqlTechnicianRepository


class FakeCursor:
    def __init__(self, conn, as_dict=False):
        self.conn = conn
        self.as_dict = as_dict

    def execute(self, query, params=()):
        if self.conn.fail_on and self.conn.fail_on in query:
            raise pymssql.OperationalError("connection lost")
        self.conn.executed.append((" ".join(query.split()), params))

    def fetchall(self):
        return list(self.conn.rows)

    def close(self):
        pass


class FakeConnection:
    def __init__(self, rows=(), fail_on=None):
        self.rows = list(rows)
        self.fail_on = fail_on
        self.executed = []
        self.commits = 0
        self.closed = 0

    def cursor(self, as_dict=False):
        return FakeCursor(self, as_dict)

    def commit(self):
        self.commits += 1

    def close(self):
        self.closed += 1


@pytest.fixture
def fake_conn(monkeypatch):
    conn = FakeConnection()
    monkeypatch.setattr(sql_repository.pymssql, "connect", lambda **kwargs: conn)
    return conn


class TestSqlServerClient:
    def test_schema_created_once(self, fake_conn):
        client = SqlServerClient()
        client.fetch_all("SELECT 1")
        client.fetch_all("SELECT 2")

        ddl = [q for q, _ in fake_conn.executed if "CREATE TABLE" in q]
        assert len(ddl) == len(sql_repository.SCHEMA)

    def test_errors_propagate_and_connection_closed(self, fake_conn):
        client = SqlServerClient()
        client.ensure_schema()
        fake_conn.fail_on = "BROKEN"
        closed_before = fake_conn.closed

        with pytest.raises(pymssql.Error):
            client.execute("UPDATE BROKEN SET x = 1")
        assert fake_conn.closed == closed_before + 1


class TestSqlTechnicianRepository:
    def test_get_parses_profile_json(self, fake_conn):
        tech = make_technician("tech-9", name="Stored Tech")
        fake_conn.rows = [{"ProfileJson": tech.model_dump_json()}]

        loaded = SqlTechnicianRepository(SqlServerClient()).get("tech-9")

        assert loaded == tech
        query, params = fake_conn.executed[-1]
        assert "WHERE Id = %s" in query
        assert params == ("tech-9",)

    def test_get_missing_returns_none(self, fake_conn):
        assert SqlTechnicianRepository(SqlServerClient()).get("nobody") is None

    def test_candidates_filtered_in_sql(self, fake_conn):
        fake_conn.rows = [{"ProfileJson": make_technician("t1").model_dump_json()}]
        candidates = SqlTechnicianRepository(SqlServerClient()).list_candidates()

        assert [t.id for t in candidates] == ["t1"]
        assert "CurrentJobs < MaxDailyJobs" in fake_conn.executed[-1][0]

    def test_save_merges_with_capacity_columns(self, fake_conn):
        tech = make_technician("tech-9", name="Stored Tech", availability={"current_jobs": 2, "max_daily_jobs": 6})
        SqlTechnicianRepository(SqlServerClient()).save(tech)

        query, params = fake_conn.executed[-1]
        assert query.startswith("MERGE dbo.RepairTechnicians")
        assert params[:4] == ("tech-9", "Stored Tech", 2, 6)
        assert params[5:9] == ("tech-9", "Stored Tech", 2, 6)
        assert fake_conn.commits >= 2


class TestSqlJobRepository:
    def test_save_and_get(self, fake_conn):
        repo = SqlJobRepository(SqlServerClient())
        job = make_job("job-42")
        repo.save(job)

        query, params = fake_conn.executed[-1]
        assert query.startswith("MERGE dbo.RepairJobs")
        assert params[0] == "job-42"

        fake_conn.rows = [{"RequirementsJson": params[1]}]
        assert repo.get("job-42") == job
