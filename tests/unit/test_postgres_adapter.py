import logging

from adapters.base import Coordinate
from adapters.postgres import PostgresAdapter, postgres_params


def test_postgres_adapter_provisions_both_tables(make_fake_connection):
    conn = make_fake_connection()
    store = PostgresAdapter(conn)

    assert store.provisioned is True
    ddl = conn.statements("CREATE TABLE IF NOT EXISTS")
    assert len(ddl) == 2
    assert "BIGSERIAL PRIMARY KEY" in ddl[0][0]
    assert "home_limit INTEGER NOT NULL DEFAULT 3" in ddl[0][0]
    assert "UNIQUE (player_uuid, home_data_name)" in ddl[1][0]
    assert "REFERENCES home(player_uuid) ON DELETE CASCADE" in ddl[1][0]
    assert conn.commits == 1


def test_postgres_provisioning_failure_is_logged_not_raised(make_fake_connection, caplog):
    conn = make_fake_connection(fail_on=("CREATE TABLE",))

    with caplog.at_level(logging.WARNING):
        store = PostgresAdapter(conn)

    assert store.provisioned is False
    assert conn.rollbacks == 1
    assert "Failed to create home tables (PostgreSQL)" in caplog.text


def test_ensure_quota_row_uses_on_conflict_do_nothing(make_fake_connection):
    conn = make_fake_connection()
    store = PostgresAdapter(conn)

    store.ensure_quota_row("u1")

    sql, params = conn.executed[-1]
    assert "ON CONFLICT (player_uuid) DO NOTHING" in sql
    assert params == ("u1", 3)


def test_get_limit_reads_row_and_falls_back_to_default(make_fake_connection):
    conn = make_fake_connection(rows={"SELECT home_limit": (-1,)})
    assert PostgresAdapter(conn).get_limit("u1") == -1

    failing = make_fake_connection(fail_on=("SELECT home_limit",))
    assert PostgresAdapter(failing).get_limit("u1") == 3
    assert failing.rollbacks == 1


def test_create_binds_coordinates_as_parameters(make_fake_connection):
    conn = make_fake_connection()
    store = PostgresAdapter(conn)

    assert store.create("u1", "base", 1.5, 64, -3.25) is True

    sql, params = conn.statements("INSERT INTO home_data")[0]
    assert "VALUES (%s, %s, %s, %s, %s)" in sql
    assert params == ("base", 1.5, 64.0, -3.25, "u1")


def test_create_reports_unique_violation_as_false(make_fake_connection, caplog):
    conn = make_fake_connection(fail_on=("INSERT INTO home_data",))
    store = PostgresAdapter(conn)

    with caplog.at_level(logging.WARNING):
        assert store.create("u1", "base", 0, 0, 0) is False
    assert "Failed to insert home (PostgreSQL) 'base' for u1" in caplog.text


def test_read_returns_coordinate(make_fake_connection):
    conn = make_fake_connection(rows={"SELECT loc_x, loc_y, loc_z": (1.0, 2.0, 3.0)})
    store = PostgresAdapter(conn)

    assert store.read("u1", "base") == Coordinate(1.0, 2.0, 3.0)
    assert conn.executed[-1][1] == ("u1", "base")


def test_list_names_unpacks_string_agg(make_fake_connection):
    conn = make_fake_connection(rows={"string_agg": ("alpha,Beta,gamma",)})
    store = PostgresAdapter(conn)

    assert store.list_names("u1") == ["alpha", "Beta", "gamma"]
    sql, params = conn.executed[-1]
    assert 'ORDER BY lower(home_data_name) COLLATE "C", home_data_name COLLATE "C"' in sql
    assert params == ("u1",)


def test_list_names_null_aggregate_is_empty(make_fake_connection):
    conn = make_fake_connection(rows={"string_agg": (None,)})
    assert PostgresAdapter(conn).list_names("u1") == []


def test_delete_uses_rowcount(make_fake_connection):
    assert PostgresAdapter(make_fake_connection(rowcount=1)).delete("u1", "base") is True
    assert PostgresAdapter(make_fake_connection(rowcount=0)).delete("u1", "base") is False


def test_postgres_params_prefer_source_config(monkeypatch):
    monkeypatch.setenv("DB_HOST", "env-host")
    monkeypatch.setenv("DB_NAME", "env-db")
    monkeypatch.setenv("DB_USER", "env-user")
    monkeypatch.setenv("DB_PASSWORD", "env-pass")

    params = postgres_params({"host": "cfg-host", "port": 6543})

    assert params == {
        "host": "cfg-host",
        "port": 6543,
        "dbname": "env-db",
        "user": "env-user",
        "password": "env-pass",
    }
