import pytest

from adapters.mysql import GROUP_CONCAT_MAX_LEN, MySQLAdapter, mysql_params


def test_mysql_adapter_schema_uses_innodb_and_binary_names(make_fake_connection):
    conn = make_fake_connection()
    store = MySQLAdapter(conn)

    assert store.provisioned is True
    quota_ddl, home_ddl = [sql for sql, _ in conn.statements("CREATE TABLE IF NOT EXISTS")]
    assert "BIGINT PRIMARY KEY AUTO_INCREMENT" in quota_ddl
    assert quota_ddl.endswith("ENGINE=InnoDB")
    assert "COLLATE utf8mb4_bin" in home_ddl
    assert "UNIQUE KEY uniq_player_name (player_uuid, home_data_name)" in home_ddl
    assert "ON DELETE CASCADE" in home_ddl


def test_ensure_quota_row_uses_insert_ignore(make_fake_connection):
    conn = make_fake_connection()
    MySQLAdapter(conn).ensure_quota_row("u1")

    sql, params = conn.executed[-1]
    assert sql.startswith("INSERT IGNORE INTO home")
    assert params == ("u1", 3)


def test_list_names_raises_group_concat_limit_first(make_fake_connection):
    conn = make_fake_connection(rows={"GROUP_CONCAT": ("base,Farm,mine",)})
    store = MySQLAdapter(conn)

    assert store.list_names("u1") == ["base", "Farm", "mine"]
    assert conn.executed[-2] == (f"SET SESSION group_concat_max_len = {GROUP_CONCAT_MAX_LEN}", None)
    assert "SEPARATOR ','" in conn.executed[-1][0]


def test_list_names_decodes_binary_aggregate(make_fake_connection):
    conn = make_fake_connection(rows={"GROUP_CONCAT": (b"a,b",)})
    assert MySQLAdapter(conn).list_names("u1") == ["a", "b"]


def test_list_names_handles_zero_rows_and_failures(make_fake_connection):
    assert MySQLAdapter(make_fake_connection(rows={"GROUP_CONCAT": (None,)})).list_names("u1") == []
    assert MySQLAdapter(make_fake_connection(fail_on=("GROUP_CONCAT",))).list_names("u1") == []


def test_count_and_exists(make_fake_connection):
    conn = make_fake_connection(rows={"COUNT(1)": (4,), "SELECT 1 FROM home_data": (1,)})
    store = MySQLAdapter(conn)

    assert store.count("u1") == 4
    assert store.exists("u1", "base") is True
    assert MySQLAdapter(make_fake_connection()).exists("u1", "base") is False


def test_set_limit_reports_write_failure(make_fake_connection):
    assert MySQLAdapter(make_fake_connection()).set_limit("u1", 5) is True
    assert MySQLAdapter(make_fake_connection(fail_on=("UPDATE home",))).set_limit("u1", 5) is False


def test_mysql_params_require_host():
    with pytest.raises(ValueError, match="DB_HOST is required"):
        mysql_params({"dbname": "homes", "user": "root", "password": "pw"})
