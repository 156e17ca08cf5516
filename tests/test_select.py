import sqlite3

import pytest

from himorm.connection import ConnectError, Session
from himorm.expression import expr
from himorm.paginate import Paginate, PaginateSum
from himorm.select import JoinCase, SelectBuilder


def _unused_connector():
    raise AssertionError("no connection expected")


@pytest.fixture
def builder():
    return SelectBuilder(session=Session(_unused_connector))


@pytest.fixture
def db_session(tmp_path):
    path = str(tmp_path / "test.db")
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE users (user_id INTEGER PRIMARY KEY, user_name TEXT, is_delete INTEGER)")
    conn.executemany(
        "INSERT INTO users (user_id, user_name, is_delete) VALUES (?, ?, ?)",
        [
            (1, "kkk", 1),
            (2, "kkk", 2),
            (3, "kkk", 1),
            (4, "jjj", 0),
            (5, "kkk", 1),
            (6, "zzz", 2),
        ],
    )
    conn.commit()
    conn.close()
    return Session(lambda: sqlite3.connect(path), paramstyle="qmark")


def test_unknown_connection_raises():
    with pytest.raises(ConnectError):
        SelectBuilder("no_such_connection")


def test_first_where(builder):
    sql, args = builder.select("user_id", "user_name").from_("users").where("user_id", "=", 8).limit(1).to_sql()
    assert sql == "SELECT user_id, user_name FROM users WHERE (user_id = ?) LIMIT 1"
    assert args == [8]


def test_where_in_or_where_null(builder):
    sql, args = (
        builder.select("*")
        .from_("users")
        .where_in("user_name", ["ggg", "ttttt"])
        .or_where("is_delete", "=", 1)
        .where_null("update_time")
        .to_sql()
    )
    assert sql == "SELECT * FROM users WHERE (user_name IN (?,?)) OR (is_delete = ?) AND (update_time IS NULL)"
    assert args == ["ggg", "ttttt", 1]


def test_where_between(builder):
    sql, args = builder.select("*").from_("users").where_between("day", "2023-06-11", "2023-06-12").to_sql()
    assert sql == "SELECT * FROM users WHERE (day BETWEEN ? AND ?)"
    assert args == ["2023-06-11", "2023-06-12"]


def test_where_raw_group(builder):
    sql, args = (
        builder.select("*")
        .from_("users")
        .where_raw(lambda b: b.where("user_id", "=", 3).or_where("user_id", "=", 5))
        .to_sql()
    )
    assert sql == "SELECT * FROM users WHERE ((user_id = ?) OR (user_id = ?))"
    assert args == [3, 5]


def test_or_where_raw_group(builder):
    sql, args = (
        builder.select("*")
        .from_("users")
        .where("user_id", "=", 4)
        .or_where_raw(lambda b: b.where_in("user_id", [2, 3]).or_where("user_id", "=", 1))
        .to_sql()
    )
    assert sql == "SELECT * FROM users WHERE (user_id = ?) OR ((user_id IN (?,?)) OR (user_id = ?))"
    assert args == [4, 2, 3, 1]


def test_where_raw_with_inner_raw(builder):
    sql, args = builder.select("*").from_("users").where_raw(lambda b: b.raw("user_id = ?", 1)).to_sql()
    assert sql == "SELECT * FROM users WHERE (user_id = ?)"
    assert args == [1]


def test_group_by_having_order_by(builder):
    sql, args = (
        builder.select("count(user_name) count", "user_name")
        .from_("users")
        .group_by("user_name")
        .order_by("count desc")
        .having("count > ?", 2)
        .having("count <= ?", 4)
        .to_sql()
    )
    assert sql == (
        "SELECT count(user_name) count, user_name FROM users GROUP BY user_name "
        "HAVING count > ? AND count <= ? ORDER BY count desc"
    )
    assert args == [2, 4]


def test_distinct(builder):
    sql, args = builder.distinct().select("user_name").from_("users").order_by("user_id desc").to_sql()
    assert sql == "SELECT DISTINCT user_name FROM users ORDER BY user_id desc"
    assert args == []


def test_order_by_with_limit(builder):
    sql, _ = builder.select("*").from_("users").order_by("user_id desc").limit(1).to_sql()
    assert sql == "SELECT * FROM users ORDER BY user_id desc LIMIT 1"


@pytest.mark.parametrize(
    "method, expected",
    [
        ("join", "SELECT * FROM users AS A JOIN ts_user AS B ON B.uname = A.user_name ORDER BY A.user_id desc"),
        ("inner_join", "SELECT * FROM users AS A INNER JOIN ts_user AS B ON B.uname = A.user_name ORDER BY A.user_id desc"),
        ("left_join", "SELECT * FROM users AS A LEFT JOIN ts_user AS B ON B.uname = A.user_name ORDER BY A.user_id desc"),
        ("right_join", "SELECT * FROM users AS A RIGHT JOIN ts_user AS B ON B.uname = A.user_name ORDER BY A.user_id desc"),
    ],
)
def test_joins(builder, method, expected):
    builder.select("*").from_("users AS A")
    getattr(builder, method)("ts_user AS B", "B.uname", "=", "A.user_name")
    sql, _ = builder.order_by("A.user_id desc").to_sql()
    assert sql == expected


def test_join_options_and_case(builder):
    builder.select("*").from_("t1").join("t2", "t2.id", "=", "t1.id", "AND", "t2.x = 1")
    assert builder.joins[0].case is JoinCase.JOIN
    sql, _ = builder.to_sql()
    assert sql == "SELECT * FROM t1 JOIN t2 ON t2.id = t1.id AND t2.x = 1"


def test_raw_statement(builder):
    sql, args = builder.raw("SELECT * FROM users WHERE user_id = ?", 3).limit(1).to_sql()
    assert sql == "SELECT * FROM users WHERE user_id = ?"
    assert args == [3]


def test_extra_column_args_come_before_where_args(builder):
    sql, args = builder.select("a").column("b + ?", 1).from_("t").where("c", "=", 2).to_sql()
    assert sql == "SELECT a, b + ? FROM t WHERE (c = ?)"
    assert args == [1, 2]


def test_where_with_expression(builder):
    sql, args = builder.select("*").from_("school").where("schoolId", ">=", expr("isDelete + 1")).to_sql()
    assert sql == "SELECT * FROM school WHERE (schoolId >= isDelete + 1)"
    assert args == []


def test_offset_and_limit_order(builder):
    sql, _ = builder.select("*").from_("users").offset(2).limit(2).to_sql()
    assert sql == "SELECT * FROM users LIMIT 2 OFFSET 2"


def test_negative_limit_rejected(builder):
    with pytest.raises(ValueError):
        builder.limit(-1)


def test_no_columns_raises(builder):
    with pytest.raises(ValueError):
        builder.from_("users").to_sql()


def test_invalid_comparison_raises_on_render(builder):
    builder.select("*").from_("users").where("age", ">", None)
    with pytest.raises(ValueError):
        builder.to_sql()


def test_clone_is_independent(builder):
    builder.select("*").from_("users").where("a", "=", 1)
    copy = builder.clone()
    copy.where("b", "=", 2).limit(5)
    assert builder.to_sql() == ("SELECT * FROM users WHERE (a = ?)", [1])
    assert copy.to_sql() == ("SELECT * FROM users WHERE (a = ?) AND (b = ?) LIMIT 5", [1, 2])


def test_tx_replaces_session(builder):
    other = Session(_unused_connector)
    assert builder.tx(other).session is other


def test_get_rows(db_session):
    rows = SelectBuilder(session=db_session).select("user_id").from_("users").where("user_name", "=", "jjj").get()
    assert rows == [{"user_id": 4}]


def test_first_row_and_none(db_session):
    row = SelectBuilder(session=db_session).select("*").from_("users").order_by("user_id desc").first()
    assert row == {"user_id": 6, "user_name": "zzz", "is_delete": 2}
    missing = SelectBuilder(session=db_session).select("*").from_("users").where("user_id", "=", 99).first()
    assert missing is None


def test_paginate_into_list(db_session):
    items: list = []
    page = (
        SelectBuilder(session=db_session)
        .select("user_id", "user_name")
        .from_("users")
        .where("user_name", "=", "kkk")
        .order_by("user_id")
        .paginate(2, 2, items)
    )
    assert isinstance(page, Paginate)
    assert (page.total, page.per_page, page.current_page, page.last_page) == (4, 2, 2, 2)
    assert items == [{"user_id": 3, "user_name": "kkk"}, {"user_id": 5, "user_name": "kkk"}]


def test_paginate_with_sums(db_session):
    items: list = []
    paginate_sum = PaginateSum(items, "is_delete")
    page = SelectBuilder(session=db_session).select("*").from_("users").where("user_name", "=", "kkk").paginate(1, 2, paginate_sum)
    assert paginate_sum.sum == "5"
    assert page.total == 4
    assert len(items) == 2


def test_sum_single_column(db_session):
    total = SelectBuilder(session=db_session).select("*").from_("users").where("user_name", "=", "kkk").sum("is_delete")
    assert total == "5"


def test_count_grouped(db_session):
    count = (
        SelectBuilder(session=db_session)
        .select("count(distinct(user_name))")
        .from_("users")
        .group_by("user_name")
        .count()
    )
    assert count == 3