import pytest

from himorm.expression import (
    Between,
    Eq,
    Expression,
    Gt,
    GtOrEq,
    Like,
    Logic,
    Lt,
    LtOrEq,
    NotEq,
    NotLike,
    Raw,
    WhereRaw,
    and_where,
    apply_logic,
    condition_handle,
    expr,
    or_where,
)


def test_eq_scalar():
    assert Eq("user_id", 4).to_sql() == ("user_id = ?", [4])


def test_eq_sequence_becomes_in_list():
    assert Eq("user_id", [2, 3]).to_sql() == ("user_id IN (?,?)", [2, 3])


def test_eq_none_is_null_test():
    assert Eq("delete_time", None).to_sql() == ("delete_time IS NULL", [])


def test_eq_empty_sequence():
    assert Eq("user_id", []).to_sql() == ("(1=0)", [])


def test_not_eq_scalar():
    assert NotEq("user_id", 4).to_sql() == ("user_id <> ?", [4])


def test_not_eq_differs_from_eq_on_null_and_lists():
    assert NotEq("c", None).to_sql()[1] == []
    assert NotEq("c", None).to_sql()[0] != Eq("c", None).to_sql()[0]
    sql, args = NotEq("c", [1, 2]).to_sql()
    assert args == [1, 2]
    assert sql != Eq("c", [1, 2]).to_sql()[0]


def test_ordering_comparisons():
    assert Gt("count", 2).to_sql() == ("count > ?", [2])
    assert LtOrEq("count", 4).to_sql() == ("count <= ?", [4])


@pytest.mark.parametrize("cls", [Gt, GtOrEq, Lt, LtOrEq, Like, NotLike])
def test_null_and_sequence_rejected(cls):
    with pytest.raises(ValueError):
        cls("c", None).to_sql()
    with pytest.raises(ValueError):
        cls("c", [1]).to_sql()


def test_like_args():
    sql, args = Like("user_name", "%g%").to_sql()
    assert args == ["%g%"]
    assert sql.startswith("user_name ")


def test_between():
    sql, args = Between("day", "2023-06-11", "2023-06-12").to_sql()
    assert args == ["2023-06-11", "2023-06-12"]
    assert sql.startswith("day ")
    assert sql.endswith("BETWEEN ? AND ?")


def test_raw_and_where_raw_return_their_parts():
    assert Raw("user_id = ?", [1]).to_sql() == ("user_id = ?", [1])
    assert WhereRaw("user_id = ?", [3]).to_sql() == ("user_id = ?", [3])


def test_raw_with_error_raises_it():
    with pytest.raises(RuntimeError):
        Raw("x", [], RuntimeError("boom")).to_sql()


def test_expr_plain():
    assert expr("isDelete + 1").to_sql() == ("isDelete + 1", [])


def test_expr_inlines_nested_expression():
    inner = expr("b + ?", 1)
    sql, args = expr("a = ?", inner).to_sql()
    assert sql == "a = " + inner.to_sql()[0]
    assert args == [1]


def test_condition_with_expression_value():
    assert condition_handle("schoolId", ">=", expr("isDelete + 1")).to_sql() == ("schoolId >= isDelete + 1", [])


def test_condition_keeps_error_of_failing_value():
    failing = Raw("x", [], ValueError("bad"))
    condition = condition_handle("c", "=", failing)
    assert isinstance(condition, Expression)
    with pytest.raises(ValueError):
        condition.to_sql()


@pytest.mark.parametrize(
    "operator, value, cls",
    [
        (">", 1, Gt),
        (">=", 1, GtOrEq),
        ("<", 1, Lt),
        ("<=", 1, LtOrEq),
        ("<>", 1, NotEq),
        ("!=", 1, NotEq),
        ("Like", "a%", Like),
        ("NotLike", "a%", NotLike),
        ("IN", [1, 2], Eq),
        ("NotIn", [1, 2], NotEq),
        ("Null", None, Eq),
        ("NotNull", None, NotEq),
        ("=", 1, Eq),
    ],
)
def test_condition_dispatch(operator, value, cls):
    assert condition_handle("c", operator, value).to_sql() == cls("c", value).to_sql()


def test_condition_wrapped_operator_requires_matching_type():
    with pytest.raises(TypeError):
        condition_handle("c", "BETWEEN", 5)
    between = Between("c", 1, 2)
    assert condition_handle("c", "BETWEEN", between) is between


def test_and_or_where_logic():
    assert and_where("c", "=", 1).logic is Logic.AND
    assert or_where("c", "=", 1).logic is Logic.OR


def test_apply_logic_first_raw_is_bare():
    where = and_where("", "RAW", Raw("user_id = ?", [1]))
    assert apply_logic(where, "user_id = ?", [1], [], []) == (["user_id = ?"], [1])


def test_apply_logic_first_condition_is_parenthesised():
    where = and_where("user_id", "=", 3)
    assert apply_logic(where, "user_id = ?", [3], [], []) == (["(user_id = ?)"], [3])


def test_apply_logic_joins_with_and_or():
    first = and_where("user_id", "=", 3)
    parts, values = apply_logic(first, "user_id = ?", [3], [], [])
    second = or_where("user_id", "=", 5)
    parts, values = apply_logic(second, "user_id = ?", [5], parts, values)
    assert parts == ["(user_id = ?)", "OR", "(user_id = ?)"]
    assert values == [3, 5]
    third = and_where("user_id", "=", 7)
    parts, values = apply_logic(third, "user_id = ?", [7], parts, values)
    assert parts[-2:] == ["AND", "(user_id = ?)"]
    assert values == [3, 5, 7]