import pytest

from himorm.case_when import CaseBuilder, Else, WhenThen, case, new_case_builder


def test_case_with_subject_and_else():
    builder = case("schoolId").when(29, 29).when(30, 30).else_("'w30'")
    assert builder.to_sql() == ("CASE schoolId WHEN 29 THEN 29 WHEN 30 THEN 30 ELSE 'w30' END", [])


def test_case_with_subject_without_else():
    builder = case("schoolId").when(21, 21).when(22, 22)
    assert builder.to_sql() == ("CASE schoolId WHEN 21 THEN 21 WHEN 22 THEN 22 END", [])


def test_case_with_conditions():
    builder = case().when("schoolId = 26", 26).when("schoolId = 27", 27).else_("'w27'")
    sql, args = builder.to_sql()
    assert args == []
    assert sql.endswith("WHEN schoolId = 26 THEN 26 WHEN schoolId = 27 THEN 27 ELSE 'w27' END")
    assert sql.startswith("CASE ")


def test_when_records_text():
    builder = case().when(23, 23)
    assert builder.whens == [WhenThen("23", "23")]
    assert builder.else_("port").otherwise == Else("port")


def test_new_case_builder_quotes_field():
    builder = new_case_builder("ip", "schoolId")
    assert builder.field == "`ip`"
    assert builder.subject == "schoolId"


def test_set_field_keeps_quoted_name():
    assert CaseBuilder().set_field("`port`").field == "`port`"


def test_case_without_when_is_an_error():
    with pytest.raises(ValueError):
        case("schoolId").to_sql()