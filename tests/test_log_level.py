import pytest

from himorm.log_level import LogLevel, log_level


def test_lookup_info():
    assert log_level("Info") is LogLevel.INFO
    assert LogLevel.INFO.level == "Info"


@pytest.mark.parametrize("member", list(LogLevel))
def test_round_trip(member):
    assert log_level(member.level) is member
    assert member.code == int(member)


def test_levels_are_ordered():
    assert log_level("Silent") < log_level("Error") < log_level("Warn") < log_level("Info")
    assert log_level("Silent").code == 1
    assert log_level("Info").code == 4


def test_unknown_level():
    with pytest.raises(ValueError, match="Debug log level undefined"):
        log_level("Debug")