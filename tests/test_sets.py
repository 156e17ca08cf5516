from himorm.sets import Set, Sets


def test_append_keeps_order():
    sets = Sets()
    sets.append("user_name", "a")
    sets.append("day", "b")
    assert list(sets) == [Set("user_name", "a"), Set("day", "b")]


def test_for_each_stops_when_callback_returns_false():
    sets = Sets()
    for index in range(4):
        sets.append(f"c{index}", index)
    seen = []

    def visit(item):
        seen.append(item.value)
        return item.value < 1

    assert sets.for_each(visit) is sets
    assert seen == [0, 1]


def test_for_each_visits_all_when_true():
    sets = Sets()
    sets.append("a", 1)
    sets.append("b", 2)
    seen = []
    sets.for_each(lambda item: seen.append(item.column) or True)
    assert seen == ["a", "b"]


def test_reset_empties():
    sets = Sets()
    sets.append("a", 1)
    sets.reset()
    assert len(sets) == 0
    assert list(sets) == []


def test_set_fields():
    item = Set("ip", "value")
    assert item.column == "ip"
    assert item.value == "value"