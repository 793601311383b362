from memory import Memory


def test_unset_names_read_as_zero():
    assert Memory().get("anything") == 0


def test_put_overwrites_case_insensitively():
    memory = Memory()
    memory.put("Total", 3)
    memory.put("TOTAL", 9)
    assert memory.get("total") == 9
    assert len(memory) == 1
    assert "ToTaL" in memory


def test_items_are_sorted_by_folded_name():
    memory = Memory()
    memory.put("b", 2)
    memory.put("A", 1)
    assert memory.items() == [("a", 1), ("b", 2)]
