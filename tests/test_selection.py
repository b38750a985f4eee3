from stripbooth.services.selection import Selection


def test_toggle_adds_and_removes():
    selection = Selection(4)
    assert selection.toggle(3)
    assert 3 in selection
    assert selection.toggle(3)
    assert 3 not in selection
    assert selection.status() == (0, 4)


def test_fifth_pick_is_ignored():
    selection = Selection(4)
    for index in (5, 0, 4, 2):
        selection.toggle(index)

    assert selection.toggle(1) is False
    assert selection.status() == (4, 4)
    assert selection.ordered() == [0, 2, 4, 5]


def test_iteration_is_ascending_not_click_order():
    selection = Selection(4)
    for index in (4, 1, 3):
        selection.toggle(index)

    assert list(selection) == [1, 3, 4]


def test_ready_only_at_limit():
    selection = Selection(4)
    for index in range(3):
        selection.toggle(index)
    assert not selection.ready

    selection.toggle(5)
    assert selection.ready

    selection.toggle(0)
    assert not selection.ready
    assert len(selection) == 3


def test_size_stays_in_bounds_under_random_toggles():
    selection = Selection(4)
    for step in range(200):
        selection.toggle((step * 7) % 6)
        assert 0 <= len(selection) <= 4


def test_explicit_zero_limit_is_kept():
    selection = Selection(0)

    assert selection.toggle(0) is False
    assert selection.status() == (0, 0)
    assert selection.ready
