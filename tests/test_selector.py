import pytest

from metricscope.selector import Selector


def make(length):
    selector = Selector()
    selector.set_length(length)
    return selector


def test_starts_at_top():
    selector = Selector()
    assert selector.selected == 0
    assert selector.length == 0


def test_next_wraps_around():
    selector = make(3)
    seen = []
    for _ in range(4):
        selector.next()
        seen.append(selector.selected)
    assert seen == [1, 2, 0, 1]


def test_previous_wraps_around():
    selector = make(3)
    selector.previous()
    assert selector.selected == 2
    selector.previous()
    assert selector.selected == 1


def test_top_and_bottom():
    selector = make(5)
    selector.bottom()
    assert selector.selected == 4
    selector.top()
    assert selector.selected == 0


def test_shrinking_resets_selection():
    selector = make(5)
    selector.bottom()
    selector.set_length(2)
    assert selector.selected == 0
    assert selector.length == 2


def test_growing_keeps_selection():
    selector = make(3)
    selector.next()
    selector.set_length(10)
    assert selector.selected == 1


@pytest.mark.parametrize("move", ["next", "previous", "bottom"])
def test_empty_selector_raises(move):
    selector = Selector()
    with pytest.raises(IndexError):
        getattr(selector, move)()
    assert selector.selected == 0
    assert selector.length == 0