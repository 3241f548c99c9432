import pytest

from metricscope.keys import Key, Label


def test_pairs_are_converted_to_labels():
    key = Key("requests", [("service", "login"), ("env", "test")])
    assert key.labels == (Label("service", "login"), Label("env", "test"))


def test_label_order_is_preserved():
    key = Key("requests", [("b", "1"), ("a", "2")])
    assert [label.key for label in key.labels] == ["b", "a"]


def test_with_labels_returns_new_key():
    original = Key("requests", [("a", "1")])
    updated = original.with_labels([Label("b", "2")])
    assert updated.name == "requests"
    assert updated.labels == (Label("b", "2"),)
    assert original.labels == (Label("a", "1"),)


def test_keys_compare_and_hash_by_value():
    first = Key("x", [("a", "1")])
    second = Key("x", (Label("a", "1"),))
    assert first == second
    assert len({first, second}) == 1


def test_keys_order_by_name_then_labels():
    keys = [Key("b"), Key("a", [("z", "1")]), Key("a", [("y", "1")]), Key("a")]
    assert sorted(keys) == [Key("a"), Key("a", [("y", "1")]), Key("a", [("z", "1")]), Key("b")]


def test_label_ordering():
    assert Label("a", "2") < Label("b", "1")
    assert Label("a", "1") < Label("a", "2")


def test_string_forms():
    assert str(Label("user", "ferris")) == "user = ferris"
    assert str(Key("logins")) == "logins"
    assert str(Key("logins", [("user", "ferris")])) == "logins [user = ferris]"


def test_key_is_immutable():
    key = Key("x")
    with pytest.raises(AttributeError):
        key.name = "y"
    assert key.name == "x"
    assert key == Key("x")