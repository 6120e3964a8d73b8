#!/usr/bin/env python3
"""Tests for the NUL-delimited flatten/unflatten helpers."""

from lara_sync.format_handlers.flat import (
    DELIMITER,
    NUMERIC_KEY_TAG,
    display_key,
    flatten,
    flatten_document,
    unflatten,
    unflatten_document,
)


def test_flatten_nested_objects_and_arrays():
    data = {"user": {"greeting": "Hello", "tags": ["a", "b"]}, "title": "Hi"}
    flat = flatten(data)

    assert flat == {
        f"user{DELIMITER}greeting": "Hello",
        f"user{DELIMITER}tags{DELIMITER}0": "a",
        f"user{DELIMITER}tags{DELIMITER}1": "b",
        "title": "Hi",
    }
    assert unflatten(flat) == data


def test_keys_with_separator_like_characters_do_not_collide():
    """'/', '.' and '-' are ordinary key characters."""
    data = {"a/b": "slash", "a": {"b": "nested"}, "c.d": "dot", "e-f": "dash"}
    flat = flatten_document(data)

    assert len(flat) == 4
    assert unflatten_document(flat) == data


def test_numeric_object_keys_stay_objects():
    data = {"codes": {"0": "zero", "1": "one"}, "list": ["x", "y"]}
    flat = flatten_document(data)

    assert f"codes{DELIMITER}{NUMERIC_KEY_TAG}0" in flat
    assert f"list{DELIMITER}0" in flat
    assert unflatten_document(flat) == data


def test_empty_containers_are_leaves():
    data = {"empty_obj": {}, "empty_list": [], "n": 3, "flag": False, "none": None}
    flat = flatten_document(data)

    assert flat["empty_obj"] == {}
    assert flat["empty_list"] == []
    assert unflatten_document(flat) == data


def test_array_of_objects():
    data = {"items": [{"title": "One"}, {"title": "Two"}]}
    assert unflatten_document(flatten_document(data)) == data


def test_key_order_is_preserved():
    data = {"z": "1", "a": "2", "m": {"y": "3", "b": "4"}}
    assert list(unflatten_document(flatten_document(data))["m"]) == ["y", "b"]
    assert list(flatten_document(data)) == ["z", "a", f"m{DELIMITER}y", f"m{DELIMITER}b"]


def test_display_key():
    assert display_key(f"user{DELIMITER}tags{DELIMITER}0") == "user/tags/0"
    assert display_key(f"codes{DELIMITER}{NUMERIC_KEY_TAG}7") == "codes/7"
