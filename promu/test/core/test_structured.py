from __future__ import annotations

from promu.core.structured import (
    as_str_dict,
    get_bool,
    get_int,
    get_str,
    get_str_list,
    get_table,
)


def test_as_str_dict_rejects_non_string_keys() -> None:
    assert as_str_dict({"a": 1}) == {"a": 1}
    assert as_str_dict({1: "a"}) is None
    assert as_str_dict(["a"]) is None


def test_get_table() -> None:
    assert get_table({"go": {"version": "1.7"}}, "go") == {"version": "1.7"}
    assert get_table({"go": "1.7"}, "go") is None


def test_get_str_strips_and_drops_empty() -> None:
    assert get_str({"k": "  promu "}, "k") == "promu"
    assert get_str({"k": "   "}, "k") is None
    assert get_str({"k": 3}, "k") is None


def test_get_bool() -> None:
    assert get_bool({"cgo": True}, "cgo") is True
    assert get_bool({"cgo": "yes"}, "cgo") is None


def test_get_int_rejects_bool() -> None:
    assert get_int({"retries": 4}, "retries") == 4
    assert get_int({"retries": True}, "retries") is None


def test_get_str_list() -> None:
    assert get_str_list({"p": ["linux/amd64", " linux/arm "]}, "p") == [
        "linux/amd64",
        "linux/arm",
    ]
    assert get_str_list({"p": "linux/amd64  linux/arm"}, "p") == ["linux/amd64", "linux/arm"]
    assert get_str_list({"p": ["linux/amd64", 3]}, "p") is None
    assert get_str_list({}, "p") is None
