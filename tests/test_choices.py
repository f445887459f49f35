from __future__ import annotations

import pytest

from llm.choices import extract_choice_text


@pytest.mark.parametrize(
    "choice, expected",
    [
        ({"message": {"content": "chat"}}, "chat"),
        ({"delta": {"content": "stream"}}, "stream"),
        ({"text": "legacy"}, "legacy"),
        ({"content": "bare"}, "bare"),
        ({"message": {"content": ""}}, ""),
    ],
)
def test_string_paths(choice, expected):
    assert extract_choice_text(choice) == expected


def test_message_content_takes_priority_over_text():
    assert extract_choice_text({"message": {"content": "x"}, "text": "y"}) == "x"


def test_delta_takes_priority_over_top_level_fields():
    assert extract_choice_text({"delta": {"content": "d"}, "text": "t", "content": "c"}) == "d"


def test_parts_are_concatenated_without_separator():
    choice = {"content": ["a", {"text": "b"}, {"content": "c"}]}
    assert extract_choice_text(choice) == "abc"


def test_parts_under_message_content():
    choice = {"message": {"content": [{"type": "text", "text": "def f():"}, {"type": "text", "text": " pass"}]}}
    assert extract_choice_text(choice) == "def f(): pass"


def test_unrecognised_parts_are_skipped():
    choice = {"content": [{"type": "image_url"}, 3, None, "kept"]}
    assert extract_choice_text(choice) == "kept"


@pytest.mark.parametrize("content", [[], [{"type": "image_url"}], [None, 1]])
def test_parts_without_text_are_absent(content):
    assert extract_choice_text({"content": content}) is None


def test_object_content_with_text():
    assert extract_choice_text({"message": {"content": {"text": "obj"}}}) == "obj"


def test_object_content_without_text_is_absent():
    assert extract_choice_text({"message": {"content": {"value": 1}}}) is None


@pytest.mark.parametrize(
    "choice",
    [None, 42, "plain", [], {}, {"message": None}, {"message": {"content": None}}, {"finish_reason": "length"}],
)
def test_unusable_choices_are_absent(choice):
    assert extract_choice_text(choice) is None


def test_extraction_is_repeatable():
    choice = {"content": ["a", {"text": "b"}]}
    assert extract_choice_text(choice) == extract_choice_text(choice) == "ab"
    assert choice == {"content": ["a", {"text": "b"}]}
