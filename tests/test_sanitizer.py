"""Tests for model output clean-up and parsing."""

import pytest

from generation.sanitizer import parse, sanitize


def test_strips_json_fence():
    raw = '```json\n[{"key": "5"}]\n```'
    assert sanitize(raw) == '[{"key": "5"}]'


def test_strips_bare_fence_and_whitespace():
    assert sanitize('\n  ```\n{"a": 1}\n```  \n') == '{"a": 1}'


def test_strips_here_is_preamble_case_insensitive():
    assert sanitize('HERE IS your JSON: [1, 2]') == "[1, 2]"


def test_preamble_stops_at_first_line():
    # No colon on the first line: nothing is treated as a preamble
    raw = 'Here is the list\n{"a": 1}'
    assert sanitize(raw) == raw


def test_preamble_then_fence():
    raw = 'Here is the result:\n```json\n[]\n```'
    assert sanitize(raw) == "[]"


@pytest.mark.parametrize("raw", [
    '```json\n[{"method": 6}]\n```',
    'Here is: ```json\n{}\n```',
    "   plain text   ",
    "```\n```",
    "here is: here is: [1]",
    "",
])
def test_sanitize_is_idempotent(raw):
    once = sanitize(raw)
    assert sanitize(once) == once


def test_parse_returns_value():
    assert parse('[{"key": "5"}]') == [{"key": "5"}]


@pytest.mark.parametrize("text", ["", "not json", "[1, 2", "{'single': 'quotes'}"])
def test_parse_failure_returns_none(text):
    assert parse(text) is None
