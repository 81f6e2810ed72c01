"""Tests for the constraint validator."""

import logging

import pytest

from generation.schemas import GenerationRequest, HexColorQuestion, PathQuestion, QuestionItem, TextQuestion
from generation.validator import rejection_reason, validate_items, word_counts


def _req(quantity=10, method=0, whitelist=("cat.png",)) -> GenerationRequest:
    return GenerationRequest(quantity=quantity, method=method, asset_whitelist=list(whitelist))


def _item(method, kind, value, key="x"):
    return {"method": method, "question": {"type": kind, "value": value}, "key": key}


def test_arithmetic_image_is_dropped_regardless_of_whitelist():
    items = [_item(6, "path", "cat.png", "5")]
    assert validate_items(items, _req(whitelist=["cat.png"])) == []


def test_image_outside_whitelist_is_dropped():
    assert validate_items([_item(5, "path", "dog.png", "anjing")], _req(whitelist=["cat.png"])) == []


def test_whitelisted_image_is_rewritten_to_serving_path():
    result = validate_items([_item(5, "path", "storage/exercise/cat", "kucing")], _req())
    assert len(result) == 1
    assert result[0].question == PathQuestion(value="image/exercise/cat.png")


def test_png_extension_not_duplicated():
    result = validate_items([_item(5, "path", "cat.png", "kucing")], _req())
    assert result[0].question.value == "image/exercise/cat.png"


@pytest.mark.parametrize("method", [0, 7, -1])
def test_method_out_of_range_is_dropped(method):
    assert validate_items([_item(method, "text", "3 + 2", "5")], _req()) == []


def test_requested_method_must_match():
    items = [_item(3, "text", "Ini Budi", "Ini Budi"), _item(6, "text", "3 + 2", "5")]
    result = validate_items(items, _req(method=6))
    assert [i.method for i in result] == [6]


def test_mixed_request_accepts_any_valid_method():
    items = [_item(m, "text", f"soal {m}", "k") for m in range(1, 7)]
    assert len(validate_items(items, _req(method=0))) == 6


@pytest.mark.parametrize("raw", [
    {"method": "6", "question": {"type": "text", "value": "1 + 1"}, "key": "2"},
    {"method": 6, "question": {"type": "text", "value": "1 + 1"}, "key": 2},
    {"method": 6, "question": "1 + 1", "key": "2"},
    {"method": True, "question": {"type": "text", "value": "1 + 1"}, "key": "2"},
    {"method": 6.5, "question": {"type": "text", "value": "1 + 1"}, "key": "2"},
    {"method": 5, "question": {"type": "path", "value": ""}, "key": "kucing"},
    {"method": 5, "question": {"type": "hex", "value": "red"}, "key": "merah"},
    "not an object",
])
def test_structurally_broken_items_are_dropped(raw):
    assert validate_items([raw], _req()) == []


def test_hex_colour_text_becomes_hex_variant():
    result = validate_items([_item(5, "text", "#FF0000", "merah")], _req())
    assert isinstance(result[0].question, HexColorQuestion)


def test_truncates_to_quantity_without_padding():
    items = [_item(6, "text", f"{n} + 1", str(n + 1)) for n in range(8)]
    assert len(validate_items(items, _req(quantity=3))) == 3
    assert len(validate_items(items[:2], _req(quantity=5))) == 2


def test_non_list_output_yields_nothing():
    assert validate_items({"questions": []}, _req()) == []


def test_every_returned_item_passes_all_rules():
    request = _req(quantity=4, method=0, whitelist=["cat.png", "meja"])
    items = [
        _item(5, "path", "meja", "meja"),
        _item(6, "path", "cat.png", "1"),
        _item(5, "path", "ular.png", "ular"),
        _item(9, "text", "x", "x"),
        _item(4, "text", "bola - budi - bawa", "budi bawa bola"),
        _item(6, "text", "2 + 2", "4"),
        _item(1, "text", "Ibu", "Ibu"),
    ]
    result = validate_items(items, request)
    assert len(result) <= request.quantity
    assert [i.question.value for i in result] == ["image/exercise/meja.png", "bola - budi - bawa", "2 + 2", "Ibu"]
    for item in result:
        assert rejection_reason(item, request) is None


def test_already_built_items_are_accepted():
    item = QuestionItem(method=1, question=TextQuestion(value="Ibu"), key="Ibu")
    assert validate_items([item], _req()) == [item]


def test_whole_float_method_is_accepted():
    result = validate_items([_item(6.0, "text", "2 + 2", "4")], _req())
    assert len(result) == 1
    assert result[0].method == 6
    assert isinstance(result[0].method, int)


def test_word_counts_ignore_separators_and_case():
    assert word_counts("bola - Budi - bawa") == word_counts("Budi bawa bola")


def test_word_ordering_mismatch_is_logged_not_dropped(caplog):
    items = [
        _item(4, "text", "bola - budi - bawa", "Budi bawa bola"),
        _item(4, "text", "bola - ani - bawa", "Budi bawa bola"),
    ]
    with caplog.at_level(logging.WARNING, logger="generation.pipeline"):
        result = validate_items(items, _req())

    assert len(result) == 2
    warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "bola - ani - bawa" in warnings[0]
