"""Tests for the content-addressed question bank."""

import asyncio
from concurrent.futures import ThreadPoolExecutor

import pytest

from database.question_bank import bank_value, content_hash, normalize_text
from generation.schemas import HexColorQuestion, PathQuestion, QuestionItem, TextQuestion


def _text(value, key, method=3):
    return QuestionItem(method=method, question=TextQuestion(value=value), key=key)


def test_normalize_text():
    assert normalize_text("  Budi   Bawa\tBola \n") == "budi bawa bola"


def test_hash_ignores_case_and_whitespace():
    assert content_hash(_text("Ini  Budi", "Ini Budi")) == content_hash(_text("ini budi ", " INI BUDI"))


def test_hash_differs_on_key():
    assert content_hash(_text("3 + 2", "5", 6)) != content_hash(_text("3 + 2", "6", 6))


def test_hash_is_md5_hex():
    code = content_hash(_text("a", "a"))
    assert len(code) == 32
    int(code, 16)


def test_image_hash_uses_storage_form():
    served = QuestionItem(method=5, question=PathQuestion(value="image/exercise/kucing.png"), key="kucing")
    stored = QuestionItem(method=5, question=PathQuestion(value="storage/exercise/kucing.png"), key="kucing")
    assert bank_value(served) == "storage/exercise/kucing.png"
    assert content_hash(served) == content_hash(stored)


def test_image_hash_ignores_missing_extension():
    bare = QuestionItem(method=5, question=PathQuestion(value="kucing"), key="kucing")
    full = QuestionItem(method=5, question=PathQuestion(value="image/exercise/kucing.png"), key="kucing")
    assert bank_value(bare) == "storage/exercise/kucing.png"
    assert content_hash(bare) == content_hash(full)


class TestQuestionBank:

    def test_insert_then_noop(self, bank):
        first = bank.upsert_if_absent(_text("Ini Budi", "Ini Budi"))
        second = bank.upsert_if_absent(_text("ini budi", "INI BUDI"))
        assert first == second
        assert bank.count() == 1

    def test_stores_storage_path_and_verbatim_key(self, bank):
        item = QuestionItem(method=5, question=PathQuestion(value="image/exercise/singa.png"), key="Singa")
        code = bank.upsert_if_absent(item, level=2)
        entry = bank.get(code)
        assert entry.question_type == "path"
        assert entry.question_value == "storage/exercise/singa.png"
        assert entry.key == "Singa"
        assert entry.level == 2
        assert entry.method == 5

    def test_distinct_content_gets_distinct_rows(self, bank):
        bank.upsert_if_absent(QuestionItem(method=5, question=HexColorQuestion(value="#ff0000"), key="merah"))
        bank.upsert_if_absent(QuestionItem(method=5, question=HexColorQuestion(value="#00ff00"), key="hijau"))
        assert bank.count() == 2

    def test_history_newest_first(self, bank):
        bank.upsert_if_absent(_text("satu", "satu"))
        bank.upsert_if_absent(_text("dua", "dua"))
        history = bank.history(limit=1)
        assert history == [{"method": 3, "question": {"type": "text", "value": "dua"}, "key": "dua"}]

    def test_entries_filter_by_level_and_method(self, bank):
        bank.upsert_if_absent(QuestionItem(method=5, question=PathQuestion(value="kucing.png"), key="kucing"), level=1)
        bank.upsert_if_absent(QuestionItem(method=5, question=HexColorQuestion(value="#ff0000"), key="merah"), level=1)
        bank.upsert_if_absent(QuestionItem(method=5, question=PathQuestion(value="meja.png"), key="meja"), level=2)
        bank.upsert_if_absent(_text("Ini Budi", "Ini Budi"), level=1)

        entries = bank.entries(level=1, method=5)

        assert [e["question"] for e in entries] == [
            {"type": "path", "value": "image/exercise/kucing.png"},
            {"type": "hex", "value": "#ff0000"},
        ]
        assert all(e["level"] == 1 and len(e["code"]) == 32 for e in entries)
        assert bank.entries(level=3, method=5) == []

    def test_concurrent_threads_collapse_to_one_entry(self, bank):
        items = [_text("Budi bawa bola", "budi BAWA bola") for _ in range(8)]
        with ThreadPoolExecutor(max_workers=8) as pool:
            codes = list(pool.map(bank.upsert_if_absent, items))
        assert len(set(codes)) == 1
        assert bank.count() == 1

    @pytest.mark.asyncio
    async def test_upsert_many_keeps_order_and_dedupes(self, bank):
        items = [_text("a", "a"), _text("b", "b"), _text("A ", "a")]
        codes = await bank.upsert_many(items)
        assert codes[0] == codes[2] != codes[1]
        assert bank.count() == 2

    @pytest.mark.asyncio
    async def test_call_order_does_not_matter(self, bank):
        one, two = _text("Meja", "meja"), _text("meja", "Meja")
        forward = await bank.upsert_many([one, two])
        backward = await asyncio.gather(
            asyncio.to_thread(bank.upsert_if_absent, two),
            asyncio.to_thread(bank.upsert_if_absent, one),
        )
        assert set(forward) == set(backward)
        assert bank.count() == 1
