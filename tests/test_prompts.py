"""Tests for prompt rendering."""

from generation.prompts import exercise_prompt, material_prompt
from generation.schemas import AssessmentEntry, GenerationRequest, MaterialRequest


def _request(**overrides) -> GenerationRequest:
    data = dict(
        quantity=4,
        method=5,
        history=[{"method": 5, "question": {"type": "path", "value": "storage/exercise/singa.png"}, "key": "singa"}],
        assessment_sample=[AssessmentEntry(method=3, question={"type": "text", "value": "Ini bola"}, key="Ini bola",
                                           text="ini bola", duration="00:04", similarity_point=100)],
        asset_whitelist=["kucing.png", "meja.png"],
    )
    data.update(overrides)
    return GenerationRequest(**data)


def test_exercise_prompt_embeds_whitelist_and_context():
    prompt = exercise_prompt(_request())
    assert "[kucing.png, meja.png]" in prompt
    assert 'list_images: ["kucing.png", "meja.png"]' in prompt
    assert "storage/exercise/singa.png" in prompt
    assert '"text": "ini bola"' in prompt
    assert "Generate exactly 4 items." in prompt


def test_exercise_prompt_encodes_method_rules():
    prompt = exercise_prompt(_request())
    assert "**NO IMAGES**" in prompt
    assert "between 1 and 6" in prompt
    assert 'Every item MUST use "method": 5.' in prompt
    assert "Do not invent filenames" in prompt
    assert "only the word order differs" in prompt


def test_exercise_prompt_mixed_method():
    prompt = exercise_prompt(_request(method=0))
    assert "mix them" in prompt


def test_exercise_prompt_is_deterministic():
    assert exercise_prompt(_request()) == exercise_prompt(_request())


def test_material_prompt():
    prompt = material_prompt(MaterialRequest(
        method=6, difficulty="easy", description="Penjumlahan sampai 10", asset_whitelist=["buku.png"],
    ))
    assert "If [6] is 0" in prompt
    assert '"method": 6' in prompt
    assert '["buku.png"]' in prompt
    assert "Difficulty: easy" in prompt
    assert prompt.rstrip().endswith("Penjumlahan sampai 10")
