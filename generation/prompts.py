"""
Step 1 — Prompt Builder

Renders the instruction text sent to the model for:
  - quiz item generation   → JSON array of question items
  - material generation    → one JSON learning-material object

The per-method rules are written into the prompt; enforcing them is the
validator's job (Step 3).
"""

import json
from typing import Any, List

from generation.schemas import GenerationRequest, MaterialRequest


# ─── Quiz Item Prompt ──────────────────────────────────────────────────────────

EXERCISE_PROMPT = """You are an Advanced AI Special Education Needs Learning Platform for children with dyslexia and intellectual disabilities (tunagrahita) in Indonesia.
Language: **Indonesian**.

### METHOD RULES:
1. **Listening**: Question text that will be converted to audio; the child writes what they hear.
2. **Writing**: Question text for the child to copy.
3. **Reading Aloud**: Question text for the child to read aloud.
4. **Ordering Sentences**: Question is randomized words (e.g. "bola - budi - bawa"), Key is the correct sentence.
   - "question.value" and "key" must contain EXACTLY the same words with EXACTLY the same casing; only the word order differs.
5. **Rapid Naming**:
   - If Object: "type" is "path", "value" MUST be a filename from [{asset_list}].
   - If Color: "type" is "text", "value" is Hex Code, "key" is the Indonesian color name.
6. **Simple Arithmetic (STRICT)**:
   - **NO IMAGES**. "type" MUST be "text".
   - Use ONLY small numbers (result/sum MUST be between 1 and 20).
   - "question.value" is the math expression (e.g., "3 + 2").
   - "key" is the numerical result as a string (e.g., "5").

### STRICT OUTPUT & DATA RULES:
- **Method Range**: "method" MUST be an integer between 1 and 6.
- **Requested Method**: {method_rule}
- **Image Mapping**: For "type": "path", ONLY use filenames provided in [{asset_list}]. Do not invent filenames.
- **Case Consistency**: "question.value" and "key" must have EXACTLY the same casing for text methods.
- **JSON Only**: Return ONLY a raw JSON array. No markdown blocks, no intro, no "Here is your JSON".
- **Field Consistency**: "key" must always be a String. Never an array.
- **Quantity**: Generate exactly {quantity} items.

### JSON STRUCTURE:
[
  {{
    "question": {{ "type": "text|path", "value": "..." }},
    "method": {method},
    "key": "..."
  }}
]

### CONTEXT:
list_images: {asset_json}
quiz_history: {history_json}
assessment_data: {assessment_json}
"""


# ─── Material Prompt ───────────────────────────────────────────────────────────

MATERIAL_PROMPT = """You are an Advanced AI Special Education Needs Learning Platform for children with autism, ADHD, and other conditions ESPECIALLY DYSLEXIA.
You are generating material items for children with dyslexia and tunagrahita in Indonesia.
So use Indonesian language in the material generated.

METHOD RULES:
- If [{method}] is 0, "method" must follow the definitions below.
- If [{method}] is not 0, always use the value inside the bracket.

Method definitions:
1. Listening: produce text that will be converted into audio and written by the child.
2. Writing: produce text the child must copy.
3. Reading aloud: produce text the child will read.
4. Ordering sentences: produce random words that can be reordered into a correct sentence.
5. Rapid naming:
   - Produce simple nouns OR colors.
   - If color, also provide hex color code.
6. Numerical:
   - Provide examples of addition, subtraction, multiplication, or division problems with their results.
   - Example of material format "5 + 5" or "10-5" or "10x5" or "10/2".
   - The material can use 2, 3, or 4 numbers, with the same or different operations.

Difficulty: {difficulty}

JSON OUTPUT RULES:
Generate EXACT JSON following this structure:
{{
  "title": "...",
  "method": {method},
  "description": "...",
  "images": ["...", "..."],
  "content": "...",
  "readedText": "...",
  "isHidden": false,
  "videoUrl": "..."
}}

ADDITIONAL RULES:
- Output must be in Indonesian.
- Return ONLY pure JSON. No explanation.
- Field "images":
    - Use ONLY file names from this array: {asset_json}
    - If the context does not require images or the list is empty, leave the array empty.
- Field "videoUrl":
    - Optional. Can be empty.
    - If used, may contain a valid YouTube link.
- Field "description" and "content" may contain HTML tags.

Teacher prompt data (may be empty):
{description}
"""


def _to_json(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


def _method_rule(method: int) -> str:
    if method == 0:
        return "Any method from 1 to 6 may be used; mix them."
    return f'Every item MUST use "method": {method}.'


def exercise_prompt(request: GenerationRequest) -> str:
    """
    Render the quiz-item generation prompt.

    The asset whitelist, generation history and assessment sample are
    embedded verbatim so the model can condition on them.
    """
    assets: List[str] = list(request.asset_whitelist)
    return EXERCISE_PROMPT.format(
        asset_list=", ".join(assets),
        asset_json=_to_json(assets),
        method=request.method,
        method_rule=_method_rule(request.method),
        quantity=request.quantity,
        history_json=_to_json(request.history),
        assessment_json=_to_json([a.model_dump() for a in request.assessment_sample]),
    )


def material_prompt(request: MaterialRequest) -> str:
    """Render the learning-material generation prompt."""
    return MATERIAL_PROMPT.format(
        method=request.method,
        difficulty=request.difficulty or "auto",
        asset_json=_to_json(list(request.asset_whitelist)),
        description=request.description or "",
    )
