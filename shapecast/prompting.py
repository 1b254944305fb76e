# shapecast/prompting.py
"""Prompt construction for shape-guided extraction.

Every attempt sends the same fixed context from scratch: a system
instruction, one worked example (input turn + answer turn) and finally the
real content turn.  Nothing carries over between attempts.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List

__all__ = [
    "SYSTEM_INSTRUCTION",
    "EXAMPLE_DATA",
    "EXAMPLE_FORMAT",
    "EXAMPLE_PROMPT",
    "EXAMPLE_ANSWER",
    "render_content",
    "build_messages",
]

SYSTEM_INSTRUCTION = (
    "You are an AI that converts data into the attached JSON format. "
    "You respond with nothing but valid JSON based on the input data. "
    "Your output should DIRECTLY be valid JSON, nothing added before or after. "
    "You will begin with the opening curly brace and end with the closing curly brace. "
    "Only if you absolutely cannot determine a field, use the value null."
)

_SEPARATOR = "-----------"

EXAMPLE_DATA = (
    "Hi, my name is Grace Hopper and I'm 85 years old. I live in Arlington "
    "with my cat. I love writing compilers and I used to work on the UNIVAC I. "
    "I don't drive."
)

EXAMPLE_FORMAT: Dict[str, Any] = {
    "name": {"type": "string"},
    "age": {"type": "number"},
    "isDriver": {"type": "boolean"},
    "hobbies": {"type": "array", "items": {"type": "string"}},
    "pets": {
        "type": "array",
        "items": {"kind": {"type": "string"}, "name": {"type": "string"}},
    },
    "address": {"city": {"type": "string"}, "street": {"type": "string"}},
}

EXAMPLE_ANSWER_VALUE: Dict[str, Any] = {
    "name": "Grace Hopper",
    "age": 85,
    "isDriver": False,
    "hobbies": ["writing compilers"],
    "pets": [{"kind": "cat", "name": None}],
    "address": {"city": "Arlington", "street": None},
}


def render_content(raw_text: str, shape: Any) -> str:
    """Render the content turn: source text plus the expected JSON shape."""
    return (
        f'DATA: \n"{raw_text}"\n\n'
        f"{_SEPARATOR}\n"
        f"Expected JSON format: \n{json.dumps(shape, indent=2, ensure_ascii=False)}\n\n\n"
        f"{_SEPARATOR}\n"
        "Valid JSON output in expected format:"
    )


EXAMPLE_PROMPT = render_content(EXAMPLE_DATA, EXAMPLE_FORMAT)
EXAMPLE_ANSWER = json.dumps(EXAMPLE_ANSWER_VALUE, indent=2)


def build_messages(raw_text: str, shape: Any) -> List[Dict[str, str]]:
    """Return the ordered chat messages for one attempt."""
    return [
        {"role": "system", "content": SYSTEM_INSTRUCTION},
        {"role": "user", "content": EXAMPLE_PROMPT},
        {"role": "assistant", "content": EXAMPLE_ANSWER},
        {"role": "user", "content": render_content(raw_text, shape)},
    ]
