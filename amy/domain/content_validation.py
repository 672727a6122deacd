"""
AI Input Screening

Free text sent to the AI parser is checked for size, injection patterns and
degenerate content before any model call is made.
"""

import re
from collections import Counter
from dataclasses import dataclass
from typing import Optional


MAX_INPUT_LENGTH = 2000
SPECIAL_CHAR_RATIO = 0.2
REPEATED_CHAR_RATIO = 0.5
REPETITION_MIN_LENGTH = 100

MALICIOUS_PATTERNS = [
    # prompt injection
    re.compile(r"ignore\s+previous\s+instructions", re.IGNORECASE),
    re.compile(r"ignore\s+all\s+previous\s+instructions", re.IGNORECASE),
    re.compile(r"forget\s+everything", re.IGNORECASE),
    re.compile(r"system\s*:", re.IGNORECASE),
    re.compile(r"assistant\s*:", re.IGNORECASE),
    re.compile(r"user\s*:", re.IGNORECASE),
    re.compile(r"\[(system|assistant|user)\]", re.IGNORECASE),
    re.compile(r"<\|(system|assistant|user)\|>", re.IGNORECASE),
    # SQL injection
    re.compile(
        r"('|\"|;)\s*(drop|delete|truncate|alter|create|insert|update|exec|execute)",
        re.IGNORECASE,
    ),
    re.compile(r"union\s+select", re.IGNORECASE),
    re.compile(r"or\s+1\s*=\s*1", re.IGNORECASE),
    # script injection
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript\s*:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
    re.compile(r"<(iframe|object|embed)", re.IGNORECASE),
    # control characters (tab, newline and carriage return are allowed)
    re.compile(r"[\x00-\x08\x0B-\x0C\x0E-\x1F\x7F]"),
]

SPECIAL_CHARACTERS = re.compile(r"[<>{}\[\]\\|`~]")


@dataclass(frozen=True)
class InputValidationResult:
    valid: bool
    error: Optional[str] = None


def validate_ai_input(text: object) -> InputValidationResult:
    """Screen free text before it is sent to the AI parser."""
    if not text or not isinstance(text, str):
        return InputValidationResult(False, "Input is required and must be a string")

    if len(text) > MAX_INPUT_LENGTH:
        return InputValidationResult(
            False, f"Input exceeds maximum length of {MAX_INPUT_LENGTH} characters"
        )

    if not text.strip():
        return InputValidationResult(False, "Input cannot be empty")

    if any(pattern.search(text) for pattern in MALICIOUS_PATTERNS):
        return InputValidationResult(False, "Input contains prohibited content")

    if len(SPECIAL_CHARACTERS.findall(text)) > len(text) * SPECIAL_CHAR_RATIO:
        return InputValidationResult(False, "Input contains excessive special characters")

    most_common = Counter(text).most_common(1)[0][1]
    if most_common > len(text) * REPEATED_CHAR_RATIO and len(text) > REPETITION_MIN_LENGTH:
        return InputValidationResult(False, "Input contains excessive character repetition")

    return InputValidationResult(True)
