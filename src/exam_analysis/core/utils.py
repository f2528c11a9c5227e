"""
Core utility functions shared by the variant generator and the analyzer.

Both engines compare answers and option text through `normalize`, so a
correct answer that matches during generation also matches during analysis.
"""

import json
from collections.abc import Sequence

from exam_analysis.core.constants import DEFAULT_TRUE_FALSE_OPTIONS


def normalize(text: str) -> str:
    """Canonical form used for every case-insensitive comparison."""
    return text.strip().lower()


def index_to_letter(index: int) -> str:
    """
    Convert a 0-based index to a letter (0 -> 'A', 1 -> 'B', etc.).

    Args:
        index: 0-based index.

    Returns:
        Corresponding uppercase letter.

    Raises:
        ValueError: If index is out of range [0, 25].
    """
    if not (0 <= index <= 25):
        raise ValueError(f"Index must be in [0, 25], got {index}")
    return chr(ord("A") + index)


def letter_to_index(letter: str) -> int:
    """
    Convert a letter to a 0-based index ('A' -> 0, 'b' -> 1, etc.).

    Lowercase letters are accepted and treated like their uppercase form.

    Raises:
        ValueError: If letter is not a single ASCII letter.
    """
    if not is_option_letter(letter):
        raise ValueError(f"Letter must be A-Z, got '{letter}'")
    return ord(letter.upper()) - ord("A")


def is_option_letter(answer: str) -> bool:
    """True when the answer is a single ASCII letter in either case."""
    return len(answer) == 1 and answer.isascii() and answer.isalpha()


def parse_options(value: object) -> list[str]:
    """
    Normalize an options value to a list of strings.

    Stored questions carry their options either as a list or as a
    JSON-encoded list; None means no options.

    Raises:
        ValueError: If a string does not decode to a JSON list.
    """
    if value is None:
        return []
    if isinstance(value, str):
        if not value.strip():
            return []
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError(f"options is not valid JSON: {e}") from e
        if not isinstance(decoded, list):
            raise ValueError("options JSON must decode to a list")
        return [str(x) for x in decoded]
    if isinstance(value, Sequence):
        return [str(x) for x in value]
    raise ValueError(
        f"options must be a list or JSON string, got {type(value).__name__}"
    )


def canonical_options(question_type: str, options: Sequence[str]) -> list[str]:
    """Options as presented to students.

    True/false questions without exactly two options get the default pair.
    """
    if question_type == "TRUE_FALSE" and len(options) != 2:
        return list(DEFAULT_TRUE_FALSE_OPTIONS)
    return list(options)


def find_option_index(options: Sequence[str], answer: str) -> int | None:
    """Index of the first option matching `answer` case-insensitively."""
    target = normalize(answer)
    for i, option in enumerate(options):
        if normalize(option) == target:
            return i
    return None


def hash_code(text: str) -> int:
    """
    32-bit signed string hash (h = 31*h + c over UTF-16 code units).

    The value is identical on every platform and interpreter, which makes it
    safe to derive persisted seeds from it.
    """
    encoded = text.encode("utf-16-le")
    h = 0
    for i in range(0, len(encoded), 2):
        unit = encoded[i] | (encoded[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return h
