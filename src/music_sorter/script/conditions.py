"""Evaluation of ``IF`` conditions."""

import re

from ..models.track import TrackMetadata
from .tags import resolve

IS_NUMBER = " is number"
NOT_EQUAL = "!="
EQUAL = "=="

_INTEGER_RE = re.compile(r"-?[0-9]+")


def is_integer(value: str) -> bool:
    """Check that a value is a plain base-10 integer."""
    return _INTEGER_RE.fullmatch(value) is not None


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
        return value[1:-1]
    return value


def _split_comparison(condition: str, operator: str):
    tag_name, expected = condition.split(operator, 1)
    return tag_name.strip(), _unquote(expected)


def evaluate_condition(condition: str, metadata: TrackMetadata) -> bool:
    """Evaluate a condition against the metadata of one file.

    Supported forms, checked in order:
    - ``TAG is number``: the tag holds a base-10 integer
    - ``TAG != value``: the tag differs from value
    - ``TAG == value``: the tag equals value
    - ``TAG``: the tag is not empty

    Args:
        condition: Condition text without the enclosing parentheses
        metadata: Metadata of the file being sorted

    Returns:
        True if the condition holds
    """
    if IS_NUMBER in condition:
        tag_name = condition.split(IS_NUMBER, 1)[0].strip()
        value = resolve(tag_name, metadata)
        return bool(value) and is_integer(value)

    if NOT_EQUAL in condition:
        tag_name, expected = _split_comparison(condition, NOT_EQUAL)
        return resolve(tag_name, metadata) != expected

    if EQUAL in condition:
        tag_name, expected = _split_comparison(condition, EQUAL)
        return resolve(tag_name, metadata) == expected

    return resolve(condition.strip(), metadata) != ""
