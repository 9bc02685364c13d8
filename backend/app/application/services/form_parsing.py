"""Tolerant parsing of array-like form inputs.

Multipart clients send list fields in several shapes: repeated fields, a
JSON-encoded array, a single JSON value or a comma-separated string. The
parsers here accept all of them with a fixed fallback order.

ID lists (``parse_id_list``):
    1. ``None`` / empty                → ``[]``
    2. list or tuple                   → flattened, each item parsed as below
    3. string: whole-string JSON       → array flattened, scalar wrapped
    4. string: JSON decode failure     → split on commas, items trimmed

Inline tag specs (``parse_inline_tags``):
    1. whole-string JSON
    2. on decode failure, the raw string wrapped in ``[...]``
    3. still failing                   → "Invalid JSON format for tags"
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from app.domain.exceptions import ArticleWorkflowError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TagSpec:
    """A caller-supplied request to create a new tag."""

    name: str
    name_ar: str | None = None


def _flatten(items: Any) -> list[Any]:
    flat: list[Any] = []
    for item in items:
        if isinstance(item, (list, tuple)):
            flat.extend(_flatten(item))
        elif item is not None:
            flat.append(item)
    return flat


def _parse_id_string(value: str) -> list[str]:
    text = value.strip()
    if not text:
        return []
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return [part.strip() for part in text.split(",") if part.strip()]

    if isinstance(parsed, list):
        return [str(item).strip() for item in _flatten(parsed) if str(item).strip()]
    if parsed is None or parsed == "":
        return []
    if isinstance(parsed, str):
        # A quoted string may itself carry a comma-separated list
        return [part.strip() for part in parsed.split(",") if part.strip()]
    return [str(parsed)]


def parse_id_list(value: Any) -> list[str]:
    """Normalise an array-like input into a list of ID strings."""
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple)):
        ids: list[str] = []
        for item in _flatten(value):
            if isinstance(item, str):
                ids.extend(_parse_id_string(item))
            else:
                ids.append(str(item))
        return ids
    if isinstance(value, str):
        return _parse_id_string(value)
    return [str(value)]


def _load_tag_json(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        pass
    try:
        return json.loads(f"[{raw}]")
    except json.JSONDecodeError as exc:
        logger.debug("Rejected inline tags %r: %s", raw, exc)
        raise ArticleWorkflowError.bad_request("Invalid JSON format for tags") from exc


def parse_inline_tags(raw: str | list[str] | None) -> list[TagSpec]:
    """Parse inline tag specifications (``[{"name": ..., "nameAr": ...}]``).

    Every spec is validated before any is returned, so a missing name or a
    non-string ``nameAr`` fails the whole input.
    """
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        raw = ",".join(str(part) for part in raw if str(part).strip())
    if not raw.strip():
        return []

    parsed = _load_tag_json(raw)
    items = parsed if isinstance(parsed, list) else [parsed]

    specs: list[TagSpec] = []
    for item in items:
        if not isinstance(item, dict):
            raise ArticleWorkflowError.bad_request("Each tag must have a name")
        name = item.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ArticleWorkflowError.bad_request("Each tag must have a name")
        name_ar = item.get("nameAr", item.get("name_ar"))
        if name_ar is not None and not isinstance(name_ar, str):
            raise ArticleWorkflowError.bad_request("Tag nameAr must be a string")
        specs.append(TagSpec(name=name.strip(), name_ar=name_ar or None))
    return specs
