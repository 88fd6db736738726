"""Validation of structured model output.

Every place that turns model text into data goes through ``parse_json`` and
gets back either ``Ok(value)`` or ``Err(reason)``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from pydantic import TypeAdapter, ValidationError

from .errors import MalformedResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")

_FENCE_RE = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?```$", re.DOTALL)


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    reason: str


Result = Union[Ok[T], Err]


def strip_code_fence(raw: str) -> str:
    """Remove a surrounding markdown code fence, if the model added one."""
    text = raw.strip()
    match = _FENCE_RE.match(text)
    return match.group(1).strip() if match else text


def parse_json(raw: str | None, shape: Any) -> Result:
    """Validate ``raw`` as JSON of type ``shape`` (e.g. ``list[str]``)."""
    if raw is None:
        return Err("empty response")

    adapter = TypeAdapter(shape)
    try:
        return Ok(adapter.validate_json(strip_code_fence(raw)))
    except ValidationError as exc:
        logger.error("Model returned unexpected JSON shape: %s", raw[:500])
        return Err(f"invalid format: {exc.error_count()} validation error(s)")


def unwrap(result: Result) -> Any:
    if isinstance(result, Err):
        raise MalformedResponse(result.reason)
    return result.value
