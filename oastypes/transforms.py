# File: oastypes/transforms.py
"""
oastypes - Enum Hoisting Transform
===================================

By default the translator renders ``enum`` schemas as inline literal unions
(``"active" | "disabled"``). This module promotes the ones that are schemas
*in their own right* to standalone ``export enum`` declarations.

A node is hoisted only when all of the following hold:

1. it has an ``enum`` keyword and its values are strings;
2. it has a ``title``;
3. the title equals the last segment of the node's JSON-pointer location.

Rule 3 tells ``#/components/schemas/Status`` (titled ``Status``: the schema
*is* the enum) apart from ``#/components/schemas/Pet/properties/status``
(an inline enum field of another schema).

Hoisted candidates are collected in an explicit ``EnumAccumulator`` that the
caller creates, hands to the transform, and reads back after translation.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional

from oastypes.declarations import EnumDeclaration
from oastypes.models import EnumCandidate, TransformMetadata
from oastypes.utils import clean_identifier, pointer_terminal_segment

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("oastypes.transforms")


# ---------------------------------------------------------------------------
# Accumulator
# ---------------------------------------------------------------------------


class EnumAccumulator:
    """
    Insertion-ordered collection of hoisted enums, keyed by schema title.

    The first candidate recorded under a name wins; later ones with the same
    name are ignored without comparing their values.
    """

    __slots__ = ("_candidates",)

    def __init__(self) -> None:
        self._candidates: Dict[str, EnumCandidate] = {}

    def record(self, candidate: EnumCandidate) -> bool:
        """Store *candidate* unless its name is taken. Returns True if stored."""
        if candidate.name in self._candidates:
            logger.debug(
                "Enum %r already recorded; ignoring later occurrence.",
                candidate.name,
            )
            return False
        self._candidates[candidate.name] = candidate
        logger.debug("Hoisted enum %r (%d values).", candidate.name, len(candidate.values))
        return True

    def get(self, name: str) -> Optional[EnumCandidate]:
        return self._candidates.get(name)

    def names(self) -> List[str]:
        return list(self._candidates)

    def identifiers(self) -> List[str]:
        return [c.identifier for c in self._candidates.values()]

    def __contains__(self, name: object) -> bool:
        return name in self._candidates

    def __iter__(self) -> Iterator[EnumCandidate]:
        return iter(list(self._candidates.values()))

    def __len__(self) -> int:
        return len(self._candidates)

    def __repr__(self) -> str:
        return f"<EnumAccumulator {self.names()}>"


# ---------------------------------------------------------------------------
# Transform
# ---------------------------------------------------------------------------


def is_string_enum(schema: Mapping[str, Any]) -> bool:
    """True if *schema* is an ``enum`` whose declared value type is string."""
    values: Any = schema.get("enum")
    if not isinstance(values, list):
        return False
    declared: Any = schema.get("type")
    if declared is None:
        return bool(values) and all(isinstance(v, str) for v in values)
    return declared == "string"


class EnumHoistingTransform:
    """
    Per-node translator hook.

    Call it as ``transform(schema, metadata)``; it returns the enum's
    identifier when the node is hoisted (the translator then emits a type
    reference to it) and ``None`` otherwise.
    """

    def __init__(self, accumulator: EnumAccumulator) -> None:
        self.accumulator: EnumAccumulator = accumulator

    def __call__(
        self,
        schema: Mapping[str, Any],
        metadata: TransformMetadata,
    ) -> Optional[str]:
        if not is_string_enum(schema):
            return None

        title: Any = schema.get("title")
        if not isinstance(title, str) or not title:
            return None

        if pointer_terminal_segment(metadata.path) != title:
            return None

        existing: Optional[EnumCandidate] = self.accumulator.get(title)
        if existing is not None:
            return existing.identifier

        description: Any = schema.get("description")
        candidate: EnumCandidate = EnumCandidate(
            name=title,
            identifier=clean_identifier(title),
            description=description if isinstance(description, str) else None,
            values=tuple(v for v in schema["enum"] if isinstance(v, str)),
        )
        self.accumulator.record(candidate)
        return candidate.identifier


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def build_enum_declaration(candidate: EnumCandidate, *, ambient: bool = False) -> EnumDeclaration:
    """Turn a hoisted candidate into an ``export enum`` statement."""
    return EnumDeclaration(
        name=candidate.identifier,
        members=list(candidate.values),
        description=candidate.description,
        ambient=ambient,
    )


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "EnumAccumulator",
    "EnumHoistingTransform",
    "is_string_enum",
    "build_enum_declaration",
]

logger.debug("oastypes.transforms loaded.")
