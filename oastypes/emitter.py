# File: oastypes/emitter.py
"""
oastypes - Declaration Emitter
===============================

Produces the primary artifact (``openapi.ts``):

    1. translate the document with the enum hoisting transform attached;
    2. append one ``export enum`` per hoisted enum, in discovery order;
    3. append ``export const contentHash = "<sha256>";``.

The enum accumulator is created here, passed into the translation through
the transform, and returned with the result so the flattener can consume it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping

from oastypes.declarations import ConstDeclaration, DeclarationModule
from oastypes.errors import IdentifierCollisionError
from oastypes.transforms import (
    EnumAccumulator,
    EnumHoistingTransform,
    build_enum_declaration,
)
from oastypes.translator import translate_document

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("oastypes.emitter")

HASH_CONSTANT_NAME: str = "contentHash"


@dataclass(frozen=True, slots=True)
class EmitResult:
    """The emitted module, its rendered text and the hoisted enums."""

    module: DeclarationModule
    text: str
    enums: EnumAccumulator


class DeclarationEmitter:
    """
    Usage::

        result = DeclarationEmitter(ambient=False).emit(document, content_hash)
        Path("openapi.ts").write_text(result.text)
    """

    def __init__(self, *, ambient: bool = False) -> None:
        self._ambient: bool = ambient

    def emit(self, document: Mapping[str, Any], content_hash: str) -> EmitResult:
        accumulator: EnumAccumulator = EnumAccumulator()
        module: DeclarationModule = translate_document(
            document, transform=EnumHoistingTransform(accumulator)
        )

        taken: Dict[str, str] = {name: name for name in module.top_level_names()}
        taken[HASH_CONSTANT_NAME] = HASH_CONSTANT_NAME
        for candidate in accumulator:
            owner: str = taken.get(candidate.identifier, "")
            if owner:
                raise IdentifierCollisionError(candidate.identifier, owner, candidate.name)
            taken[candidate.identifier] = candidate.name
            module.append(build_enum_declaration(candidate, ambient=self._ambient))

        module.append(
            ConstDeclaration(HASH_CONSTANT_NAME, content_hash, ambient=self._ambient)
        )

        text: str = module.render()
        logger.info(
            "Emitted %d top-level declaration(s), %d hoisted enum(s).",
            len(module.statements),
            len(accumulator),
        )
        return EmitResult(module=module, text=text, enums=accumulator)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "HASH_CONSTANT_NAME",
    "EmitResult",
    "DeclarationEmitter",
]

logger.debug("oastypes.emitter loaded.")
