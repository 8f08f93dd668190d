# File: oastypes/flattener.py
"""
oastypes - Declaration Flattener (Re-exporter)
===============================================

Builds ``schemas.ts`` so application code can write ``Pet`` instead of
``components['schemas']['Pet']``::

    import type { components } from 'types/openapi';
    export {
      Status,
    } from 'types/openapi';

    export type Pet = components['schemas']['Pet'];
    export type FooBar = components['schemas']['Foo-Bar'];

Hoisted enums are runtime values, so they are forwarded with one
consolidated ``export { ... } from`` clause instead of type aliases.

The flattener walks the ``DeclarationModule`` produced by the emitter:
``components`` interface → ``schemas`` member → one entry per schema, in
emission order. Local names are cleaned with ``clean_identifier``; two
schema or enum names that clean to the same identifier abort the run with
``IdentifierCollisionError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from oastypes.declarations import (
    DeclarationModule,
    InterfaceDeclaration,
    Keyword,
    PropertySignature,
    TypeLiteral,
    TypeReference,
)
from oastypes.errors import ArtifactParseError, IdentifierCollisionError
from oastypes.models import EnumCandidate
from oastypes.transforms import EnumAccumulator
from oastypes.utils import clean_identifier, ts_single_quoted

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("oastypes.flattener")

COMPONENTS_NAME: str = "components"
SCHEMAS_MEMBER: str = "schemas"


@dataclass(slots=True)
class ReExportPlan:
    """What the re-export module will contain, before rendering."""

    enum_identifiers: List[str] = field(default_factory=list)
    type_aliases: List[Tuple[str, str]] = field(default_factory=list)

    def exported_names(self) -> List[str]:
        return [*self.enum_identifiers, *(alias for alias, _ in self.type_aliases)]


# ---------------------------------------------------------------------------
# Tree inspection
# ---------------------------------------------------------------------------


def schema_entries(module: DeclarationModule) -> List[PropertySignature]:
    """
    Return the members of ``components.schemas`` in emission order.

    Raises:
        ArtifactParseError: If ``components`` or its ``schemas`` member is
            missing or has an unexpected shape.
    """
    components = module.find(COMPONENTS_NAME)
    if not isinstance(components, InterfaceDeclaration):
        raise ArtifactParseError(
            f"Generated declarations have no '{COMPONENTS_NAME}' interface"
        )

    schemas: Optional[PropertySignature] = components.body.get_member(SCHEMAS_MEMBER)
    if schemas is None:
        raise ArtifactParseError(
            f"'{COMPONENTS_NAME}' has no '{SCHEMAS_MEMBER}' member"
        )
    if isinstance(schemas.type, Keyword) and schemas.type.name == "never":
        return []
    if not isinstance(schemas.type, TypeLiteral):
        raise ArtifactParseError(
            f"'{COMPONENTS_NAME}.{SCHEMAS_MEMBER}' is not an object type"
        )
    return list(schemas.type.members)


# ---------------------------------------------------------------------------
# Flattener
# ---------------------------------------------------------------------------


class DeclarationFlattener:
    """
    Usage::

        text = DeclarationFlattener("types/openapi").flatten(module, enums)
    """

    def __init__(self, import_specifier: str) -> None:
        self._specifier: str = ts_single_quoted(import_specifier)

    def plan(self, module: DeclarationModule, enums: EnumAccumulator) -> ReExportPlan:
        plan: ReExportPlan = ReExportPlan()
        owners: Dict[str, str] = {COMPONENTS_NAME: COMPONENTS_NAME}

        for candidate in enums:
            self._claim(owners, candidate.identifier, candidate.name)
            plan.enum_identifiers.append(candidate.identifier)

        for entry in schema_entries(module):
            if self._is_hoisted(entry, enums):
                continue
            local: str = clean_identifier(entry.name)
            self._claim(owners, local, entry.name)
            plan.type_aliases.append((local, entry.name))

        logger.info(
            "Re-export plan: %d type alias(es), %d enum(s).",
            len(plan.type_aliases),
            len(plan.enum_identifiers),
        )
        return plan

    def render(self, plan: ReExportPlan) -> str:
        lines: List[str] = [f"import type {{ {COMPONENTS_NAME} }} from {self._specifier};"]
        if plan.enum_identifiers:
            lines.append("export {")
            lines.extend(f"  {identifier}," for identifier in plan.enum_identifiers)
            lines.append(f"}} from {self._specifier};")
        lines.append("")
        lines.extend(
            f"export type {local} = {COMPONENTS_NAME}['{SCHEMAS_MEMBER}']"
            f"[{ts_single_quoted(original)}];"
            for local, original in plan.type_aliases
        )
        return "\n".join(lines) + "\n"

    def flatten(self, module: DeclarationModule, enums: EnumAccumulator) -> str:
        return self.render(self.plan(module, enums))

    @staticmethod
    def _is_hoisted(entry: PropertySignature, enums: EnumAccumulator) -> bool:
        """True if the schema itself became an enum (already re-exported by value)."""
        candidate: Optional[EnumCandidate] = enums.get(entry.name)
        return (
            candidate is not None
            and isinstance(entry.type, TypeReference)
            and entry.type.text == candidate.identifier
        )

    @staticmethod
    def _claim(owners: Dict[str, str], identifier: str, original: str) -> None:
        previous: str = owners.get(identifier, "")
        if previous:
            raise IdentifierCollisionError(identifier, previous, original)
        owners[identifier] = original


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "COMPONENTS_NAME",
    "SCHEMAS_MEMBER",
    "ReExportPlan",
    "schema_entries",
    "DeclarationFlattener",
]

logger.debug("oastypes.flattener loaded.")
