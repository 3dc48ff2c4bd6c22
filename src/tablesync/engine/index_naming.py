"""Derive index key roles from the 'hash[-range]-Index' naming convention.

A global secondary index named ``userId-Index`` is keyed on ``userId`` alone;
``userId-createdAt-Index`` is keyed on ``userId`` (HASH) and ``createdAt``
(RANGE). The number of hyphen-delimited segments minus one is the number of
key elements. Creating an index needs typed attribute definitions for its key
attributes, and the name is the only place the engine recovers them from.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from tablesync.core.exceptions import IndexNamingError, UnresolvedAttributeError
from tablesync.models.schema import AttributeDefinition, GlobalSecondaryIndex

logger = logging.getLogger(__name__)

INDEX_NAME_DELIMITER = "-"
HASH_ONLY = 1
HASH_AND_RANGE = 2


@dataclass(frozen=True)
class IndexKeyNames:
    """Attribute names encoded in an index name."""

    hash_key: str
    range_key: str | None = None

    @property
    def arity(self) -> int:
        return HASH_ONLY if self.range_key is None else HASH_AND_RANGE


@dataclass(frozen=True)
class IndexKeyBinding:
    """Typed attribute definitions for an index's key attributes."""

    hash_definition: AttributeDefinition
    range_definition: AttributeDefinition | None = None

    @property
    def attribute_definitions(self) -> list[AttributeDefinition]:
        definitions = [self.hash_definition]
        if self.range_definition is not None and self.range_definition != self.hash_definition:
            definitions.append(self.range_definition)
        return definitions


def parse_index_name(index_name: str) -> IndexKeyNames:
    """Split an index name into its HASH and optional RANGE attribute names."""
    segments = index_name.split(INDEX_NAME_DELIMITER)
    key_elements = len(segments) - 1

    if key_elements < HASH_ONLY:
        raise IndexNamingError(
            index_name,
            "expected at least 1 key schema element; follow the 'hash-range-Index' "
            "convention where the range key is optional",
        )
    if key_elements > HASH_AND_RANGE:
        raise IndexNamingError(
            index_name,
            f"expected no more than {HASH_AND_RANGE} key schema elements, found {key_elements}; "
            "follow the 'hash-range-Index' convention where the range key is optional",
        )
    if any(not segment for segment in segments):
        raise IndexNamingError(index_name, "name contains an empty segment")

    if key_elements == HASH_ONLY:
        return IndexKeyNames(hash_key=segments[0])
    return IndexKeyNames(hash_key=segments[0], range_key=segments[1])


def _lookup(attribute_name: str, definitions: Iterable[AttributeDefinition]) -> AttributeDefinition | None:
    for definition in definitions:
        if definition.attribute_name.casefold() == attribute_name.casefold():
            return definition
    return None


def resolve_key_bindings(
    index: GlobalSecondaryIndex, attribute_definitions: list[AttributeDefinition]
) -> IndexKeyBinding:
    """Bind the attributes named by ``index`` to the owning table's declarations.

    Matching is case-insensitive. Raises IndexNamingError when the name does not
    follow the convention or disagrees with the declared key schema, and
    UnresolvedAttributeError when a named attribute is not declared.
    """
    key_names = parse_index_name(index.index_name)
    logger.info("Index %s encodes %d key element(s): %s", index.index_name, key_names.arity, key_names)

    if len(index.key_schema) != key_names.arity:
        raise IndexNamingError(
            index.index_name,
            f"name encodes {key_names.arity} key element(s) but the key schema declares {len(index.key_schema)}",
        )

    hash_definition = _lookup(key_names.hash_key, attribute_definitions)
    range_definition = _lookup(key_names.range_key, attribute_definitions) if key_names.range_key else None

    missing = [name for name, found in (
        (key_names.hash_key, hash_definition),
        (key_names.range_key, range_definition),
    ) if name is not None and found is None]
    if missing or hash_definition is None:
        raise UnresolvedAttributeError(
            index.index_name, missing, [d.attribute_name for d in attribute_definitions]
        )

    return IndexKeyBinding(hash_definition=hash_definition, range_definition=range_definition)
