"""Lookup index over a list of table schemas."""

from __future__ import annotations

import logging
from typing import Dict, Iterator, Optional, Sequence, Set, Tuple

from schemagate.lib.table_schema import TableSchema

logger = logging.getLogger(__name__)

__all__ = ["SchemaIndex"]


class SchemaIndex:
    """Schemas keyed by table identity.

    Built once per verification call and discarded afterwards. When the same
    identity appears more than once the later schema replaces the earlier
    one; the index is a lookup aid, not a validator of its input, so the
    repeat is only recorded in ``duplicates``.

    Example:
        >>> index = SchemaIndex.build([TableSchema.of("t1", "cf")])
        >>> index.get("t1").families
        frozenset({'cf'})
        >>> index.get("t2") is None
        True
    """

    def __init__(self) -> None:
        self._schemas: Dict[str, TableSchema] = {}
        self._duplicates: Set[str] = set()

    @classmethod
    def build(cls, schemas: Optional[Sequence[TableSchema]]) -> "SchemaIndex":
        """Index ``schemas`` by identity; ``None`` is treated as empty."""
        index = cls()
        for schema in schemas or ():
            index._add(schema)
        if index._duplicates:
            logger.debug(
                "Duplicate table identities while indexing (last one wins): %s",
                ", ".join(sorted(index._duplicates)),
            )
        return index

    def _add(self, schema: TableSchema) -> None:
        if schema.identity in self._schemas:
            self._duplicates.add(schema.identity)
        self._schemas[schema.identity] = schema

    def get(self, identity: str) -> Optional[TableSchema]:
        return self._schemas.get(identity)

    @property
    def duplicates(self) -> Tuple[str, ...]:
        """Identities that appeared more than once, sorted."""
        return tuple(sorted(self._duplicates))

    def __contains__(self, identity: object) -> bool:
        return identity in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)

    def __iter__(self) -> Iterator[str]:
        return iter(self._schemas)

    def __repr__(self) -> str:
        return f"SchemaIndex(tables={len(self._schemas)})"
