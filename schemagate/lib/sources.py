"""Schema sources: where expected and actual table lists come from.

Any object with a ``name`` and a ``get_schemas()`` method is a source. The
ones here cover in-memory lists, schema definitions and metadata snapshots
exported from a store. Querying a live store is left to callers, who can
wrap their own client in a ``StaticSchemaSource`` or any object matching
``SchemaSource``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Union, runtime_checkable

from schemagate.lib.definition import load_schema_definition, resolve_definition
from schemagate.lib.table_schema import TableSchema

logger = logging.getLogger(__name__)

__all__ = [
    "DefinitionSchemaSource",
    "SchemaSource",
    "SnapshotSchemaSource",
    "StaticSchemaSource",
]


@runtime_checkable
class SchemaSource(Protocol):
    """Supplies an ordered list of table schemas."""

    name: str

    def get_schemas(self) -> List[TableSchema]:
        ...


class StaticSchemaSource:
    """Schemas already held in memory."""

    def __init__(self, schemas: Optional[Iterable[TableSchema]], name: str = "static"):
        self.name = name
        self._schemas = list(schemas or ())

    def get_schemas(self) -> List[TableSchema]:
        # Fresh list so callers cannot alter the source
        return list(self._schemas)


class DefinitionSchemaSource:
    """Expected schemas from a packaged definition name or a definition file."""

    def __init__(self, definition: Union[str, Path], namespace: Optional[str] = None):
        self.definition = definition
        self.namespace = namespace
        self.name = f"definition:{definition}"

    def get_schemas(self) -> List[TableSchema]:
        return resolve_definition(self.definition, self.namespace)


class SnapshotSchemaSource:
    """Actual schemas from a metadata snapshot file.

    The snapshot uses the definition format, typically written by an export
    job that lists the store's tables and their column families.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.name = f"snapshot:{self.path}"

    def get_schemas(self) -> List[TableSchema]:
        schemas = load_schema_definition(self.path, allow_duplicates=True)
        logger.debug("Snapshot %s lists %d table(s)", self.path, len(schemas))
        return schemas
