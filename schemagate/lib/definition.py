"""Schema definition loader.

Expected schemas are declared in YAML (JSON is valid YAML too), either
shipped inside the package under ``schemagate/definitions/`` or supplied as a
file path.

Example YAML (pinpoint.yaml):
    namespace: default
    tables:
      - name: AgentInfo
        column_families: [Info]
      - name: ApplicationTraceIndex
        column_families: [I, M]

Usage:
    from schemagate.lib.definition import load_packaged_definition
    expected = load_packaged_definition("pinpoint")

The loader is where malformed input is rejected: table names must be
present and unique, and family names must be non-empty strings. The
verifier can then assume well-formed lists.
"""

from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from schemagate.lib.errors import SchemaDefinitionError
from schemagate.lib.table_schema import DEFAULT_NAMESPACE, TableName, TableSchema

logger = logging.getLogger(__name__)

__all__ = [
    "DEFINITIONS_PACKAGE",
    "SchemaDefinitionConfig",
    "TableDefinition",
    "dump_schema_definition",
    "list_packaged_definitions",
    "load_packaged_definition",
    "load_schema_definition",
    "parse_schema_definition",
    "resolve_definition",
]

DEFINITIONS_PACKAGE = "schemagate.definitions"
DEFINITION_SUFFIXES = (".yaml", ".yml", ".json")


class TableDefinition(BaseModel):
    """One table entry of a schema definition."""

    name: str = Field(..., min_length=1, description="Table qualifier or 'namespace:qualifier'")
    column_families: List[str] = Field(default_factory=list, description="Column family names")

    @field_validator("column_families", mode="before")
    @classmethod
    def default_empty_families(cls, v: Any) -> Any:
        """``column_families:`` with no value means no families."""
        return [] if v is None else v

    @field_validator("column_families")
    @classmethod
    def validate_family_names(cls, v: List[str]) -> List[str]:
        """Reject empty family names."""
        for family in v:
            if not family:
                raise ValueError("column family names must not be empty")
        return v


class SchemaDefinitionConfig(BaseModel):
    """Pydantic model for a whole schema definition document."""

    namespace: str = Field(default=DEFAULT_NAMESPACE, min_length=1, description="Namespace for unqualified tables")
    tables: List[TableDefinition] = Field(default_factory=list, description="Declared tables")

    def to_schemas(
        self,
        namespace: Optional[str] = None,
        allow_duplicates: bool = False,
    ) -> List[TableSchema]:
        """Convert to table schemas, rejecting duplicate identities.

        Args:
            namespace: Overrides the document's own namespace when given
            allow_duplicates: Keep repeated identities instead of raising

        Raises:
            ValueError: If two entries resolve to the same identity
        """
        ns = namespace or self.namespace
        schemas: List[TableSchema] = []
        seen: Dict[str, str] = {}
        for table in self.tables:
            table_name = TableName.value_of(table.name, ns)
            schema = TableSchema.from_table_name(table_name, table.column_families)
            if schema.identity in seen and not allow_duplicates:
                raise ValueError(
                    f"duplicate table '{schema.identity}' "
                    f"(declared as '{seen[schema.identity]}' and '{table.name}')"
                )
            seen[schema.identity] = table.name
            schemas.append(schema)
        return schemas


def _format_validation_error(error: ValidationError) -> List[str]:
    issues = []
    for err in error.errors():
        location = ".".join(str(p) for p in err.get("loc", ()))
        issues.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return issues


def parse_schema_definition(
    data: Any,
    source: Optional[str] = None,
    namespace: Optional[str] = None,
    allow_duplicates: bool = False,
) -> List[TableSchema]:
    """Build table schemas from an already-parsed definition document.

    Args:
        data: Parsed YAML/JSON (mapping with ``tables``, or a bare list of tables)
        source: Where the document came from, for error messages
        namespace: Namespace override for unqualified table names
        allow_duplicates: Accept repeated table identities (store snapshots)

    Returns:
        Table schemas in declaration order

    Raises:
        SchemaDefinitionError: If the document is malformed
    """
    if data is None:
        return []
    if isinstance(data, list):
        data = {"tables": data}
    if not isinstance(data, dict):
        raise SchemaDefinitionError(
            f"Schema definition must be a mapping, got {type(data).__name__}",
            path=source,
        )

    try:
        config = SchemaDefinitionConfig.model_validate(data)
    except ValidationError as e:
        raise SchemaDefinitionError(
            "Invalid schema definition",
            path=source,
            issues=_format_validation_error(e),
        ) from e

    try:
        schemas = config.to_schemas(namespace, allow_duplicates)
    except ValueError as e:
        raise SchemaDefinitionError("Invalid schema definition", path=source, issues=[str(e)]) from e

    logger.debug("Parsed %d table(s) from %s", len(schemas), source or "<data>")
    return schemas


def _read_text(path: Any, source: str) -> str:
    """Read a definition as UTF-8 text; ``path`` is a Path or a resource."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SchemaDefinitionError(
            f"Could not read schema definition: {e}",
            path=source,
            suggestion="Definition files must be readable UTF-8 YAML or JSON.",
        ) from e


def _parse_text(
    text: str,
    source: str,
    namespace: Optional[str],
    allow_duplicates: bool = False,
) -> List[TableSchema]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SchemaDefinitionError(f"Could not parse schema definition: {e}", path=source) from e
    return parse_schema_definition(
        data, source=source, namespace=namespace, allow_duplicates=allow_duplicates
    )


def load_schema_definition(
    path: Union[str, Path],
    namespace: Optional[str] = None,
    allow_duplicates: bool = False,
) -> List[TableSchema]:
    """Load table schemas from a YAML or JSON file.

    Raises:
        SchemaDefinitionError: If the file is missing or malformed
    """
    path = Path(path)
    if not path.is_file():
        raise SchemaDefinitionError(
            f"Schema definition file not found: {path}",
            path=str(path),
            suggestion="Check the path, or use a packaged definition name.",
        )

    logger.info("Loading schema definition from %s", path)
    return _parse_text(_read_text(path, str(path)), str(path), namespace, allow_duplicates)


def list_packaged_definitions() -> List[str]:
    """Names of the definitions shipped with schemagate."""
    names = []
    for entry in resources.files(DEFINITIONS_PACKAGE).iterdir():
        if entry.is_file() and entry.name.endswith(DEFINITION_SUFFIXES):
            names.append(entry.name.rsplit(".", 1)[0])
    return sorted(names)


def load_packaged_definition(name: str, namespace: Optional[str] = None) -> List[TableSchema]:
    """Load a definition shipped under ``schemagate/definitions/``.

    Raises:
        SchemaDefinitionError: If no packaged definition has that name
    """
    package_dir = resources.files(DEFINITIONS_PACKAGE)
    for suffix in DEFINITION_SUFFIXES:
        entry = package_dir.joinpath(f"{name}{suffix}")
        if entry.is_file():
            logger.info("Loading packaged schema definition '%s'", name)
            source = f"{DEFINITIONS_PACKAGE}/{entry.name}"
            return _parse_text(_read_text(entry, source), source, namespace)

    available = ", ".join(list_packaged_definitions()) or "none"
    raise SchemaDefinitionError(
        f"Unknown packaged schema definition '{name}'",
        details={"available": available},
        suggestion="Pass a path to a definition file, or one of the available names.",
    )


def resolve_definition(name_or_path: Union[str, Path], namespace: Optional[str] = None) -> List[TableSchema]:
    """Load from a file if ``name_or_path`` exists on disk, else by packaged name."""
    candidate = Path(name_or_path)
    if candidate.is_file() or candidate.suffix in DEFINITION_SUFFIXES:
        return load_schema_definition(candidate, namespace)
    return load_packaged_definition(str(name_or_path), namespace)


def dump_schema_definition(
    schemas: Sequence[TableSchema],
    namespace: str = DEFAULT_NAMESPACE,
) -> Dict[str, Any]:
    """Inverse of ``parse_schema_definition``, e.g. for writing snapshots.

    Default-namespace tables are written as ``default:<name>`` when another
    ``namespace`` is declared, so the document reads back to the same
    identities.
    """
    tables = []
    for schema in schemas:
        entry = schema.to_dict()
        if namespace != DEFAULT_NAMESPACE and schema.table_name.namespace == DEFAULT_NAMESPACE:
            entry["name"] = f"{DEFAULT_NAMESPACE}:{schema.identity}"
        tables.append(entry)
    return {"namespace": namespace, "tables": tables}
