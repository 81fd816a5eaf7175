"""schemagate library modules.

This package contains the schema value types, the compatibility verifier,
and the collaborators around it (definition loading, schema sources,
outcome reporting and the preflight gate).
"""

from schemagate.lib.definition import (
    dump_schema_definition,
    list_packaged_definitions,
    load_packaged_definition,
    load_schema_definition,
    parse_schema_definition,
    resolve_definition,
)
from schemagate.lib.errors import (
    ConfigurationError,
    SchemaDefinitionError,
    SchemaGateError,
    SchemaMismatchError,
    SchemaSourceError,
)
from schemagate.lib.gate import build_reporters, close_reporters, fetch_schemas, run_preflight
from schemagate.lib.logging import JSONFormatter, setup_logging
from schemagate.lib.notify import (
    OutcomeReporter,
    ValidationResultCode,
    WebhookReporter,
    WebhookResponse,
)
from schemagate.lib.schema_index import SchemaIndex
from schemagate.lib.settings import GateSettings, LoggingConfig, load_settings
from schemagate.lib.sources import (
    DefinitionSchemaSource,
    SchemaSource,
    SnapshotSchemaSource,
    StaticSchemaSource,
)
from schemagate.lib.table_schema import DEFAULT_NAMESPACE, TableName, TableSchema, qualify
from schemagate.lib.verifier import SchemaVerifier, VerificationResult, diagnose, verify_schemas

__all__ = [
    # Schema values
    "DEFAULT_NAMESPACE",
    "TableName",
    "TableSchema",
    "qualify",
    "SchemaIndex",
    # Verification
    "SchemaVerifier",
    "VerificationResult",
    "diagnose",
    "verify_schemas",
    # Definitions and sources
    "dump_schema_definition",
    "list_packaged_definitions",
    "load_packaged_definition",
    "load_schema_definition",
    "parse_schema_definition",
    "resolve_definition",
    "DefinitionSchemaSource",
    "SchemaSource",
    "SnapshotSchemaSource",
    "StaticSchemaSource",
    # Reporting
    "OutcomeReporter",
    "ValidationResultCode",
    "WebhookReporter",
    "WebhookResponse",
    # Gate
    "build_reporters",
    "close_reporters",
    "fetch_schemas",
    "run_preflight",
    # Settings and logging
    "GateSettings",
    "LoggingConfig",
    "load_settings",
    "JSONFormatter",
    "setup_logging",
    # Errors
    "ConfigurationError",
    "SchemaDefinitionError",
    "SchemaGateError",
    "SchemaMismatchError",
    "SchemaSourceError",
]
