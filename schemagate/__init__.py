"""schemagate: verify a column-family store's schema before a service uses it."""

__version__ = "1.0.0"

from schemagate.lib import (
    SchemaMismatchError,
    TableSchema,
    VerificationResult,
    diagnose,
    run_preflight,
    verify_schemas,
)

__all__ = [
    "__version__",
    "SchemaMismatchError",
    "TableSchema",
    "VerificationResult",
    "diagnose",
    "run_preflight",
    "verify_schemas",
]
