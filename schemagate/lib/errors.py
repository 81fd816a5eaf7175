"""Structured exception hierarchy for schemagate.

Provides specific exception types for the failure modes around schema
verification, with rich context for debugging and troubleshooting.

A schema mismatch is NOT an error for the verifier itself: ``verify_schemas``
returns ``False``. ``SchemaMismatchError`` exists only so the preflight gate
can abort startup when asked to.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from schemagate.lib.verifier import VerificationResult

__all__ = [
    "SchemaGateError",
    "ConfigurationError",
    "SchemaDefinitionError",
    "SchemaSourceError",
    "SchemaMismatchError",
]


class SchemaGateError(Exception):
    """Base exception for all schemagate errors.

    Provides structured error information for debugging.
    """

    def __init__(
        self,
        message: str,
        *,
        table: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        self.table = table
        self.details = details or {}
        self.suggestion = suggestion

        # Build full message
        parts = [message]

        if table:
            parts.insert(0, f"[{table}]")

        if details:
            detail_lines = [f"  {k}: {v}" for k, v in details.items()]
            parts.append("\nDetails:")
            parts.extend(detail_lines)

        if suggestion:
            parts.append(f"\nSuggestion: {suggestion}")

        super().__init__("\n".join(parts) if len(parts) > 1 else message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": str(self.args[0]) if self.args else "",
            "table": self.table,
            "details": self.details,
            "suggestion": self.suggestion,
        }


class ConfigurationError(SchemaGateError):
    """Error in schemagate settings.

    Raised when environment or CLI configuration is invalid.
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Any = None,
        **kwargs: Any,
    ) -> None:
        self.field = field
        self.value = value

        details = kwargs.pop("details", {})
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)

        super().__init__(message, details=details, **kwargs)


class SchemaDefinitionError(SchemaGateError):
    """Error reading a schema definition.

    Raised when a definition file is missing, is not valid YAML/JSON, or
    describes tables that cannot form a well-formed schema list.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        issues: Optional[List[str]] = None,
        **kwargs: Any,
    ) -> None:
        self.path = path
        self.issues = issues or []

        details = kwargs.pop("details", {})
        if path:
            details["path"] = path
        if issues:
            details["issue_count"] = len(issues)
            issue_lines = "\n".join(f"  - {issue}" for issue in issues)
            message = f"{message}\n\nIssues found:\n{issue_lines}"

        suggestion = kwargs.pop("suggestion", None)
        if not suggestion:
            suggestion = (
                "Each table needs a unique 'name' and a list of "
                "'column_families' strings."
            )

        super().__init__(message, details=details, suggestion=suggestion, **kwargs)


class SchemaSourceError(SchemaGateError):
    """A schema source failed to produce its table list.

    Raised by the preflight gate when acquiring expected or actual schemas
    fails. The underlying exception is kept as ``cause``.
    """

    def __init__(
        self,
        message: str,
        *,
        source: Optional[str] = None,
        cause: Optional[Exception] = None,
        **kwargs: Any,
    ) -> None:
        self.source = source
        self.cause = cause

        details = kwargs.pop("details", {})
        if source:
            details["source"] = source
        if cause:
            details["cause"] = str(cause)
            details["cause_type"] = type(cause).__name__

        super().__init__(message, details=details, **kwargs)


class SchemaMismatchError(SchemaGateError):
    """The live store does not satisfy the expected schema.

    Raised only by the preflight gate when ``fail_on_mismatch`` is set.
    """

    def __init__(
        self,
        message: str,
        *,
        result: Optional["VerificationResult"] = None,
        **kwargs: Any,
    ) -> None:
        self.result = result

        details = kwargs.pop("details", {})
        if result is not None:
            if result.missing_tables:
                details["missing_tables"] = ", ".join(result.missing_tables)
            for table, families in sorted(result.missing_families.items()):
                details[f"missing_families[{table}]"] = ", ".join(sorted(families))

        suggestion = kwargs.pop("suggestion", None)
        if not suggestion:
            suggestion = (
                "Create the missing tables/column families before starting "
                "the service, or point it at the correct store."
            )

        super().__init__(message, details=details, suggestion=suggestion, **kwargs)
