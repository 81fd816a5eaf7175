"""Preflight schema gate.

Runs once before a service starts working against a store: fetch the
expected and actual schemas, verify, report the outcome, and abort if the
store is not compatible.

Example:
    from schemagate.lib.gate import run_preflight
    from schemagate.lib.sources import DefinitionSchemaSource, StaticSchemaSource

    run_preflight(
        DefinitionSchemaSource("pinpoint"),
        StaticSchemaSource(list_tables_from_admin_client(), name="prod-hbase"),
    )  # raises SchemaMismatchError if tables or families are missing
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from schemagate.lib.errors import SchemaDefinitionError, SchemaMismatchError, SchemaSourceError
from schemagate.lib.logging import GateLogger
from schemagate.lib.notify import OutcomeReporter, WebhookReporter
from schemagate.lib.settings import GateSettings
from schemagate.lib.sources import SchemaSource
from schemagate.lib.table_schema import TableSchema
from schemagate.lib.verifier import SchemaVerifier, VerificationResult

logger = logging.getLogger(__name__)

__all__ = ["build_reporters", "close_reporters", "fetch_schemas", "run_preflight"]


def fetch_schemas(source: SchemaSource) -> List[TableSchema]:
    """Get the schema list from ``source``.

    A ``SchemaDefinitionError`` (a missing or malformed definition or snapshot
    file) passes through unchanged on either side, since it already names the
    file and the issues. Anything else a source raises is wrapped in
    ``SchemaSourceError``. No retry is attempted.
    """
    try:
        return list(source.get_schemas())
    except SchemaDefinitionError:
        raise
    except Exception as e:
        raise SchemaSourceError(
            f"Could not read schemas from {source.name}",
            source=source.name,
            cause=e,
        ) from e


def build_reporters(settings: GateSettings) -> List[OutcomeReporter]:
    """Reporters implied by ``settings``: a webhook reporter if URLs are set.

    The gate itself logs every outcome, so no reporter is needed for that.
    """
    reporters: List[OutcomeReporter] = []
    if settings.webhook_urls:
        reporters.append(
            WebhookReporter(
                settings.webhook_urls,
                settings.webhook_id,
                timeout=settings.webhook_timeout,
                max_attempts=settings.webhook_max_attempts,
            )
        )
    return reporters


def close_reporters(reporters: Sequence[OutcomeReporter]) -> None:
    """Release resources held by reporters that have a ``close()``."""
    for reporter in reporters:
        close = getattr(reporter, "close", None)
        if callable(close):
            close()


def _notify(reporters: Sequence[OutcomeReporter], result: VerificationResult) -> None:
    for reporter in reporters:
        try:
            reporter.report(result)
        except Exception as e:
            logger.warning(
                "Outcome reporter %s failed: %s",
                type(reporter).__name__,
                e,
                exc_info=True,
            )


def run_preflight(
    expected_source: SchemaSource,
    actual_source: SchemaSource,
    *,
    reporters: Sequence[OutcomeReporter] = (),
    fail_on_mismatch: bool = True,
    verifier: Optional[SchemaVerifier] = None,
) -> VerificationResult:
    """Verify that ``actual_source`` satisfies ``expected_source``.

    Args:
        expected_source: Source of the schemas the service requires
        actual_source: Source of the schemas the store has
        reporters: Receive the result after verification
        fail_on_mismatch: Raise instead of returning an incompatible result
        verifier: Verifier to use (default: a new ``SchemaVerifier``)

    Returns:
        The verification result

    Raises:
        SchemaDefinitionError: If the definition or snapshot file is missing
            or malformed
        SchemaSourceError: If either source fails to produce its list
        SchemaMismatchError: If incompatible and ``fail_on_mismatch`` is set
    """
    gate_logger = GateLogger(__name__)
    gate_logger.set_context(expected=expected_source.name, store=actual_source.name)

    expected = fetch_schemas(expected_source)
    actual = fetch_schemas(actual_source)
    gate_logger.info(
        "Verifying %d expected table(s) against %d table(s) in store",
        len(expected),
        len(actual),
    )

    result = (verifier or SchemaVerifier()).diagnose(expected, actual)

    gate_logger.log_outcome(result)
    _notify(reporters, result)

    if not result.compatible and fail_on_mismatch:
        raise SchemaMismatchError(
            f"Store {actual_source.name} does not satisfy {expected_source.name}",
            result=result,
        )
    return result
