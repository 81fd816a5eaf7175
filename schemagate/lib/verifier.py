"""Schema compatibility verification.

Decides whether the tables and column families a store actually has satisfy
the set a service expects. The check asserts "at least what is declared":

- no expectation is trivially satisfied, whatever the store holds;
- a non-empty expectation is never satisfied by an empty store;
- every expected table must exist, matched by exact identity;
- every expected family must exist on the matching table.

Extra tables, and extra families on expected tables, are tolerated.

A mismatch is a normal ``False`` result, never an exception. Inputs are never
mutated and no state outlives a call, so verification is safe to run from
several threads at once.

Example:
    >>> expected = [TableSchema.of("AgentInfo", "Info")]
    >>> actual = [TableSchema.of("AgentInfo", "Info", "S"), TableSchema.of("Other")]
    >>> verify_schemas(expected, actual)
    True
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

from schemagate.lib.schema_index import SchemaIndex
from schemagate.lib.table_schema import TableSchema

logger = logging.getLogger(__name__)

__all__ = [
    "SchemaVerifier",
    "VerificationResult",
    "diagnose",
    "verify_schemas",
]


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of comparing expected schemas against actual ones.

    ``compatible`` is the verdict; the remaining fields explain it.
    ``duplicate_tables`` lists identities repeated in the actual list and is
    informational only (it never changes the verdict).

    Results are hashable. ``missing_families`` is a read-only mapping and is
    left out of the hash.
    """

    compatible: bool
    missing_tables: Tuple[str, ...] = ()
    missing_families: Mapping[str, FrozenSet[str]] = field(default_factory=dict, hash=False)
    duplicate_tables: Tuple[str, ...] = ()
    expected_count: int = 0
    actual_count: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "missing_families",
            MappingProxyType({table: frozenset(f) for table, f in self.missing_families.items()}),
        )

    def __bool__(self) -> bool:
        return self.compatible

    @property
    def mismatch_count(self) -> int:
        return len(self.missing_tables) + sum(
            len(families) for families in self.missing_families.values()
        )

    def summary(self) -> str:
        """One-line human-readable description."""
        if self.compatible:
            if self.expected_count == 0:
                return "No expected tables declared; nothing to verify"
            return (
                f"All {self.expected_count} expected tables present "
                f"({self.actual_count} tables in store)"
            )

        if self.actual_count == 0:
            return f"Store has no tables; expected {self.expected_count}"

        parts: List[str] = []
        if self.missing_tables:
            parts.append("missing tables: " + ", ".join(self.missing_tables))
        if self.missing_families:
            described = [
                f"{table}[{', '.join(sorted(families))}]"
                for table, families in sorted(self.missing_families.items())
            ]
            parts.append("missing column families: " + ", ".join(described))
        return "Schema mismatch - " + "; ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {
            "compatible": self.compatible,
            "expected_count": self.expected_count,
            "actual_count": self.actual_count,
            "missing_tables": list(self.missing_tables),
            "missing_families": {
                table: sorted(families)
                for table, families in sorted(self.missing_families.items())
            },
            "duplicate_tables": list(self.duplicate_tables),
        }


def verify_schemas(
    expected: Optional[Sequence[TableSchema]],
    actual: Optional[Sequence[TableSchema]],
) -> bool:
    """Return whether ``actual`` satisfies ``expected``.

    Stops at the first missing table or family. ``None`` is treated as an
    empty list on either side.

    Args:
        expected: Schemas the service requires
        actual: Schemas the store has

    Returns:
        True if every expected table exists in ``actual`` with at least the
        expected column families
    """
    if not expected:
        return True
    if not actual:
        return False

    index = SchemaIndex.build(actual)
    for expected_schema in expected:
        actual_schema = index.get(expected_schema.identity)
        if actual_schema is None:
            return False
        if not expected_schema.families <= actual_schema.families:
            return False
    return True


def diagnose(
    expected: Optional[Sequence[TableSchema]],
    actual: Optional[Sequence[TableSchema]],
) -> VerificationResult:
    """Compare ``expected`` against ``actual`` and collect every mismatch.

    Gives the same verdict as ``verify_schemas`` but keeps going past the
    first failure so operators can see everything that is missing.
    """
    expected = expected or ()
    actual = actual or ()

    if not expected:
        return VerificationResult(compatible=True, actual_count=len(actual))

    index = SchemaIndex.build(actual)
    if not index:
        return VerificationResult(
            compatible=False,
            missing_tables=tuple(sorted({s.identity for s in expected})),
            expected_count=len(expected),
        )

    missing_tables = set()
    missing_families: Dict[str, FrozenSet[str]] = {}
    for expected_schema in expected:
        actual_schema = index.get(expected_schema.identity)
        if actual_schema is None:
            missing_tables.add(expected_schema.identity)
            continue
        missing = expected_schema.missing_families(actual_schema)
        if missing:
            missing_families[expected_schema.identity] = missing

    return VerificationResult(
        compatible=not missing_tables and not missing_families,
        missing_tables=tuple(sorted(missing_tables)),
        missing_families=missing_families,
        duplicate_tables=index.duplicates,
        expected_count=len(expected),
        actual_count=len(actual),
    )


class SchemaVerifier:
    """Stateless verifier exposing both the boolean and diagnostic checks.

    Holds no per-call state; one instance can be shared freely.
    """

    def verify_schemas(
        self,
        expected: Optional[Sequence[TableSchema]],
        actual: Optional[Sequence[TableSchema]],
    ) -> bool:
        return verify_schemas(expected, actual)

    def diagnose(
        self,
        expected: Optional[Sequence[TableSchema]],
        actual: Optional[Sequence[TableSchema]],
    ) -> VerificationResult:
        result = diagnose(expected, actual)
        logger.debug("Schema verification: %s", result.summary())
        return result
