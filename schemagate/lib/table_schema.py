"""Table schema value types.

A ``TableSchema`` is the identity of one table plus the set of column-family
names it carries. Values are immutable; building a variant of a schema
(extra families, a copy for a test scenario) always returns a new object.

Table identities follow the HBase naming convention: a namespace and a
qualifier joined by ``:``. Tables in the default namespace are written
without the prefix, so ``default:AgentInfo`` and ``AgentInfo`` name the same
table and both render as ``AgentInfo``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Optional

__all__ = [
    "DEFAULT_NAMESPACE",
    "NAMESPACE_DELIMITER",
    "TableName",
    "TableSchema",
    "qualify",
]

DEFAULT_NAMESPACE = "default"
NAMESPACE_DELIMITER = ":"


def qualify(namespace: Optional[str], qualifier: str) -> str:
    """Build a table identity from a namespace and a qualifier.

    Args:
        namespace: Namespace name; ``None`` or ``"default"`` means default
        qualifier: Table qualifier within the namespace

    Returns:
        Identity string (``"qualifier"`` or ``"namespace:qualifier"``)
    """
    return TableName(namespace or DEFAULT_NAMESPACE, qualifier).name_as_string


@dataclass(frozen=True)
class TableName:
    """Namespace-qualified table name."""

    namespace: str
    qualifier: str

    def __post_init__(self) -> None:
        if not self.qualifier:
            raise ValueError("Table qualifier must not be empty")
        if NAMESPACE_DELIMITER in self.qualifier:
            raise ValueError(
                f"Table qualifier '{self.qualifier}' must not contain "
                f"'{NAMESPACE_DELIMITER}'"
            )
        if not self.namespace:
            raise ValueError("Table namespace must not be empty")

    @classmethod
    def value_of(cls, name: str, namespace: Optional[str] = None) -> "TableName":
        """Parse ``"qualifier"`` or ``"namespace:qualifier"``.

        An explicit namespace inside ``name`` wins over the ``namespace``
        argument, which only applies to unqualified names.
        """
        if NAMESPACE_DELIMITER in name:
            ns, _, qualifier = name.partition(NAMESPACE_DELIMITER)
            return cls(ns, qualifier)
        return cls(namespace or DEFAULT_NAMESPACE, name)

    @property
    def name_as_string(self) -> str:
        if self.namespace == DEFAULT_NAMESPACE:
            return self.qualifier
        return f"{self.namespace}{NAMESPACE_DELIMITER}{self.qualifier}"

    def __str__(self) -> str:
        return self.name_as_string


@dataclass(frozen=True)
class TableSchema:
    """One table's identity and its column families.

    ``identity`` is compared by exact, case-sensitive string equality.
    ``families`` is a frozenset, so insertion order does not matter and
    duplicate names collapse to one entry.

    Example:
        >>> schema = TableSchema.of("AgentInfo", "Info")
        >>> schema.with_families("Extra").families == {"Info", "Extra"}
        True
    """

    identity: str
    families: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        # Accept any iterable of names and normalise to a frozenset
        if not isinstance(self.families, frozenset):
            object.__setattr__(self, "families", frozenset(self.families))

    @classmethod
    def of(cls, identity: str, *families: str) -> "TableSchema":
        """Create a schema from an identity and zero or more family names."""
        return cls(identity, frozenset(families))

    @classmethod
    def from_table_name(cls, table_name: TableName, families: Iterable[str] = ()) -> "TableSchema":
        return cls(table_name.name_as_string, frozenset(families))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (families sorted for stable output)."""
        return {
            "name": self.identity,
            "column_families": sorted(self.families),
        }

    @property
    def table_name(self) -> TableName:
        return TableName.value_of(self.identity)

    def with_families(self, *families: str) -> "TableSchema":
        """Return a new schema with ``families`` added to this one's."""
        return TableSchema(self.identity, self.families.union(families))

    def copy(self) -> "TableSchema":
        return TableSchema(self.identity, self.families)

    def missing_families(self, actual: "TableSchema") -> FrozenSet[str]:
        """Families declared here that ``actual`` does not carry."""
        return self.families - actual.families

    def __str__(self) -> str:
        families = ", ".join(sorted(self.families))
        return f"{self.identity}[{families}]"
