"""Tests for schema compatibility verification."""

import copy
import threading

import pytest

from schemagate.lib.table_schema import TableSchema
from schemagate.lib.verifier import SchemaVerifier, VerificationResult, diagnose, verify_schemas

from tests.helpers import copy_schemas, create_schema


class TestEmptyInputs:
    """Absent and empty lists on either side."""

    def test_empty_expected_returns_true(self):
        """No expectation is satisfied by anything."""
        actual = [create_schema("table1", "table1_1")]
        assert verify_schemas(None, actual) is True
        assert verify_schemas([], actual) is True

    def test_empty_expected_and_empty_actual_returns_true(self):
        assert verify_schemas(None, None) is True
        assert verify_schemas([], []) is True
        assert verify_schemas([], None) is True

    def test_empty_actual_returns_false(self):
        """A non-empty expectation is never satisfied by nothing."""
        expected = [create_schema("table1", "table1_1")]
        assert verify_schemas(expected, None) is False
        assert verify_schemas(expected, []) is False

    def test_empty_actual_with_familyless_table_returns_false(self):
        expected = [create_schema("table3")]
        assert verify_schemas(expected, []) is False


class TestMatching:
    """Table and column family matching rules."""

    def test_exact_match(self, base_schemas):
        assert verify_schemas(base_schemas, copy_schemas(base_schemas)) is True

    def test_excessive_table_tolerated(self, base_schemas):
        actual = copy_schemas(base_schemas)
        actual.append(create_schema("table4", "table4_1"))
        assert verify_schemas(base_schemas, actual) is True

    def test_excessive_column_family_tolerated(self, base_schemas):
        actual = [schema.with_families("newCF") for schema in base_schemas]
        assert verify_schemas(base_schemas, actual) is True

    def test_partial_table_match_returns_false(self, base_schemas):
        expected = copy_schemas(base_schemas)
        expected.append(create_schema("table4", "table4_1"))
        assert verify_schemas(expected, base_schemas) is False

    def test_partial_column_family_match_returns_false(self, base_schemas):
        expected = [schema.with_families("newCF") for schema in base_schemas]
        assert verify_schemas(expected, base_schemas) is False

    def test_table_name_mismatch_returns_false(self):
        """Identical families do not help when the table name differs."""
        expected = [create_schema("table1", "CF1")]
        actual = [create_schema("table2", "CF1")]
        assert verify_schemas(expected, actual) is False

    def test_column_family_mismatch_returns_false(self):
        expected = [create_schema("table1", "CF1")]
        actual = [create_schema("table1", "CF2")]
        assert verify_schemas(expected, actual) is False

    def test_table_names_are_case_sensitive(self):
        expected = [create_schema("AgentInfo", "Info")]
        actual = [create_schema("agentinfo", "Info")]
        assert verify_schemas(expected, actual) is False

    def test_family_names_are_case_sensitive(self):
        expected = [create_schema("AgentInfo", "Info")]
        actual = [create_schema("AgentInfo", "info")]
        assert verify_schemas(expected, actual) is False

    def test_namespaces_distinguish_tables(self):
        expected = [create_schema("pinpoint:AgentInfo", "Info")]
        actual = [create_schema("AgentInfo", "Info")]
        assert verify_schemas(expected, actual) is False

    def test_expected_table_without_families_only_needs_the_table(self):
        expected = [create_schema("table3")]
        actual = [create_schema("table3", "anything")]
        assert verify_schemas(expected, actual) is True

    def test_order_does_not_matter(self, base_schemas):
        actual = list(reversed(copy_schemas(base_schemas)))
        assert verify_schemas(base_schemas, actual) is True
        assert verify_schemas(list(reversed(base_schemas)), base_schemas) is True

    def test_duplicate_actual_identity_last_one_wins(self):
        expected = [create_schema("table1", "CF1")]
        assert verify_schemas(expected, [create_schema("table1", "CF2"), create_schema("table1", "CF1")]) is True
        assert verify_schemas(expected, [create_schema("table1", "CF1"), create_schema("table1", "CF2")]) is False


class TestEndToEnd:
    """The scenario sequence from a typical deployment check."""

    def test_scenarios(self, base_schemas):
        actual = copy_schemas(base_schemas)
        assert verify_schemas(base_schemas, actual) is True

        with_extra_table = actual + [create_schema("table4", "table4_1")]
        assert verify_schemas(base_schemas, with_extra_table) is True

        expecting_extra_table = base_schemas + [create_schema("table4", "table4_1")]
        assert verify_schemas(expecting_extra_table, actual) is False

        actual_with_cf = [s.with_families("newCF") for s in actual]
        assert verify_schemas(base_schemas, actual_with_cf) is True

        expected_with_cf = [s.with_families("newCF") for s in base_schemas]
        assert verify_schemas(expected_with_cf, actual) is False


class TestPurity:
    """Verification never changes its inputs."""

    def test_inputs_unchanged(self, base_schemas):
        actual = copy_schemas(base_schemas) + [create_schema("table4", "table4_1")]
        expected_before = copy.deepcopy(base_schemas)
        actual_before = copy.deepcopy(actual)

        verify_schemas(base_schemas, actual)
        diagnose(base_schemas, actual)

        assert base_schemas == expected_before
        assert actual == actual_before

    def test_idempotent(self, base_schemas):
        expected = base_schemas + [create_schema("table4", "table4_1")]
        results = {verify_schemas(expected, base_schemas) for _ in range(5)}
        assert results == {False}

    def test_concurrent_calls_agree(self, base_schemas):
        actual = copy_schemas(base_schemas)
        failing = base_schemas + [create_schema("missing")]
        results = []
        lock = threading.Lock()

        def worker(expected, outcome):
            for _ in range(50):
                value = verify_schemas(expected, actual)
                with lock:
                    results.append(value == outcome)

        threads = [threading.Thread(target=worker, args=(base_schemas, True)) for _ in range(4)]
        threads += [threading.Thread(target=worker, args=(failing, False)) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results and all(results)


class TestDiagnose:
    """Diagnostic form collects every mismatch."""

    def test_compatible_result(self, base_schemas):
        result = diagnose(base_schemas, copy_schemas(base_schemas))
        assert result.compatible is True
        assert bool(result) is True
        assert result.missing_tables == ()
        assert result.missing_families == {}
        assert result.expected_count == 3
        assert result.actual_count == 3
        assert result.mismatch_count == 0

    def test_collects_all_missing_tables_and_families(self, base_schemas):
        expected = [s.with_families("newCF") for s in base_schemas]
        expected += [create_schema("table5"), create_schema("table4", "x")]

        result = diagnose(expected, base_schemas)

        assert result.compatible is False
        assert result.missing_tables == ("table4", "table5")
        assert result.missing_families == {
            "table1": frozenset({"newCF"}),
            "table2": frozenset({"newCF"}),
            "table3": frozenset({"newCF"}),
        }
        assert result.mismatch_count == 5

    def test_empty_expected(self):
        result = diagnose(None, [create_schema("t")])
        assert result.compatible is True
        assert result.actual_count == 1
        assert "nothing to verify" in result.summary()

    def test_empty_actual_lists_every_expected_table(self, base_schemas):
        result = diagnose(base_schemas, None)
        assert result.compatible is False
        assert result.missing_tables == ("table1", "table2", "table3")
        assert result.actual_count == 0
        assert result.summary() == "Store has no tables; expected 3"

    def test_reports_duplicate_actual_tables(self):
        actual = [create_schema("t1", "a"), create_schema("t1", "a"), create_schema("t2")]
        result = diagnose([create_schema("t1", "a")], actual)
        assert result.compatible is True
        assert result.duplicate_tables == ("t1",)

    @pytest.mark.parametrize(
        "expected, actual",
        [
            (None, None),
            ([], [TableSchema.of("t")]),
            ([TableSchema.of("t")], None),
            ([TableSchema.of("t", "a")], [TableSchema.of("t", "a", "b")]),
            ([TableSchema.of("t", "a", "c")], [TableSchema.of("t", "a", "b")]),
            ([TableSchema.of("t")], [TableSchema.of("u")]),
        ],
    )
    def test_agrees_with_verify_schemas(self, expected, actual):
        assert bool(diagnose(expected, actual)) == verify_schemas(expected, actual)

    def test_summary_names_missing_items(self):
        result = diagnose(
            [create_schema("TraceV2", "S"), create_schema("AgentInfo", "Info", "X")],
            [create_schema("AgentInfo", "Info")],
        )
        summary = result.summary()
        assert summary.startswith("Schema mismatch")
        assert "missing tables: TraceV2" in summary
        assert "AgentInfo[X]" in summary

    def test_to_dict_is_sorted_and_serializable(self):
        result = diagnose(
            [create_schema("b", "z", "y"), create_schema("a")],
            [create_schema("b")],
        )
        data = result.to_dict()
        assert data == {
            "compatible": False,
            "expected_count": 2,
            "actual_count": 1,
            "missing_tables": ["a"],
            "missing_families": {"b": ["y", "z"]},
            "duplicate_tables": [],
        }

    def test_results_are_hashable(self, base_schemas):
        """Equal results hash equal, so they can be deduplicated in sets."""
        actual = [create_schema("table1", "other")]
        first = diagnose(base_schemas, actual)
        second = diagnose(copy_schemas(base_schemas), copy_schemas(actual))

        assert first == second
        assert hash(first) == hash(second)
        assert len({first, second, diagnose(base_schemas, base_schemas)}) == 2

    def test_missing_families_is_read_only(self):
        result = diagnose([create_schema("t", "a")], [create_schema("t")])
        assert result.missing_families == {"t": frozenset({"a"})}
        with pytest.raises(TypeError):
            result.missing_families["t"] = frozenset()

    def test_missing_families_accepts_plain_sets(self):
        result = VerificationResult(compatible=False, missing_families={"t": {"a"}})
        assert result.missing_families["t"] == frozenset({"a"})
        hash(result)


class TestSchemaVerifier:
    """Class wrapper delegates to the module functions."""

    def test_verify_and_diagnose(self, base_schemas):
        verifier = SchemaVerifier()
        assert verifier.verify_schemas(base_schemas, base_schemas) is True
        result = verifier.diagnose(base_schemas, [])
        assert isinstance(result, VerificationResult)
        assert result.compatible is False
