"""Tests for RuleTable.required_fields: queue fallback, key precedence, partitioning."""

from __future__ import annotations

import pytest

from turnstile.rules import CoreField, RequiredFields, RuleTable


def _table(raw: dict) -> RuleTable:
    return RuleTable.from_config(raw)


class TestNoTransition:
    @pytest.mark.parametrize("status", ["open", "resolved", "stalled"])
    def test_same_status_requires_nothing(self, status: str) -> None:
        table = _table({"*": {f"{status} -> {status}": ["Content"], f"* -> {status}": ["Content"]}})
        assert table.required_fields("*", status, status) == RequiredFields()

    def test_empty_from_requires_nothing(self) -> None:
        table = _table({"*": {"* -> resolved": ["Content"]}})
        assert not table.required_fields("*", "", "resolved")
        assert not table.required_fields("*", None, "resolved")

    def test_empty_to_requires_nothing(self) -> None:
        table = _table({"*": {"open -> *": ["Content"]}})
        assert not table.required_fields("*", "open", "")

    def test_empty_table_requires_nothing(self) -> None:
        assert not RuleTable().required_fields("Helpdesk", "open", "resolved")


class TestQueueFallback:
    def test_specific_queue_wins(self) -> None:
        table = _table({"Helpdesk": {"* -> resolved": ["TimeWorked"]}, "*": {"* -> resolved": ["Content"]}})
        assert table.required_fields("Helpdesk", "open", "resolved").core == (CoreField.TIME_WORKED,)

    def test_unknown_queue_uses_wildcard_verbatim(self) -> None:
        table = _table({"Helpdesk": {"* -> resolved": ["TimeWorked"]}, "*": {"* -> resolved": ["Content", "CF.Category"]}})
        result = table.required_fields("Support", "open", "resolved")
        assert result.core == (CoreField.CONTENT,)
        assert result.custom == ("Category",)
        assert table.transitions_for("Support") is table.transitions_for("*")

    @pytest.mark.parametrize("queue", [None, ""])
    def test_missing_queue_name_uses_wildcard(self, queue: str | None) -> None:
        table = _table({"*": {"* -> resolved": ["Content"]}})
        assert table.required_fields(queue, "open", "resolved").core == (CoreField.CONTENT,)

    def test_no_wildcard_queue_and_unknown_queue(self) -> None:
        table = _table({"Helpdesk": {"* -> resolved": ["Content"]}})
        assert not table.required_fields("Support", "open", "resolved")

    def test_queue_rules_do_not_merge_with_wildcard(self) -> None:
        """A queue with its own rules never consults '*' for missing transitions."""
        table = _table({"Helpdesk": {"* -> stalled": ["Content"]}, "*": {"* -> resolved": ["Content"]}})
        assert not table.required_fields("Helpdesk", "open", "resolved")


class TestTransitionPrecedence:
    def test_exact_beats_any_source(self) -> None:
        table = _table({"*": {"a -> b": ["Content"], "* -> b": ["TimeWorked"]}})
        assert table.required_fields("*", "a", "b").core == (CoreField.CONTENT,)

    def test_any_source_beats_any_destination(self) -> None:
        table = _table({"*": {"* -> b": ["TimeWorked"], "a -> *": ["Content"]}})
        assert table.required_fields("*", "a", "b").core == (CoreField.TIME_WORKED,)

    def test_any_destination_used_last(self) -> None:
        table = _table({"*": {"a -> *": ["Content"], "x -> b": ["TimeWorked"]}})
        assert table.required_fields("*", "a", "b").core == (CoreField.CONTENT,)

    def test_no_matching_key(self) -> None:
        table = _table({"*": {"x -> y": ["Content"]}})
        assert not table.required_fields("*", "a", "b")

    def test_present_empty_list_still_wins(self) -> None:
        table = _table({"*": {"a -> b": [], "* -> b": ["Content"]}})
        assert table.required_fields("*", "a", "b") == RequiredFields()

    def test_statuses_are_case_sensitive(self) -> None:
        table = _table({"*": {"open -> Resolved": ["Content"]}})
        assert not table.required_fields("*", "open", "resolved")
        assert table.required_fields("*", "open", "Resolved")

    def test_spacing_around_arrow_is_ignored(self) -> None:
        table = _table({"*": {"open->resolved": ["Content"]}})
        assert table.required_fields("*", "open", "resolved").core == (CoreField.CONTENT,)


class TestPartitioning:
    def test_core_and_custom_split_in_order(self) -> None:
        table = _table({"*": {"* -> resolved": ["CF.B", "TimeTaken", "CF.A", "Content"]}})
        result = table.required_fields("*", "open", "resolved")
        assert result.core == (CoreField.TIME_TAKEN, CoreField.CONTENT)
        assert result.custom == ("B", "A")

    def test_unsupported_core_fields_are_stripped(self) -> None:
        table = _table({"*": {"* -> resolved": ["Owner", "TimeWorked", "Priority"]}})
        result = table.required_fields("*", "open", "resolved")
        assert result.core == (CoreField.TIME_WORKED,)
        assert result.custom == ()

    def test_core_names_are_case_sensitive(self) -> None:
        table = _table({"*": {"* -> resolved": ["timeworked", "CONTENT"]}})
        assert not table.required_fields("*", "open", "resolved")

    @pytest.mark.parametrize("raw", ["CF.Resolution", "cf.Resolution", "Cf.Resolution"])
    def test_custom_prefix_any_case(self, raw: str) -> None:
        table = _table({"*": {"* -> resolved": [raw]}})
        result = table.required_fields("*", "open", "resolved")
        assert result.custom == ("Resolution",)
        assert result.core == ()

    def test_prefixed_core_name_is_custom(self) -> None:
        table = _table({"*": {"* -> resolved": ["CF.TimeWorked"]}})
        result = table.required_fields("*", "open", "resolved")
        assert result.core == ()
        assert result.custom == ("TimeWorked",)

    def test_duplicates_kept(self) -> None:
        table = _table({"*": {"* -> resolved": ["Content", "Content"]}})
        assert table.required_fields("*", "open", "resolved").core == (CoreField.CONTENT, CoreField.CONTENT)
