"""Tests for the options schema -> form interpreter and serialization."""

from __future__ import annotations

import pytest

from analysis_mirror.core import FieldKind, FormModel, build_form, serialize
from analysis_mirror.exceptions import InvalidOptionValue


MULTI = {"id": "extras", "name": "Extras", "validValues": ["a", "b", "c"], "multipleValues": True}
SINGLE = {"id": "platform", "name": "Platform", "validValues": ["java_8", "android"],
          "defaultValue": "android"}
TOGGLE = {"id": "reflection", "name": "Reflection", "isBoolean": True, "defaultValue": "true"}
TEXT = {"id": "timeout", "name": "Timeout", "defaultValue": "90"}


class TestFieldKinds:
    """Kind and initial value resolution per schema entry."""

    def test_kinds(self) -> None:
        form = build_form([MULTI, SINGLE, TOGGLE, TEXT])
        kinds = [f.kind for f in form.fields]
        assert kinds == [
            FieldKind.MULTI_CHOICE, FieldKind.SINGLE_CHOICE, FieldKind.TOGGLE, FieldKind.TEXT,
        ]
        assert form.warnings == []

    def test_initial_values(self) -> None:
        form = build_form([MULTI, SINGLE, TOGGLE, TEXT])
        assert form.get("extras").value == []
        assert form.get("platform").value == "android"
        assert form.get("reflection").value is True
        assert form.get("timeout").value == "90"

    def test_multi_preselects_valid_default(self) -> None:
        form = build_form([dict(MULTI, defaultValue="b")])
        assert form.get("extras").value == ["b"]

    def test_single_invalid_default_falls_back_to_first_choice(self) -> None:
        form = build_form([dict(SINGLE, defaultValue="cobol")])
        assert form.get("platform").value == "java_8"

    def test_valid_values_win_over_boolean(self) -> None:
        form = build_form([dict(SINGLE, isBoolean=True)])
        assert form.get("platform").kind is FieldKind.SINGLE_CHOICE

    def test_empty_valid_values_is_free_form(self) -> None:
        form = build_form([{"id": "x", "validValues": []}])
        assert form.get("x").kind is FieldKind.TEXT
        assert form.get("x").value == ""

    def test_name_falls_back_to_id(self) -> None:
        form = build_form([{"id": "x"}])
        assert form.get("x").label == "x"


class TestMalformedSchema:
    """Bad entries are skipped with a warning; the form survives."""

    def test_bad_entries_skipped(self) -> None:
        form = build_form([TEXT, "junk", {"name": "no id"}, {"id": 3}])
        assert [f.option_id for f in form.fields] == ["timeout"]
        assert len(form.warnings) == 3

    def test_duplicate_ids_skipped(self) -> None:
        form = build_form([TEXT, dict(TEXT, defaultValue="10")])
        assert len(form) == 1
        assert form.get("timeout").value == "90"
        assert any("duplicate" in w for w in form.warnings)

    def test_non_list_schema(self) -> None:
        form = build_form({"id": "x"})
        assert len(form) == 0
        assert form.warnings

    def test_missing_schema(self) -> None:
        form = build_form(None)
        assert len(form) == 0
        assert form.warnings == []

    def test_non_list_valid_values_treated_as_free_form(self) -> None:
        form = build_form([{"id": "x", "validValues": "a,b"}])
        assert form.get("x").kind is FieldKind.TEXT


class TestEditing:
    """set_value and select."""

    def test_set_text_and_toggle(self) -> None:
        form = build_form([TOGGLE, TEXT])
        form.set_value("timeout", "120")
        form.set_value("reflection", "FALSE")
        assert form.get("timeout").value == "120"
        assert form.get("reflection").value is False

    def test_set_invalid_toggle(self) -> None:
        form = build_form([TOGGLE])
        with pytest.raises(InvalidOptionValue):
            form.set_value("reflection", "maybe")

    def test_set_single_choice_must_be_valid(self) -> None:
        form = build_form([SINGLE])
        form.set_value("platform", "java_8")
        with pytest.raises(InvalidOptionValue):
            form.set_value("platform", "cobol")

    def test_set_value_on_multi_rejected(self) -> None:
        form = build_form([MULTI])
        with pytest.raises(InvalidOptionValue):
            form.set_value("extras", "a")

    def test_select_rejects_unknown_values_and_kinds(self) -> None:
        form = build_form([MULTI, TEXT])
        with pytest.raises(InvalidOptionValue):
            form.select("extras", ["z"])
        with pytest.raises(InvalidOptionValue):
            form.select("timeout", ["a"])
        with pytest.raises(InvalidOptionValue):
            form.select("missing", ["a"])

    def test_select_dedupes_keeping_order(self) -> None:
        form = build_form([MULTI])
        form.select("extras", ["c", "a", "c"])
        assert form.get("extras").value == ["c", "a"]


class TestSerialize:
    """Form -> <id>=<value> list."""

    def test_multi_select_emits_one_entry_per_value(self) -> None:
        form = build_form([MULTI])
        form.select("extras", ["a", "c"])
        assert serialize(form) == ["extras=a", "extras=c"]

    def test_multi_select_follows_selection_order(self) -> None:
        form = build_form([MULTI])
        form.select("extras", ["c", "a"])
        assert serialize(form) == ["extras=c", "extras=a"]

    def test_all_kinds(self) -> None:
        form = build_form([MULTI, SINGLE, TOGGLE, TEXT])
        form.select("extras", ["b"])
        assert serialize(form) == [
            "extras=b", "platform=android", "reflection=true", "timeout=90",
        ]

    def test_empty_multi_emits_nothing(self) -> None:
        assert serialize(build_form([MULTI])) == []

    def test_single_without_choices_is_skipped_with_warning(self) -> None:
        form = build_form([{"id": "x", "validValues": [1, 2]}])
        assert form.get("x").kind is FieldKind.SINGLE_CHOICE
        assert serialize(form) == []
        assert any("x" in w for w in form.warnings)

    def test_empty_form(self) -> None:
        assert serialize(FormModel()) == []
