"""Schema -> editable form interpreter for analysis options.

An analysis profile ships an ``options`` schema that the client knows
nothing about in advance. ``build_form`` turns it into a ``FormModel``:
one ``FormField`` per understood entry, each tagged with a ``FieldKind``
resolved once from the entry:

    validValues non-empty, multipleValues  -> MULTI_CHOICE
    validValues non-empty                  -> SINGLE_CHOICE
    isBoolean                              -> TOGGLE
    otherwise                              -> TEXT

``serialize`` turns an edited form back into the flat ``<id>=<value>``
option list the service expects. A multi-select emits one entry per
selected value, so the wire format carries repeated keys.

Entries the client cannot interpret are reported in ``FormModel.warnings``
and excluded; one bad entry never fails the whole form.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Union

from analysis_mirror.exceptions import InvalidOptionValue
from analysis_mirror.remote.records import OptionDescriptor, parse_option

logger = logging.getLogger(__name__)

FieldValue = Union[str, bool, list[str], None]


# ---------------------------------------------------------------------------
# FieldKind and FormField
# ---------------------------------------------------------------------------


class FieldKind(Enum):
    """The input kind selected for an option."""

    SINGLE_CHOICE = "single_choice"
    MULTI_CHOICE = "multi_choice"
    TOGGLE = "toggle"
    TEXT = "text"


@dataclass
class FormField:
    """One editable option.

    The type of ``value`` depends on ``kind``: ``str | None`` for
    SINGLE_CHOICE, ``list[str]`` (in selection order) for MULTI_CHOICE,
    ``bool`` for TOGGLE and ``str`` for TEXT.
    """

    option_id: str
    label: str
    kind: FieldKind
    value: FieldValue
    choices: tuple[str, ...] = ()

    @classmethod
    def from_descriptor(cls, option: OptionDescriptor) -> FormField:
        """Resolve the field kind and initial value for a schema option."""
        default = option.default_value
        if option.enumerated:
            choices = option.valid_values
            if option.multiple_values:
                selected = [default] if default is not None and default in choices else []
                return cls(option.id, option.name, FieldKind.MULTI_CHOICE, selected, choices)
            if default is not None and default in choices:
                initial: str | None = default
            else:
                initial = choices[0] if choices else None
            return cls(option.id, option.name, FieldKind.SINGLE_CHOICE, initial, choices)
        if option.is_boolean:
            return cls(option.id, option.name, FieldKind.TOGGLE, default == "true")
        return cls(option.id, option.name, FieldKind.TEXT, default if default is not None else "")


# ---------------------------------------------------------------------------
# FormModel
# ---------------------------------------------------------------------------


@dataclass
class FormModel:
    """An editable set of option values built from a profile schema."""

    fields: list[FormField] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.fields)

    def get(self, option_id: str) -> FormField | None:
        for f in self.fields:
            if f.option_id == option_id:
                return f
        return None

    def _require(self, option_id: str) -> FormField:
        f = self.get(option_id)
        if f is None:
            raise InvalidOptionValue(f"Unknown option: {option_id}")
        return f

    def set_value(self, option_id: str, text: str) -> None:
        """Set a single-valued option from its textual form.

        Toggles accept ``true``/``false`` (case-insensitive); single choices
        must name one of the valid values.

        Raises:
            InvalidOptionValue: For unknown options, multi-select options,
                or values the option does not accept.
        """
        f = self._require(option_id)
        if f.kind is FieldKind.TEXT:
            f.value = text
        elif f.kind is FieldKind.TOGGLE:
            lowered = text.strip().lower()
            if lowered not in ("true", "false"):
                raise InvalidOptionValue(f"Option {option_id} expects true/false, got {text!r}")
            f.value = lowered == "true"
        elif f.kind is FieldKind.SINGLE_CHOICE:
            if text not in f.choices:
                raise InvalidOptionValue(
                    f"Option {option_id} expects one of {list(f.choices)}, got {text!r}"
                )
            f.value = text
        else:
            raise InvalidOptionValue(f"Option {option_id} is multi-valued, use select()")

    def select(self, option_id: str, values: Iterable[str]) -> None:
        """Replace a multi-select option's selection, keeping the given order.

        Raises:
            InvalidOptionValue: For unknown or non-multi options, or values
                outside the option's valid values.
        """
        f = self._require(option_id)
        if f.kind is not FieldKind.MULTI_CHOICE:
            raise InvalidOptionValue(f"Option {option_id} is not multi-valued")
        selected: list[str] = []
        for value in values:
            if value not in f.choices:
                raise InvalidOptionValue(
                    f"Option {option_id} expects values from {list(f.choices)}, got {value!r}"
                )
            if value not in selected:
                selected.append(value)
        f.value = selected


# ---------------------------------------------------------------------------
# Interpreter
# ---------------------------------------------------------------------------


def build_form(options_schema: Any) -> FormModel:
    """Interpret a profile's ``options`` schema.

    Args:
        options_schema: The raw ``options`` list (untrusted; anything that
            is not a list yields an empty form with a warning).

    Returns:
        A ``FormModel`` with one field per understood entry, in schema order.
    """
    form = FormModel()
    if options_schema is None:
        return form
    if not isinstance(options_schema, list):
        form.warnings.append(f"Options schema is not a list: {options_schema!r}")
        logger.warning("Options schema is not a list: %r", options_schema)
        return form
    for entry in options_schema:
        option = parse_option(entry)
        if option is None:
            form.warnings.append(f"Ignoring option: {entry!r}")
            continue
        if form.get(option.id) is not None:
            form.warnings.append(f"Ignoring duplicate option: {option.id}")
            logger.warning("Ignoring duplicate option id %s", option.id)
            continue
        form.fields.append(FormField.from_descriptor(option))
    return form


def serialize(form: FormModel) -> list[str]:
    """Flatten a form into ``<id>=<value>`` option strings.

    Fields that cannot produce a value (a single choice without any valid
    choice) are recorded in ``form.warnings`` and skipped.
    """
    options: list[str] = []
    for f in form.fields:
        prefix = f"{f.option_id}="
        if f.kind is FieldKind.MULTI_CHOICE and isinstance(f.value, list):
            options.extend(prefix + v for v in f.value)
        elif f.kind is FieldKind.TOGGLE and isinstance(f.value, bool):
            options.append(prefix + ("true" if f.value else "false"))
        elif f.kind in (FieldKind.SINGLE_CHOICE, FieldKind.TEXT) and isinstance(f.value, str):
            options.append(prefix + f.value)
        else:
            message = f"Ignoring option {f.option_id}: no value for {f.kind.value} field"
            if message not in form.warnings:
                form.warnings.append(message)
            logger.warning(message)
    logger.debug("Analysis options: %s", options)
    return options
