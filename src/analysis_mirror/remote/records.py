"""Typed records parsed from untrusted server JSON.

Every payload coming back from the analysis service passes through this
module before it reaches the cache or the schema interpreters. Parsing is
tolerant: a record that cannot be understood is skipped with a warning
(``None`` is returned) instead of aborting the surrounding operation,
because schemas and listings are externally controlled.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Listing convention
# ---------------------------------------------------------------------------


def unwrap_results(payload: Any) -> list[dict[str, Any]]:
    """Return the flat records under a response's top-level ``results`` field.

    Args:
        payload: Parsed JSON response (any shape).

    Returns:
        The mapping records, in server order. Non-mapping entries are
        skipped; a missing or malformed ``results`` field yields ``[]``.
    """
    if not isinstance(payload, Mapping):
        return []
    results = payload.get("results")
    if not isinstance(results, list):
        return []
    records: list[dict[str, Any]] = []
    for item in results:
        if isinstance(item, Mapping):
            records.append(dict(item))
        else:
            logger.warning("Skipping non-record result entry: %r", item)
    return records


def _str_field(record: Mapping[str, Any], key: str) -> str | None:
    value = record.get(key)
    return value if isinstance(value, str) and value else None


def _list_field(record: Mapping[str, Any], key: str) -> list[Any]:
    value = record.get(key)
    return list(value) if isinstance(value, list) else []


# ---------------------------------------------------------------------------
# Hierarchy records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProjectRecord:
    """A project returned by ``list_projects``."""

    name: str


@dataclass(frozen=True)
class SnapshotRecord:
    """A code snapshot returned by ``list_snapshots``."""

    name: str


@dataclass(frozen=True)
class ConfiguredAnalysis:
    """An analysis listed in a snapshot's configuration.

    Attributes:
        display_name: Label shown in the hierarchy tree.
        run_id: Low-level server identifier used to fetch outputs.
        profile_id: Identifier of the profile (schema) the run used.
    """

    display_name: str
    run_id: str | None = None
    profile_id: str | None = None


def parse_project(record: Mapping[str, Any]) -> ProjectRecord | None:
    """Parse a project listing record (requires ``name``)."""
    name = _str_field(record, "name")
    if name is None:
        logger.warning("Skipping project record without a name: %r", record)
        return None
    return ProjectRecord(name=name)


def parse_snapshot(record: Mapping[str, Any]) -> SnapshotRecord | None:
    """Parse a snapshot listing record (requires ``displayName``)."""
    name = _str_field(record, "displayName")
    if name is None:
        logger.warning("Skipping snapshot record without a displayName: %r", record)
        return None
    return SnapshotRecord(name=name)


def parse_configured_analyses(payload: Any) -> list[ConfiguredAnalysis]:
    """Parse the ``analyses`` list of a snapshot configuration document.

    Args:
        payload: Response of ``get_configuration`` (may be ``None``).

    Returns:
        Analyses with a ``displayName``, in server order.
    """
    if not isinstance(payload, Mapping):
        return []
    analyses: list[ConfiguredAnalysis] = []
    for item in _list_field(payload, "analyses"):
        if not isinstance(item, Mapping):
            logger.warning("Skipping malformed analysis entry: %r", item)
            continue
        display_name = _str_field(item, "displayName")
        if display_name is None:
            logger.warning("Skipping analysis entry without a displayName: %r", item)
            continue
        analyses.append(ConfiguredAnalysis(
            display_name=display_name,
            run_id=_str_field(item, "id"),
            profile_id=_str_field(item, "profile"),
        ))
    return analyses


# ---------------------------------------------------------------------------
# Schema records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OptionDescriptor:
    """One entry of a profile's ``options`` schema.

    Attributes:
        id: Option key used when serializing (``<id>=<value>``).
        name: Human-readable label.
        default_value: Server-declared default, if a string.
        valid_values: Enumerated string values (empty when free-form).
        enumerated: True when the server declared a non-empty
            ``validValues`` list, even if none of its entries were strings.
        is_boolean: True for on/off options.
        multiple_values: True when several valid values may be chosen.
    """

    id: str
    name: str
    default_value: str | None = None
    valid_values: tuple[str, ...] = ()
    enumerated: bool = False
    is_boolean: bool = False
    multiple_values: bool = False


@dataclass(frozen=True)
class OutputAttributeDescriptor:
    """One column of an output dataset."""

    id: str
    display_name: str


@dataclass(frozen=True)
class ProfileDescriptor:
    """An analysis profile: the schema document describing one analysis type.

    The raw document is kept verbatim; ``options`` and ``outputs`` are the
    untrusted lists handed to the schema interpreters.
    """

    id: str
    display_name: str
    options: list[Any] = field(default_factory=list)
    outputs: list[Any] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict)


def parse_profile(record: Mapping[str, Any]) -> ProfileDescriptor | None:
    """Parse a ``get_project_analyses`` record into a profile descriptor.

    Requires both ``displayName`` and ``id`` (the profile id).
    """
    display_name = _str_field(record, "displayName")
    profile_id = _str_field(record, "id")
    if display_name is None or profile_id is None:
        logger.warning("Skipping analysis profile without displayName/id: %r", record)
        return None
    return ProfileDescriptor(
        id=profile_id,
        display_name=display_name,
        options=_list_field(record, "options"),
        outputs=_list_field(record, "outputs"),
        raw=dict(record),
    )


def parse_option(entry: Any) -> OptionDescriptor | None:
    """Parse one option schema entry; ``None`` when ``id`` is unusable."""
    if not isinstance(entry, Mapping):
        logger.warning("Ignoring non-mapping option entry: %r", entry)
        return None
    option_id = _str_field(entry, "id")
    if option_id is None:
        logger.warning("Ignoring option without a valid id: %r", entry)
        return None
    name = _str_field(entry, "name") or option_id
    default = entry.get("defaultValue")
    raw_values = entry.get("validValues")
    if raw_values is not None and not isinstance(raw_values, list):
        logger.warning("Option %s has non-list validValues, treating as free-form", option_id)
        raw_values = None
    return OptionDescriptor(
        id=option_id,
        name=name,
        default_value=default if isinstance(default, str) else None,
        valid_values=tuple(v for v in (raw_values or []) if isinstance(v, str)),
        enumerated=bool(raw_values),
        is_boolean=entry.get("isBoolean") is True,
        multiple_values=entry.get("multipleValues") is True,
    )


def parse_attribute(entry: Any) -> OutputAttributeDescriptor | None:
    """Parse an output attribute; both ``id`` and ``displayName`` are required."""
    if not isinstance(entry, Mapping):
        return None
    attribute_id = _str_field(entry, "id")
    display_name = _str_field(entry, "displayName")
    if attribute_id is None or display_name is None:
        logger.warning("Skipping output attribute without id/displayName: %r", entry)
        return None
    return OutputAttributeDescriptor(id=attribute_id, display_name=display_name)
