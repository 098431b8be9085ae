"""Domain record merging — the ``config-domain`` data mapping.

A domain record maps a domain suffix to a payload string. The payload is
empty when no selector is attached, otherwise a YAML document holding the
selector under a single ``selector`` key::

    example.com: ""
    internal.example.com: |
      selector:
        app: internal

Payloads are compared byte-for-byte, so serialization must be stable:
keys are sorted and the emitter never folds long lines.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from io import StringIO
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

SELECTOR_FIELD = "selector"


class InvalidPayload(ValueError):
    """A stored payload could not be read back as a selector document."""


def _new_yaml() -> YAML:
    """Create a fresh safe YAML instance with block style output."""
    y = YAML(typ="safe", pure=True)
    y.default_flow_style = False
    y.width = 4096
    return y


@dataclass(frozen=True)
class MergeResult:
    """Outcome of a record mutation.

    Attributes:
        record: The full record after the mutation (a new dict).
        changed: False when the record is identical to the input and the
            caller must skip the write.
    """

    record: dict[str, str]
    changed: bool


def serialize_selector(selector: Mapping[str, str]) -> str:
    """Serialize a selector into the payload stored for a domain."""
    if not selector:
        return ""
    doc = {SELECTOR_FIELD: {k: selector[k] for k in sorted(selector)}}
    buf = StringIO()
    _new_yaml().dump(doc, buf)
    return buf.getvalue()


def parse_payload(payload: str) -> dict[str, str]:
    """Read the selector back out of a stored payload.

    An empty (or whitespace-only) payload means no selector.

    Raises:
        InvalidPayload: the payload is not a mapping with a ``selector``
            mapping inside.
    """
    if not payload.strip():
        return {}
    try:
        doc: Any = _new_yaml().load(payload)
    except YAMLError as exc:
        msg = f"invalid domain payload: {exc}"
        raise InvalidPayload(msg) from exc
    if doc is None:
        return {}
    if not isinstance(doc, dict):
        msg = f"invalid domain payload: expected a mapping, got {type(doc).__name__}"
        raise InvalidPayload(msg)
    selector = doc.get(SELECTOR_FIELD) or {}
    if not isinstance(selector, dict):
        msg = f"invalid domain payload: {SELECTOR_FIELD!r} must be a mapping"
        raise InvalidPayload(msg)
    return {str(k): str(v) for k, v in selector.items()}


def merge_domain(
    record: Mapping[str, str],
    domain: str,
    selector: Mapping[str, str],
) -> MergeResult:
    """Set *domain* to the payload computed from *selector*.

    The key is inserted when absent and overwritten when its payload
    differs. An identical payload leaves the record untouched and reports
    ``changed=False``. Other keys are never modified.
    """
    payload = serialize_selector(selector)
    current = record.get(domain)
    if current is not None and current == payload:
        return MergeResult(record=dict(record), changed=False)

    merged = dict(record)
    merged[domain] = payload
    return MergeResult(record=merged, changed=True)


def remove_domain(record: Mapping[str, str], domain: str) -> MergeResult:
    """Drop *domain* from the record if present."""
    if domain not in record:
        return MergeResult(record=dict(record), changed=False)
    remaining = {k: v for k, v in record.items() if k != domain}
    return MergeResult(record=remaining, changed=True)
