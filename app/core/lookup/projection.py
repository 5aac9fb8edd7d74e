# app/core/lookup/projection.py
"""
PROJECTION MODULE - Shape unmarshalled items into summary tags + details

Data Flow:
    records → Projector.summary_tags() → ["Name: Alice", "Status: active"]
            → Projector.details()      → {"showAsJson": False, "results": [...]}

Rules are compiled from the options once per lookup call, so a broken spec
string fails before any query is sent.
"""

import base64
from decimal import Decimal
from typing import Any, Dict, List, Optional

from boto3.dynamodb.types import Binary

from app.core.lookup.attributes import (
    MISSING,
    AttributeRule,
    parse_attribute_spec,
    resolve_attribute,
)
from app.core.schemas import LookupOptions


def render_value(value: Any) -> str:
    """
    Text form of an attribute value for tags and titles.

    Examples:
        Decimal("42")        → "42"
        Decimal("1.50")      → "1.5"
        ["a", "b"]           → "a, b"
        True                 → "true"
    """
    if isinstance(value, str):
        return value
    if isinstance(value, Binary):
        value = value.value
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Decimal):
        return format(value.normalize(), "f")
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (set, frozenset)):
        return ", ".join(sorted(render_value(item) for item in value))
    if isinstance(value, (list, tuple)):
        return ", ".join(render_value(item) for item in value)
    return str(value)


def _tag(label: str, value: Any) -> str:
    if label:
        return f"{label}: {render_value(value)}"
    return render_value(value)


def result_count_tag(count: int) -> str:
    return f"{count} {'result' if count == 1 else 'results'}"


class Projector:
    """Compiled summary/detail/title rules for one lookup call."""

    def __init__(self, options: LookupOptions):
        self.summary_rules = parse_attribute_spec(options.summary_attributes)
        self.detail_rules = parse_attribute_spec(options.detail_attributes)
        self.title_rules = parse_attribute_spec(options.document_title_attribute)
        self.millis_as_seconds = options.millis_as_seconds
        self.display_timezone = options.display_timezone

    def _resolve(self, record: Dict[str, Any], rule: AttributeRule) -> Any:
        return resolve_attribute(
            record,
            rule,
            millis_as_seconds=self.millis_as_seconds,
            display_timezone=self.display_timezone,
        )

    def document_title(self, record: Dict[str, Any]) -> Optional[str]:
        """Only the first title rule is used. Missing value → no title."""
        if not self.title_rules:
            return None

        rule = self.title_rules[0]
        value = self._resolve(record, rule)
        if value is MISSING or value is None:
            return None
        return _tag(rule.label, value)

    def details(self, records: List[Dict[str, Any]]) -> Dict[str, Any]:
        # No detail attributes configured: hand the raw items to the JSON viewer
        if not self.detail_rules:
            return {"showAsJson": True, "results": records}

        documents = []
        for record in records:
            attributes = []
            for rule in self.detail_rules:
                value = self._resolve(record, rule)
                if value:
                    attributes.append({"key": rule.label, "value": value})

            # Records without a single usable attribute are left out
            if attributes:
                documents.append(
                    {"title": self.document_title(record), "attributes": attributes}
                )

        return {"showAsJson": False, "results": documents}

    def summary_tags(self, records: List[Dict[str, Any]]) -> List[str]:
        tags = []
        for rule in self.summary_rules:
            for record in records:
                value = self._resolve(record, rule)
                if value:
                    tags.append(_tag(rule.label, value))

        if not tags:
            tags.append(result_count_tag(len(records)))
        return tags

    def project(self, records: List[Dict[str, Any]]) -> Dict[str, Any]:
        return {
            "summary": self.summary_tags(records),
            "details": self.details(records),
        }
