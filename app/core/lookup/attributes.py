# app/core/lookup/attributes.py
"""
ATTRIBUTES MODULE - The attribute spec mini-language

Purpose:
    1. Compile a spec string ("Name:name, Created:date-iso:createdAt") into rules
    2. Look up a rule's path inside an unmarshalled DynamoDB item
    3. Optionally reformat the value (DynamoDB has no date type, so dates
       arrive as strings or epoch numbers)

Grammar (one field per comma, tokens split by colon and trimmed):
    attribute                 → label = attribute, no parser
    label:attribute           → no parser
    label:parser:attribute    → parser is lower-cased
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from email.utils import parsedate_to_datetime
from typing import Any, List, Optional
from zoneinfo import ZoneInfo

from app.core.errors import AttributeSpecError

logger = logging.getLogger(__name__)


DATE_PARSERS = (
    "date-iso",
    "date-http",
    "date-rfc2822",
    "date-sql",
    "date-seconds",
    "date-millis",
)


@dataclass(frozen=True)
class AttributeRule:
    label: str
    path: str
    parser: Optional[str] = None


class _Missing:
    """Marks a path that does not exist in the record (different from None)."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "MISSING"


MISSING = _Missing()


# ============================================================================
# STEP 1: PARSE THE SPEC STRING
# ============================================================================


def parse_attribute_spec(spec: str) -> List[AttributeRule]:
    """
    Compile an attribute spec string into an ordered list of rules.

    Examples:
        "name"                      → [AttributeRule("name", "name", None)]
        "Name:user.name"            → [AttributeRule("Name", "user.name", None)]
        "Date:date-iso:createdAt"   → [AttributeRule("Date", "createdAt", "date-iso")]

    Raises:
        AttributeSpecError: a field has no tokens, more than three, or no path
    """
    if not spec or not spec.strip():
        return []

    rules = []
    for field in spec.split(","):
        tokens = [token.strip() for token in field.split(":")]

        if len(tokens) == 1:
            label, path, parser = tokens[0], tokens[0], None
        elif len(tokens) == 2:
            label, path, parser = tokens[0], tokens[1], None
        elif len(tokens) == 3:
            label, path, parser = tokens[0], tokens[2], tokens[1].lower()
        else:
            raise AttributeSpecError(
                spec, field, f"expected 1 to 3 ':' separated tokens, got {len(tokens)}"
            )

        if not path:
            raise AttributeSpecError(spec, field, "attribute path is empty")

        rules.append(AttributeRule(label=label, path=path, parser=parser or None))

    return rules


# ============================================================================
# STEP 2: RESOLVE A PATH INSIDE A RECORD
# ============================================================================

# user.name | items[0].id | meta["content-type"]
PATH_TOKEN = re.compile(r"\[(['\"])(.*?)\1\]|\[(\d+)\]|([^.\[\]]+)")


def _path_tokens(path: str) -> List[str]:
    tokens = []
    for quoted_quote, quoted, index, name in PATH_TOKEN.findall(path):
        if quoted_quote:
            tokens.append(quoted)
        else:
            tokens.append(index or name)
    return tokens


def resolve_path(record: Any, path: str) -> Any:
    """
    Get the value at a dotted/bracket path, or MISSING.

    A key that literally equals the whole path wins over traversal, so an
    attribute named "user.name" is found before record["user"]["name"].
    """
    if isinstance(record, dict) and path in record:
        return record[path]

    current = record
    for token in _path_tokens(path):
        if isinstance(current, dict):
            if token not in current:
                return MISSING
            current = current[token]
        elif isinstance(current, (list, tuple)):
            if not token.isdigit() or int(token) >= len(current):
                return MISSING
            current = current[int(token)]
        else:
            return MISSING

    return current


# ============================================================================
# STEP 3: REFORMAT VALUES
# ============================================================================


def get_timezone(name: str) -> tzinfo:
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def format_short_datetime(value: datetime, tz: tzinfo) -> str:
    """
    Short numeric date and time, e.g. "10/14/1983, 1:30 PM".

    Aware datetimes are shown in `tz`, naive ones are shown as they are.
    """
    if value.tzinfo is not None:
        value = value.astimezone(tz)

    hour = value.hour % 12 or 12
    meridiem = "AM" if value.hour < 12 else "PM"
    return f"{value.month}/{value.day}/{value.year}, {hour}:{value.minute:02d} {meridiem}"


def _parse_sql_date(value: str) -> datetime:
    """
    "2017-05-15", "2017-05-15 09:24:15", "2017-05-15 09:24:15.123 +05:00",
    "2017-05-15 09:24:15 America/New_York"
    """
    value = value.strip()
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        pass

    base, _, zone = value.rpartition(" ")
    parsed = datetime.fromisoformat(base)
    try:
        zone_info = datetime.strptime(zone, "%z").tzinfo
    except ValueError:
        try:
            zone_info = get_timezone(zone)
        except (KeyError, ValueError) as e:
            raise ValueError(f"Unknown SQL date zone: {zone}") from e
    return parsed.replace(tzinfo=zone_info)


def _to_datetime(
    value: Any, parser: str, tz: tzinfo, millis_as_seconds: bool
) -> datetime:
    if parser == "date-iso":
        return datetime.fromisoformat(value.strip())
    if parser in ("date-http", "date-rfc2822"):
        return parsedate_to_datetime(value.strip())
    if parser == "date-sql":
        return _parse_sql_date(value)
    if parser == "date-seconds":
        return datetime.fromtimestamp(float(value), tz=tz)

    # date-millis: historically read as seconds, kept unless explicitly turned off
    seconds = float(value) if millis_as_seconds else float(value) / 1000
    return datetime.fromtimestamp(seconds, tz=tz)


def parse_attribute(
    value: Any,
    parser: Optional[str],
    *,
    millis_as_seconds: bool = True,
    display_timezone: str = "UTC",
) -> Any:
    """
    Reformat a raw attribute value with the rule's parser.

    No parser (or one we don't know) returns the value untouched. A value the
    date parser can't read is also returned untouched.
    """
    if parser not in DATE_PARSERS:
        return value

    tz = get_timezone(display_timezone)
    try:
        parsed = _to_datetime(value, parser, tz, millis_as_seconds)
    except (ValueError, TypeError, AttributeError, OverflowError, OSError) as e:
        logger.debug(f"Could not parse {value!r} with {parser}: {e}")
        return value

    return format_short_datetime(parsed, tz)


def resolve_attribute(
    record: Any,
    rule: AttributeRule,
    *,
    millis_as_seconds: bool = True,
    display_timezone: str = "UTC",
) -> Any:
    """
    Path lookup + parser for one rule. Absent or null values are returned as
    they are and never reach a parser.
    """
    value = resolve_path(record, rule.path)
    if value is MISSING or value is None:
        return value

    return parse_attribute(
        value,
        rule.parser,
        millis_as_seconds=millis_as_seconds,
        display_timezone=display_timezone,
    )
