# app/core/lookup/query.py
"""
QUERY MODULE - Turn one entity into one PartiQL request

Data Flow:
    entity.value → escape_entity_value() → query_parameter template → create_query()
"""

import logging
import re
from typing import Dict, Any

from app.core.schemas import Entity, LookupOptions

logger = logging.getLogger(__name__)

ENTITY_TOKEN = re.compile(r"{{entity}}")
NEWLINES = re.compile(r"\r\n|\n|\r")


def escape_entity_value(entity_value: str) -> str:
    """
    Make an entity value safe to embed in a single quoted statement fragment.

    Rules (in this order):
        1. Newlines (CR, LF, CRLF) are removed
        2. A backslash becomes two backslashes
        3. A single quote becomes a single backslash (not a doubled quote)

    Example:
        "O'Brien\\n" → "O\\Brien"
    """
    escaped_value = NEWLINES.sub("", entity_value)
    escaped_value = escaped_value.replace("\\", "\\\\")
    escaped_value = escaped_value.replace("'", "\\")

    logger.debug(f"Escaped entity value: {entity_value!r} -> {escaped_value!r}")
    return escaped_value


def create_query(entity: Entity, options: LookupOptions) -> Dict[str, Any]:
    """
    Build the ExecuteStatement request for a single entity.

    The statement is sent as configured; the entity only reaches DynamoDB
    through the single positional parameter.
    """
    escaped_value = escape_entity_value(entity.value)
    # A lambda keeps backslashes in the value from being read as group refs
    parameter = ENTITY_TOKEN.sub(lambda _: escaped_value, options.query_parameter)

    return {
        "Statement": options.query,
        "Parameters": [{"S": parameter}],
        "Limit": options.limit,
    }
