# app/core/lookup/store.py
"""
Talking to DynamoDB: run one ExecuteStatement request and turn the typed
items ({"name": {"S": "Alice"}}) into plain dicts ({"name": "Alice"}).
"""

import asyncio
import base64
from typing import Any, Dict, List

from boto3.dynamodb.types import Binary, TypeDeserializer

_deserializer = TypeDeserializer()


def _json_safe(value: Any) -> Any:
    """Binary values (B, BS) become base64 text, at any depth."""
    if isinstance(value, Binary):
        return base64.b64encode(value.value).decode("ascii")
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, dict):
        return {key: _json_safe(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_json_safe(item) for item in value]
    if isinstance(value, set):
        return {_json_safe(item) for item in value}
    return value


def unmarshall(item: Dict[str, Any]) -> Dict[str, Any]:
    """
    Numbers come back as Decimal, string/number sets as Python sets and
    binary values as base64 strings.
    """
    return {
        key: _json_safe(_deserializer.deserialize(value)) for key, value in item.items()
    }


async def execute_statement(client, request: Dict[str, Any]) -> List[Dict[str, Any]]:
    # boto3 is blocking, keep it off the event loop
    response = await asyncio.to_thread(client.execute_statement, **request)
    return response.get("Items", [])
