# app/core/lookup/executor.py
"""
EXECUTOR MODULE - Look up a batch of entities

Data Flow:
    entities → ensure_client() → create_query() per entity → DynamoDB (max N at once)
             → unmarshall() → Projector.project() → [{entity, data}, ...] (input order)

One failing query fails the whole batch: the caller gets a single StoreError
and no partial results.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence

from app.core.errors import StoreError
from app.core.lookup.connection import ConnectionManager, connection_manager
from app.core.lookup.projection import Projector
from app.core.lookup.query import create_query
from app.core.lookup.store import execute_statement, unmarshall
from app.core.schemas import Entity, LookupOptions

logger = logging.getLogger(__name__)

QUERY_ERROR_DETAIL = "Error running PartiQL query"


async def do_lookup(
    entities: Sequence[Entity],
    options: LookupOptions,
    manager: ConnectionManager = connection_manager,
) -> List[Dict[str, Any]]:
    """
    Run one PartiQL query per entity and project the returned items.

    Args:
        entities: Entities to look up, results come back in the same order
        options: Connection, query and projection settings
        manager: Holder of the shared DynamoDB client

    Returns:
        One {"entity": ..., "data": ...} dict per entity. `data` is None when
        DynamoDB returned no items for that entity.

    Raises:
        AttributeSpecError: An attribute spec string is malformed
        StoreError: Any query failed
    """
    if not entities:
        return []

    # Compile specs first so a bad config never reaches DynamoDB
    projector = Projector(options)
    client = manager.ensure_client(options)

    semaphore = asyncio.Semaphore(options.max_concurrent_queries)
    failures: List[BaseException] = []

    async def search(entity: Entity) -> Optional[Dict[str, Any]]:
        try:
            async with semaphore:
                # Queries still waiting for a slot are skipped once one has failed
                if failures:
                    return None

                query = create_query(entity, options)
                logger.debug(f"PartiQL query: {query}")
                items = await execute_statement(client, query)

            if not items:
                return {"entity": entity, "data": None}

            records = [unmarshall(item) for item in items]
            return {"entity": entity, "data": projector.project(records)}
        except Exception as e:
            failures.append(e)
            return None

    lookup_results = await asyncio.gather(*(search(entity) for entity in entities))

    if failures:
        lookup_error = failures[0]
        logger.error(f"do_lookup error: {lookup_error!r}")
        raise StoreError.from_exception(
            lookup_error, detail=QUERY_ERROR_DETAIL
        ) from lookup_error

    logger.debug(f"Lookup results: {lookup_results}")
    return list(lookup_results)
