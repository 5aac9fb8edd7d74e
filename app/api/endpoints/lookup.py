from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError

from app.core import schemas
from app.core.config import settings
from app.core.errors import AttributeSpecError, StoreError
from app.core.lookup.connection import ConnectionManager, connection_manager
from app.core.lookup.executor import do_lookup

router = APIRouter(tags=["Lookup"])


def get_default_options() -> schemas.LookupOptions:
    return schemas.LookupOptions.from_settings(settings)


def get_connection_manager() -> ConnectionManager:
    return connection_manager


options_dep = Annotated[schemas.LookupOptions, Depends(get_default_options)]
manager_dep = Annotated[ConnectionManager, Depends(get_connection_manager)]


@router.post("/lookup", status_code=status.HTTP_200_OK)
async def lookup_entities(
    payload: schemas.LookupRequest,
    default_options: options_dep,
    manager: manager_dep,
):
    """
    Look up every entity in DynamoDB.
    Options in the body override the configured defaults for this call only.
    """
    try:
        options = default_options.merged(payload.options)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
            detail=e.errors(include_url=False, include_context=False),
        )

    try:
        return await do_lookup(payload.entities, options, manager=manager)
    except AttributeSpecError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=e.to_dict())
