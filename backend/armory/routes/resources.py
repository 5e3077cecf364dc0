"""
Armory API — Resource Route Handlers
======================================

What:  Builds the five CRUD routes for one resource.
How:   `build_resource_router` closes over a ResourceGateway. Each handler
       parses its inputs, awaits exactly one gateway call, and branches on
       the typed result. Missing records are raised as NotFoundError and
       rendered by the global handlers in main.py.

Route table (mounted at /api/<resource>):
    GET    /        → list_all()             200 [..]
    POST   /        → create(body)           201 {..}
    GET    /{id}    → get_by_id(id)          200 {..} | 404
    PUT    /{id}    → update(id, body)       200 {..} | 404
    DELETE /{id}    → delete_by_id(id)       204      | 404

Bodies may be JSON objects or form data (urlencoded or multipart); both are
decoded into one dict and validated by the resource's Pydantic schema.
"""

import json
import logging
import re
from typing import Any, Dict, List, Type

import pydantic
from fastapi import APIRouter, Request, Response, status

from armory.exceptions import MalformedRequestError, NotFoundError, ValidationError
from armory.schemas.common import INT32_MAX, INT32_MIN, ErrorResponse
from armory.services.gateway import ResourceGateway

logger = logging.getLogger(__name__)

FORM_CONTENT_TYPES = {"application/x-www-form-urlencoded", "multipart/form-data"}

_ID_PATTERN = re.compile(r"-?[0-9]+")


def parse_record_id(raw: str) -> int:
    """
    Parse a path id into an integer key.

    Raises MalformedRequestError for anything that is not a plain decimal
    integer inside the key column's range.
    """
    if not _ID_PATTERN.fullmatch(raw):
        raise MalformedRequestError(
            message=f"invalid id '{raw}': must be an integer",
            context={"raw_id": raw},
        )
    value = int(raw)
    if not INT32_MIN <= value <= INT32_MAX:
        raise MalformedRequestError(
            message=f"invalid id '{raw}': out of range",
            context={"raw_id": raw},
        )
    return value


async def read_field_map(request: Request) -> Dict[str, Any]:
    """
    Decode the request body into a string-keyed field map.

    Form bodies become a dict of their string values. Anything else is
    parsed as JSON and must be an object. An empty body is an empty map.
    """
    content_type = request.headers.get("content-type", "")
    media_type = content_type.split(";")[0].strip().lower()

    if media_type in FORM_CONTENT_TYPES:
        form = await request.form()
        fields: Dict[str, Any] = {}
        for key, value in form.items():
            if not isinstance(value, str):
                raise ValidationError(
                    message=f"{key}: file uploads are not accepted",
                    field=key,
                )
            fields[key] = value
        return fields

    body = await request.body()
    if not body.strip():
        return {}
    try:
        data = json.loads(body)
    except ValueError:
        raise MalformedRequestError(message="request body must be a JSON object or form data")
    if not isinstance(data, dict):
        raise MalformedRequestError(message="request body must be a JSON object")
    return data


def validate_fields(schema: Type[pydantic.BaseModel], data: Dict[str, Any]) -> pydantic.BaseModel:
    """Coerce a raw field map into the resource schema, or raise ValidationError."""
    try:
        return schema.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError(
            message=_format_errors(e),
            context={"schema": schema.__name__, "error_count": e.error_count()},
        )


def _format_errors(exc: pydantic.ValidationError) -> str:
    parts = []
    for error in exc.errors(include_url=False):
        location = ".".join(str(part) for part in error["loc"]) or "body"
        parts.append(f"{location}: {error['msg']}")
    return "; ".join(parts)


def build_resource_router(gateway: ResourceGateway) -> APIRouter:
    """
    Create the CRUD router for the gateway's resource.

    The gateway is passed in rather than looked up, so tests can mount a
    fake gateway and count its calls.
    """
    resource = gateway.resource
    read_schema = resource.read_schema
    singular = resource.singular

    router = APIRouter(
        prefix=resource.prefix,
        tags=[resource.tag],
        responses={
            500: {"description": "Storage unavailable", "model": ErrorResponse},
        },
    )

    @router.get(
        "",
        response_model=List[read_schema],
        summary=f"List all {resource.name}",
    )
    async def list_records():
        return await gateway.list_all()

    @router.post(
        "",
        response_model=read_schema,
        status_code=status.HTTP_201_CREATED,
        responses={
            400: {"description": "Malformed body", "model": ErrorResponse},
            422: {"description": "Invalid fields", "model": ErrorResponse},
        },
        summary=f"Create a {singular}",
    )
    async def create_record(request: Request):
        fields = validate_fields(resource.create_schema, await read_field_map(request))
        created = await gateway.create(fields)
        logger.info("Created %s %s", singular, created.id)
        return created

    @router.get(
        "/{record_id}",
        response_model=read_schema,
        responses={
            400: {"description": "Malformed id", "model": ErrorResponse},
            404: {"description": "Not found", "model": ErrorResponse},
        },
        summary=f"Get a {singular} by id",
    )
    async def get_record(record_id: str):
        key = parse_record_id(record_id)
        record = await gateway.get_by_id(key)
        if record is None:
            raise NotFoundError(resource=resource.name, resource_id=key)
        return record

    @router.put(
        "/{record_id}",
        response_model=read_schema,
        responses={
            400: {"description": "Malformed id or body", "model": ErrorResponse},
            404: {"description": "Not found", "model": ErrorResponse},
            422: {"description": "Invalid fields", "model": ErrorResponse},
        },
        summary=f"Update a {singular}",
    )
    async def update_record(record_id: str, request: Request):
        key = parse_record_id(record_id)
        fields = validate_fields(resource.update_schema, await read_field_map(request))
        record = await gateway.update(key, fields)
        if record is None:
            raise NotFoundError(resource=resource.name, resource_id=key)
        return record

    @router.delete(
        "/{record_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
        responses={
            400: {"description": "Malformed id", "model": ErrorResponse},
            404: {"description": "Not found", "model": ErrorResponse},
        },
        summary=f"Delete a {singular}",
    )
    async def delete_record(record_id: str):
        key = parse_record_id(record_id)
        if not await gateway.delete_by_id(key):
            raise NotFoundError(resource=resource.name, resource_id=key)
        logger.info("Deleted %s %s", singular, key)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
