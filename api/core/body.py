"""
Request body parsing shared by the JSON/form routes.

Storefront pages post either JSON (fetch) or plain HTML forms
(`application/x-www-form-urlencoded` / `multipart/form-data`). Both are
validated with the same pydantic model, and failures surface as the usual
`RequestValidationError`.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def _form_to_dict(form: Any) -> dict[str, Any]:
    # Repeated keys (checkbox groups, `name=a&name=b`) become lists.
    data: dict[str, Any] = {}
    for key in form.keys():
        values = form.getlist(key)
        data[key] = values[0] if len(values) == 1 else values
    return data


async def read_body(request: Request) -> Any:
    content_type = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()
    if content_type in FORM_CONTENT_TYPES:
        return _form_to_dict(await request.form())

    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise RequestValidationError(
            [{"type": "json_invalid", "loc": ("body",), "msg": f"JSON decode error: {exc}", "input": None}]
        ) from exc


def parsed_body(model: type[ModelT]) -> Callable[[Request], Awaitable[ModelT]]:
    """
    Build a dependency that returns `model` parsed from a JSON or form body.
    """

    async def dependency(request: Request) -> ModelT:
        data = await read_body(request)
        try:
            return model.model_validate(data if data is not None else {})
        except ValidationError as exc:
            errors = [{**err, "loc": ("body", *err["loc"])} for err in exc.errors(include_url=False)]
            raise RequestValidationError(errors) from exc

    return dependency
