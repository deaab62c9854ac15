"""JSON:API responses and error translation for FastAPI applications."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI
from pydantic import BaseModel
from starlette.requests import Request
from starlette.responses import JSONResponse

from jsonapi_core.core.builder import DocumentBuilder, ErrorBuilder
from jsonapi_core.core.document import ErrorDocument
from jsonapi_core.exceptions import InvalidCursorError

logger = logging.getLogger(__name__)

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"


class JsonApiResponse(JSONResponse):
    """``JSONResponse`` with the JSON:API media type; documents render without unset members."""

    media_type = JSONAPI_MEDIA_TYPE

    def render(self, content: Any) -> bytes:
        if isinstance(content, BaseModel):
            content = content.model_dump(mode="json", exclude_unset=True)
        return super().render(content)


def document_response(document: BaseModel, status_code: int | None = None) -> JsonApiResponse:
    """Wrap ``document``; error documents default to the status of their first error."""
    if status_code is None:
        status_code = 200
        if isinstance(document, ErrorDocument) and document.errors[0].status:
            status_code = int(document.errors[0].status)
    return JsonApiResponse(document, status_code=status_code)


async def _invalid_cursor(request: Request, exc: Exception) -> JsonApiResponse:
    logger.debug("Rejecting %s: %s", request.url.path, exc)
    error = ErrorBuilder().with_status(400).with_title("Invalid cursor").with_detail(str(exc)).parameter("page[cursor]")
    return document_response(DocumentBuilder.errors().error(error).build())


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InvalidCursorError, _invalid_cursor)
