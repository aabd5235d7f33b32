from __future__ import annotations

import logging
import sqlite3
from collections.abc import AsyncIterator, Generator
from contextlib import asynccontextmanager
from typing import Any, List, Optional

from fastapi import Body, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field

from notepad.config import Config
from notepad.data.errors import (
    InsertFailed,
    InvalidColumn,
    ProviderError,
    ResourceNotFound,
    UnrecognizedResource,
    UnsupportedOperation,
    ValidationError,
)
from notepad.data.provider import NotePadProvider
from notepad.data.storage import DatabaseHelper

logger = logging.getLogger(__name__)

_EXPORT_CHUNK_SIZE = 8192

_ERROR_STATUS: tuple[tuple[type[Exception], int], ...] = (
    (UnrecognizedResource, 404),
    (ResourceNotFound, 404),
    (ValidationError, 400),
    (InvalidColumn, 400),
    (UnsupportedOperation, 405),
    (InsertFailed, 500),
    (sqlite3.IntegrityError, 409),
)


class InsertResult(BaseModel):
    path: str


class CountResult(BaseModel):
    count: int


class TypeResult(BaseModel):
    type: str


class UpdateRequest(BaseModel):
    values: dict[str, Any] = Field(default_factory=dict)
    selection: Optional[str] = None
    selection_args: List[Any] = Field(default_factory=list)


def create_app(
    provider: NotePadProvider | None = None, config: Config | None = None
) -> FastAPI:
    if provider is None:
        config = config or Config()
        provider = NotePadProvider(
            DatabaseHelper(config.db_path), untitled_title=config.untitled_title
        )

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        provider.close()

    app = FastAPI(title="Notepad API", lifespan=lifespan)
    app.state.provider = provider

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ProviderError)
    async def provider_error(_request: Request, exc: ProviderError) -> JSONResponse:
        return _error_response(exc)

    @app.exception_handler(sqlite3.Error)
    async def storage_error(_request: Request, exc: sqlite3.Error) -> JSONResponse:
        logger.warning("Storage error: %s", exc)
        return _error_response(exc)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/content/{path:path}")
    def query(
        path: str,
        projection: Optional[str] = Query(default=None),
        selection: Optional[str] = Query(default=None),
        selection_args: List[str] = Query(default=[]),
        sort_order: Optional[str] = Query(default=None),
    ) -> list[dict[str, Any]]:
        with provider.query(
            path,
            projection=_parse_projection(projection),
            selection=selection,
            selection_args=selection_args,
            sort_order=sort_order,
        ) as rows:
            return rows.to_dicts()

    @app.post("/content/{path:path}", response_model=InsertResult, status_code=201)
    def insert(path: str, values: dict[str, Any] = Body(default={})) -> InsertResult:
        return InsertResult(path=provider.insert(path, values))

    @app.put("/content/{path:path}", response_model=CountResult)
    def update(path: str, payload: UpdateRequest) -> CountResult:
        count = provider.update(
            path, payload.values, payload.selection, payload.selection_args
        )
        return CountResult(count=count)

    @app.delete("/content/{path:path}", response_model=CountResult)
    def delete(
        path: str,
        selection: Optional[str] = Query(default=None),
        selection_args: List[str] = Query(default=[]),
    ) -> CountResult:
        return CountResult(count=provider.delete(path, selection, selection_args))

    @app.get("/types/{path:path}", response_model=TypeResult)
    def get_type(path: str) -> TypeResult:
        return TypeResult(type=provider.get_type(path))

    @app.get("/export/{path:path}")
    def export(
        path: str, mime: str = Query(default="text/plain")
    ) -> StreamingResponse:
        stream = provider.open_note_stream(path, mime)

        def chunks() -> Generator[bytes, None, None]:
            try:
                while True:
                    data = stream.read(_EXPORT_CHUNK_SIZE)
                    if not data:
                        break
                    yield data
            finally:
                stream.close()

        return StreamingResponse(chunks(), media_type="text/plain; charset=utf-8")

    return app


def _error_response(exc: Exception) -> JSONResponse:
    status = 500
    for error_type, code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            status = code
            break
    return JSONResponse(status_code=status, content={"detail": str(exc)})


def _parse_projection(projection: Optional[str]) -> list[str] | None:
    if not projection:
        return None
    columns = [item.strip() for item in projection.split(",") if item.strip()]
    return columns or None
