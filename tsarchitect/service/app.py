"""FastAPI application exposing tsarchitect queries over HTTP."""

from __future__ import annotations

import asyncio
import os
import threading
from typing import Any, Callable, Optional, TypeVar

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .. import __version__
from ..orchestrator import Orchestrator, PathOutsideRootError

_T = TypeVar("_T")


class FileRequest(BaseModel):
    file_path: str


class ImplementationRequest(BaseModel):
    file_path: str
    name: str


class TextResponse(BaseModel):
    text: str


class RefreshResponse(BaseModel):
    status: str
    files: int


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator(os.environ.get("TSARCHITECT_ROOT", os.getcwd()))


async def _run_blocking(func: Callable[[], _T]) -> _T:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func)


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing tsarchitect operations."""

    app = FastAPI(title="tsarchitect", version=__version__)
    app.state.orchestrator = None
    creation_lock = threading.Lock()

    def _orchestrator() -> Orchestrator:
        # One long-lived instance: its snapshot is what the queries read.
        with creation_lock:
            if app.state.orchestrator is None:
                app.state.orchestrator = orchestrator_factory()
            return app.state.orchestrator

    async def get_orchestrator() -> Orchestrator:
        existing: Optional[Orchestrator] = app.state.orchestrator
        if existing is not None:
            return existing
        return await _run_blocking(_orchestrator)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/refresh", response_model=RefreshResponse)
    async def refresh(orchestrator: Orchestrator = Depends(get_orchestrator)) -> RefreshResponse:
        await _run_blocking(orchestrator.refresh)
        return RefreshResponse(status="ok", files=len(orchestrator.snapshot))

    @app.get("/repo-map", response_model=TextResponse)
    async def repo_map(orchestrator: Orchestrator = Depends(get_orchestrator)) -> TextResponse:
        def _run() -> str:
            orchestrator.refresh()
            return orchestrator.get_repo_map()

        return TextResponse(text=await _run_blocking(_run))

    @app.post("/deps", response_model=TextResponse)
    async def deps(
        payload: FileRequest, orchestrator: Orchestrator = Depends(get_orchestrator)
    ) -> TextResponse:
        text = await _run_blocking(lambda: orchestrator.get_deps(payload.file_path))
        return TextResponse(text=text)

    @app.post("/skeleton", response_model=TextResponse)
    async def skeleton(
        payload: FileRequest, orchestrator: Orchestrator = Depends(get_orchestrator)
    ) -> TextResponse:
        text = await _run_blocking(lambda: orchestrator.get_skeleton(payload.file_path))
        return TextResponse(text=text)

    @app.post("/implementation", response_model=TextResponse)
    async def implementation(
        payload: ImplementationRequest, orchestrator: Orchestrator = Depends(get_orchestrator)
    ) -> TextResponse:
        text = await _run_blocking(
            lambda: orchestrator.get_method_implementation(payload.file_path, payload.name)
        )
        return TextResponse(text=text)

    @app.post("/file", response_model=TextResponse)
    async def read_file(
        payload: FileRequest, orchestrator: Orchestrator = Depends(get_orchestrator)
    ) -> TextResponse:
        text = await _run_blocking(lambda: orchestrator.read_full_file(payload.file_path))
        return TextResponse(text=text)

    @app.exception_handler(PathOutsideRootError)
    async def path_outside_root_handler(_: Request, exc: PathOutsideRootError) -> JSONResponse:
        return JSONResponse(status_code=403, content={"detail": str(exc)})

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Request, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(
        _: Any, exc: RuntimeError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    root: str, host: str = "127.0.0.1", port: int = 8000, *, strict: bool | None = None
) -> None:  # pragma: no cover - integration path
    app = create_app(lambda: Orchestrator(root, strict=strict))
    uvicorn.run(app, host=host, port=port)
