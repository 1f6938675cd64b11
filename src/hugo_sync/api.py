from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

from fastapi import FastAPI, HTTPException

from .config import AppConfig, load_config
from .core import SyncService
from .host import LocalVaultHost
from .schemas import (
    ConvertRequest,
    ConvertResponse,
    ImageInstruction,
    SyncedDocument,
    SyncRequest,
    SyncResponse,
    SyncSummary,
)
from .settings import Settings, get_settings

T = TypeVar("T")


async def run_sync(func: Callable[..., T], /, *args: Any, **kwargs: Any) -> T:
    """Execute *func* in a worker thread and return the result."""

    return await asyncio.to_thread(func, *args, **kwargs)


def create_app(config: AppConfig | None = None, *, require_enabled: bool = True) -> FastAPI:
    config = config or _prepare_config(get_settings())
    if require_enabled and not config.runtime.enable_local_api:
        raise RuntimeError("Local API is disabled. Enable it via config.runtime.enable_local_api")
    app = FastAPI(title="Hugo Sync", version="0.1.0")
    app.state.config = config

    @app.get("/health", summary="Health check")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/convert", summary="Convert note text without writing")
    async def convert(request: ConvertRequest) -> ConvertResponse:
        service = SyncService(config, LocalVaultHost(config.vault.path))
        result = await run_sync(
            service.transformer.convert,
            request.content,
            request.file_name,
            document_path=request.document_path,
        )
        return ConvertResponse(
            text=result.text,
            tags=list(result.tags),
            images=[
                ImageInstruction(
                    source=str(image.source),
                    destination=str(image.destination),
                    name=image.name,
                )
                for image in result.images
            ],
            warnings=list(result.warnings),
        )

    @app.post("/sync", summary="Sync vault notes into the Hugo tree")
    async def sync(request: SyncRequest) -> SyncResponse:
        if not request.paths:
            raise HTTPException(status_code=400, detail="NO_PATHS")
        host = LocalVaultHost(config.vault.path, selected=[Path(path) for path in request.paths])
        service = SyncService(config, host)
        batch_result = await run_sync(service.sync_selected)
        summary = batch_result.summary
        return SyncResponse(
            results=[
                SyncedDocument(
                    name=item.document.name,
                    output_path=str(item.output_path),
                    copied=[str(path) for path in item.copied],
                    skipped=[str(path) for path in item.skipped],
                    warnings=item.warnings,
                )
                for item in batch_result.runs
            ],
            summary=SyncSummary(
                total=summary.total,
                successes=summary.successes,
                failures=summary.failures,
                warnings=summary.warnings,
            ),
            errors=batch_result.errors,
            message=batch_result.message,
        )

    return app


def _prepare_config(settings: Settings) -> AppConfig:
    config = load_config(settings.config_path)
    if settings.enable_local_api is not None:
        config.runtime.enable_local_api = settings.enable_local_api
    return config


__all__ = ["create_app", "run_sync"]
