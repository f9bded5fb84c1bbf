"""
HTTP binding - exposes the patch engine to tool-calling hosts.

    POST /mcp/apply_patch    {"patch": "..."}
    POST /mcp/rewrite_file   {"path": "...", "content": "..."}
    GET  /runtime
    POST /runtime            {"root_dir": "...", "tools_enabled": true}

Failures are answered with a 4xx status and an ``{"error": ...}`` body.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from .engine import EditResult, PatchEngine
from .runtime import RuntimeStore

logger = logging.getLogger(__name__)


class ApplyPatchRequest(BaseModel):
    patch: Any = None


class RewriteFileRequest(BaseModel):
    path: Any = None
    content: Any = None


class RuntimeUpdate(BaseModel):
    root_dir: Optional[str] = None
    tools_enabled: Optional[bool] = None


async def _json_body(request: Request) -> dict:
    """Decode the request body; anything but a JSON object counts as ``{}``."""
    raw = await request.body()
    try:
        data = json.loads(raw or b"{}")
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def _respond(result: EditResult) -> JSONResponse:
    return JSONResponse(result.to_dict(), status_code=200 if result.ok else 400)


def create_app(engine: PatchEngine, runtime: RuntimeStore | None = None) -> FastAPI:
    """Build the FastAPI app around *engine*.

    When *runtime* is given, its ``tools_enabled`` switch gates the patch
    endpoints and the ``/runtime`` endpoints read and update it.
    """
    app = FastAPI(title="patchbox")

    def _tools_disabled() -> JSONResponse | None:
        if runtime is not None and not runtime.get().tools_enabled:
            return JSONResponse({"error": "Patch tools are disabled"}, status_code=403)
        return None

    @app.post("/mcp/apply_patch")
    async def apply_patch(request: Request):
        disabled = _tools_disabled()
        if disabled is not None:
            return disabled
        body = ApplyPatchRequest.model_validate(await _json_body(request))
        result = await run_in_threadpool(engine.apply, body.patch)
        return _respond(result)

    @app.post("/mcp/rewrite_file")
    async def rewrite_file(request: Request):
        disabled = _tools_disabled()
        if disabled is not None:
            return disabled
        body = RewriteFileRequest.model_validate(await _json_body(request))
        result = await run_in_threadpool(engine.rewrite, body.path, body.content)
        return _respond(result)

    if runtime is not None:

        @app.get("/runtime")
        def get_runtime():
            state = runtime.get()
            return {"root_dir": state.root_dir, "tools_enabled": state.tools_enabled}

        @app.post("/runtime")
        def update_runtime(update: RuntimeUpdate):
            changes = update.model_dump(exclude_none=True)
            state = runtime.save(**changes) if changes else runtime.get()
            logger.info("[Runtime] Updated via HTTP: %s", changes)
            return {"root_dir": state.root_dir, "tools_enabled": state.tools_enabled}

    return app


def build_app_from_config(cfg) -> FastAPI:
    """Wire config -> runtime store -> engine -> app."""
    runtime = RuntimeStore.from_config(cfg)
    engine = PatchEngine.from_config(cfg, runtime.root_provider())
    return create_app(engine, runtime)
