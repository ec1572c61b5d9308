"""FastAPI server for VibeOS."""
from __future__ import annotations

from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from vibeos.audit import AuditLog, new_run_id
from vibeos.config import Config, get_config
from vibeos.engine import ReconciliationEngine
from vibeos.manifest import Manifest, ManifestError
from vibeos.models.anthropic import AnthropicClient
from vibeos.store import ManifestBusyError, ManifestStore

EngineFactory = Callable[[Config, str], ReconciliationEngine]


def default_engine_factory(config: Config, run_id: str) -> ReconciliationEngine:
    llm = AnthropicClient.from_config(config.llm)
    audit = AuditLog(config.run_dir(run_id) / "audit.jsonl")
    return ReconciliationEngine.from_llm(llm, config=config.crash_loop, audit=audit)


def _manifest_id(manifest: Manifest) -> str:
    return f"{manifest.metadata.name}@{manifest.metadata.version}"


def create_app(
    config: Optional[Config] = None,
    engine_factory: Optional[EngineFactory] = None,
    store: Optional[ManifestStore] = None,
) -> FastAPI:
    app = FastAPI(title="VibeOS")
    app.state.config = config or get_config()
    app.state.engine_factory = engine_factory or default_engine_factory
    app.state.store = store or ManifestStore()

    @app.get("/health")
    async def health():
        """Health check endpoint for monitoring."""
        return {"status": "healthy", "service": "vibeos"}

    @app.post("/api/manifests")
    async def create_manifest_api(payload: dict, request: Request):
        try:
            manifest = Manifest.from_dict(payload)
        except ManifestError as exc:
            return JSONResponse({"error": str(exc)}, status_code=422)
        manifest_id = _manifest_id(manifest)
        request.app.state.store.set_manifest(manifest_id, manifest)
        return {"ok": True, "id": manifest_id, "manifest": manifest.to_dict()}

    @app.get("/api/manifests")
    async def list_manifests_api(request: Request):
        store = request.app.state.store
        return {"manifests": store.list_manifests(), "count": store.manifest_count()}

    @app.get("/api/manifests/{manifest_id}")
    async def get_manifest_api(manifest_id: str, request: Request):
        manifest = request.app.state.store.get_manifest(manifest_id)
        if manifest is None:
            return JSONResponse({"error": "not found"}, status_code=404)
        return {"id": manifest_id, "manifest": manifest.to_dict()}

    @app.delete("/api/manifests/{manifest_id}")
    async def delete_manifest_api(manifest_id: str, request: Request):
        store = request.app.state.store
        if store.get_manifest(manifest_id) is None:
            return JSONResponse({"error": "not found"}, status_code=404)
        store.delete_manifest(manifest_id)
        return {"ok": True}

    @app.post("/api/manifests/{manifest_id}/reconcile")
    def reconcile_api(manifest_id: str, request: Request):
        store = request.app.state.store
        if store.get_manifest(manifest_id) is None:
            return JSONResponse({"error": "not found"}, status_code=404)
        run_id = new_run_id()
        try:
            with store.reserve(manifest_id) as manifest:
                engine = request.app.state.engine_factory(request.app.state.config, run_id)
                result = engine.reconcile(manifest)
                store.clear_loop_history(manifest_id)
                for entry in result.loop_history:
                    store.append_loop_result(manifest_id, entry)
        except ManifestBusyError as exc:
            return JSONResponse({"error": str(exc)}, status_code=409)
        return {"run_id": run_id, "result": result.to_dict(), "status": manifest.to_dict()["status"]}

    @app.get("/api/manifests/{manifest_id}/history")
    async def history_api(manifest_id: str, request: Request):
        store = request.app.state.store
        if store.get_manifest(manifest_id) is None:
            return JSONResponse({"error": "not found"}, status_code=404)
        return {"id": manifest_id, "history": [entry.to_dict() for entry in store.get_loop_history(manifest_id)]}

    return app


app = create_app()


def main():
    import uvicorn
    config = get_config()
    host = config.server.get("host", "127.0.0.1")
    port = int(config.server.get("port", 8093))
    uvicorn.run("vibeos.server:app", host=host, port=port, reload=False)


if __name__ == "__main__":
    main()
