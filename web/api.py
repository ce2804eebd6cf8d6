"""
IOC Pivot Web API
FastAPI backend exposing classification, resolution, the service catalog and
the search history. No endpoint opens a browser.
"""

from datetime import datetime, timezone
from typing import Literal, Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from ioc_pivot import __version__
from ioc_pivot.browser import RecordingBrowser
from ioc_pivot.classify import classify, suggestion_for
from ioc_pivot.context import LookupContext, open_context
from ioc_pivot.models import ARTIFACT_TYPES, is_artifact_type
from ioc_pivot.resolver import resolve_services


class ClassifyRequest(BaseModel):
    value: str


class ResolveRequest(BaseModel):
    type: str
    value: str
    enabled_only: Optional[bool] = True


def create_app(context: Optional[LookupContext] = None) -> FastAPI:
    app = FastAPI(
        title="IOC Pivot",
        description="Artifact classification and threat-intel lookup resolution",
        version=__version__,
    )
    state: dict[str, LookupContext] = {}
    if context is not None:
        state["ctx"] = context

    def get_context() -> LookupContext:
        # Built on first request.
        if "ctx" not in state:
            state["ctx"] = open_context(browser=RecordingBrowser())
        return state["ctx"]

    @app.get("/api/health")
    async def health():
        """Health check endpoint"""
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.post("/api/classify")
    async def classify_value(request: ClassifyRequest):
        outcome = classify(request.value)
        payload = outcome.to_dict()
        payload["suggestion"] = suggestion_for(request.value) if outcome.status == "invalid" else None
        return payload

    @app.post("/api/resolve")
    async def resolve_value(request: ResolveRequest):
        if not is_artifact_type(request.type):
            raise HTTPException(status_code=400, detail=f"Unknown type: {request.type}")
        ctx = get_context()
        pairs = resolve_services(
            ctx.catalog,
            request.type,  # type: ignore[arg-type]
            request.value,
            enabled_only=request.enabled_only is not False,
        )
        return {
            "type": request.type,
            "results": [{"service": s.id, "name": s.name, "url": url} for s, url in pairs],
            "urls": [url for _s, url in pairs],
        }

    @app.get("/api/services")
    async def list_services(category: Optional[str] = None):
        """List lookup services, grouped by category"""
        if category is not None and not is_artifact_type(category):
            raise HTTPException(status_code=400, detail=f"Unknown category: {category}")
        ctx = get_context()
        categories = [category] if category else list(ARTIFACT_TYPES)
        return {
            c: [s.to_dict() for s in ctx.catalog.all_services(c)]  # type: ignore[arg-type]
            for c in categories
        }

    @app.get("/api/services/stats")
    async def service_stats():
        return get_context().catalog.statistics()

    @app.post("/api/services/reset")
    async def reset_services():
        ctx = get_context()
        ctx.catalog.reset_to_defaults()
        return {"status": "ok"}

    @app.post("/api/services/{service_id}/toggle")
    async def toggle_service(service_id: str):
        updated = get_context().catalog.toggle(service_id)
        if updated is None:
            raise HTTPException(status_code=404, detail=f"Unknown service: {service_id}")
        return updated.to_dict()

    @app.get("/api/history")
    async def list_history(q: str = ""):
        records = get_context().history.search(q)
        return {"total": len(records), "records": [r.to_dict() for r in records]}

    @app.get("/api/history/stats")
    async def history_stats():
        return get_context().history.statistics()

    @app.get("/api/history/export")
    async def export_history(fmt: Literal["csv", "json"] = Query("csv", alias="format")):
        history = get_context().history
        if fmt == "csv":
            return PlainTextResponse(history.export_csv(), media_type="text/csv")
        content = history.export_json()
        if content is None:
            raise HTTPException(status_code=500, detail="Export failed")
        return PlainTextResponse(content, media_type="application/json")

    @app.delete("/api/history")
    async def clear_history():
        get_context().history.clear()
        return {"status": "ok"}

    @app.delete("/api/history/{record_id}")
    async def delete_record(record_id: str):
        if not get_context().history.delete_search(record_id):
            raise HTTPException(status_code=404, detail=f"Unknown record: {record_id}")
        return {"status": "ok"}

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8000)
