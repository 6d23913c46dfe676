from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .catalog import build_registry
from .config import VERSION, Settings, configure_logging, load_settings
from .gate import ApproveListed, ConfirmationGate, InvocationRequest, deny_all
from .invocation import ToolInvoker
from .registry import ToolRegistry
from .tools.web import HttpTransport


AUTH_EXEMPT_PATHS = {"/api/health"}


class InvokeRequest(BaseModel):
    name: str = Field(min_length=1)
    args: dict[str, str] = Field(default_factory=dict)
    approved: bool = False


def create_app(settings: Settings | None = None, transport: HttpTransport | None = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)
    registry: ToolRegistry = build_registry(settings, transport=transport)

    app = FastAPI(title="toolgate", version=VERSION)

    @app.middleware("http")
    async def api_auth_guard(request: Request, call_next):  # type: ignore[no-untyped-def]
        path = request.url.path
        if settings.api_token and path.startswith("/api/") and path not in AUTH_EXEMPT_PATHS:
            token = request.headers.get("x-toolgate-token", "").strip()
            if token != settings.api_token:
                return JSONResponse(status_code=401, content={"detail": "Unauthorized: invalid API token"})
        return await call_next(request)

    @app.get("/api/health")
    def health() -> dict[str, object]:
        return {
            "ok": True,
            "version": VERSION,
            "tool_count": len(registry),
            "http_transport": settings.http_transport,
            "auth_required": bool(settings.api_token),
        }

    @app.get("/api/tools")
    def tools(category: str | None = None) -> dict[str, object]:
        rows = registry.definitions(category=category)
        return {"count": len(rows), "tools": rows}

    @app.post("/api/tools/invoke")
    def invoke(req: InvokeRequest) -> dict[str, object]:
        # The caller's approval flag is the host runtime's confirmation answer.
        channel = ApproveListed([req.name]) if req.approved else deny_all
        invoker = ToolInvoker(registry, ConfirmationGate(channel))
        result = invoker.invoke(InvocationRequest(name=req.name, args=dict(req.args)))
        return result.as_dict()

    return app


app = create_app()
