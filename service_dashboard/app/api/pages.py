"""HTML pages for the dashboard service.

The home page runs a dashboard search against this service's own proxy
routes (in-process, through ``httpx.ASGITransport``) and renders the result.
State lives only in the request, so overlapping searches cannot overwrite
each other.
"""

from pathlib import Path
from typing import Any, Dict, Optional

import httpx
import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from ..dashboard.orchestrator import DashboardError, DashboardOrchestrator
from ..dashboard.views import ALL_DIFFICULTIES, build_dashboard_view

logger = structlog.get_logger("dashboard_service.pages")

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter()


def _origin(request: Request) -> str:
    return str(request.base_url).rstrip("/")


def _base_context(request: Request, page: str) -> Dict[str, Any]:
    return {"page": page, "origin": _origin(request)}


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def home(
    request: Request,
    username: Optional[str] = Query(None, description="GFG username to analyze"),
    difficulty: str = Query(ALL_DIFFICULTIES, description="Problem list filter"),
):
    """Search form, and the analysis of ``username`` when one is given."""
    context = _base_context(request, "home")
    context.update({"username": username or "", "error": None, "view": None})

    if username is not None:
        transport = httpx.ASGITransport(app=request.app)
        async with httpx.AsyncClient(transport=transport, base_url=_origin(request)) as client:
            orchestrator = DashboardOrchestrator(
                client,
                metrics_collector=getattr(request.app.state, "metrics_collector", None),
            )
            try:
                result = await orchestrator.search(username)
            except DashboardError as e:
                context["error"] = e.message
            else:
                context["view"] = build_dashboard_view(result, _origin(request), difficulty)

    return templates.TemplateResponse(request, "home.html", context)


@router.get("/documentation", response_class=HTMLResponse, include_in_schema=False)
async def documentation(request: Request):
    return templates.TemplateResponse(request, "docs.html", _base_context(request, "docs"))


@router.get("/api-reference", response_class=HTMLResponse, include_in_schema=False)
async def api_reference(request: Request):
    return templates.TemplateResponse(request, "api.html", _base_context(request, "api"))
