"""API routes for the dashboard service.

Each route hands the raw username to ``BackendProxy.forward`` together with
the route definition; validation, forwarding and response mapping all live
in the proxy.
"""

from typing import Dict, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response

from ..proxy.forwarder import BackendProxy, ProxyRoute

router = APIRouter()


def get_backend_proxy(request: Request) -> BackendProxy:
    """Get backend proxy from application state."""
    return request.app.state.backend_proxy


def get_proxy_routes(request: Request) -> Dict[str, ProxyRoute]:
    """Get the proxy route table from application state."""
    return request.app.state.proxy_routes


@router.get("/problems/{username}", tags=["Proxy"])
async def get_problems(
    username: str,
    proxy: BackendProxy = Depends(get_backend_proxy),
    routes: Dict[str, ProxyRoute] = Depends(get_proxy_routes),
) -> Response:
    """Solved problems grouped by difficulty, with links."""
    return await proxy.forward(routes["problems"], username)


@router.get("/stats/{username}", tags=["Proxy"])
async def get_stats(
    username: str,
    request: Request,
    response_format: Optional[str] = Query(
        None, alias="format", description='Response format: "json" or "svg"'
    ),
    proxy: BackendProxy = Depends(get_backend_proxy),
    routes: Dict[str, ProxyRoute] = Depends(get_proxy_routes),
) -> Response:
    """Problem counts per difficulty as JSON, or an embeddable SVG card."""
    # The whole query string goes to the backend; ``format`` is declared for the docs.
    return await proxy.forward(routes["stats"], username, request.url.query)


@router.get("/profile/{username}", tags=["Proxy"])
async def get_profile(
    username: str,
    proxy: BackendProxy = Depends(get_backend_proxy),
    routes: Dict[str, ProxyRoute] = Depends(get_proxy_routes),
) -> Response:
    """Profile summary: coding score, rank, articles and streaks."""
    return await proxy.forward(routes["profile"], username)
