"""Health and readiness endpoints.

  /health (liveness): the process answers.  Always 200; ``status`` says
    whether the store behind it is reachable ("ok") or not ("degraded").

  /ready (readiness): 200 when the store answers a ping, 503 otherwise, so
    a load balancer stops routing here until the database is back.
"""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from credential_registry.api.dependencies import Registry

router = APIRouter(tags=["health"])


@router.get("/health")
def health(reg: Registry) -> dict:
    store_ok = reg.store.ping()
    return {
        "status": "ok" if store_ok else "degraded",
        "checks": {"store": "ok" if store_ok else "down"},
        "store": reg.store.kind,
    }


@router.get("/ready")
def ready(reg: Registry) -> Response:
    if not reg.store.ping():
        return Response(status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return Response(status_code=status.HTTP_200_OK)
