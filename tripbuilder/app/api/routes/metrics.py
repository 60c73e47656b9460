"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
def metrics() -> Response:
    """Prometheus metrics endpoint.

    Exposes all registered Prometheus metrics including:
    - itinerary_versions_total
    - funnel_transitions_total{status}
    - confirmations_total{outcome}
    - catalog_misses_total{kind}
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
