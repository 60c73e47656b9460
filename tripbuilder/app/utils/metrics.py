"""Prometheus metrics for pricing, versioning and the sales funnel."""

from prometheus_client import Counter

itinerary_versions_total = Counter(
    "itinerary_versions_total",
    "Total itinerary versions created",
)

funnel_transitions_total = Counter(
    "funnel_transitions_total",
    "Total follow-up status transitions recorded",
    ["status"],
)

confirmations_total = Counter(
    "confirmations_total",
    "Booking confirmation attempts by outcome",
    ["outcome"],
)

catalog_misses_total = Counter(
    "catalog_misses_total",
    "Day-plan references skipped during pricing because the catalog item is gone",
    ["kind"],
)
