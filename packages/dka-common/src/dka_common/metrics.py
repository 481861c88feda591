"""
Prometheus metrics for the DKA audit API.

Shared metric definitions exposed on ``/metrics``: audit-record
creation and amendment outcomes, deprivation lookup outcomes and
request latency.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

audit_records_created_total = Counter(
    "audit_records_created_total",
    "Audit records created by successful calculate submissions",
    ["episode_type"],
)
audit_updates_total = Counter(
    "audit_updates_total",
    "Update submissions by identity-gate outcome",
    ["outcome"],
)
deprivation_lookups_total = Counter(
    "deprivation_lookups_total",
    "Postcode deprivation lookups by outcome",
    ["outcome"],
)
api_request_duration_seconds = Histogram(
    "api_request_duration_seconds",
    "API request latency in seconds",
    ["method", "endpoint"],
)
