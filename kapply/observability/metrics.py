"""Prometheus metrics for inventory pruning and status reads."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

grouping_decode_errors_total = Counter(
    "kapply_grouping_decode_errors_total",
    "Grouping records that failed to decode into an inventory",
)

prune_set_size = Histogram(
    "kapply_prune_set_size",
    "Number of identities in each computed prune set",
    buckets=(0, 1, 2, 5, 10, 25, 50, 100, 250, 500),
)

status_reads_total = Counter(
    "kapply_status_reads_total",
    "Single-object lookups by outcome",
    ["outcome"],  # ok | not_found | no_match | error
)

generated_resources_listed_total = Counter(
    "kapply_generated_resources_listed_total",
    "Generated resources returned by selector listings",
    ["kind"],
)
