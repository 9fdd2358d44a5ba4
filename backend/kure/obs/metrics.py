"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNTER = Counter(
	"kure_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"kure_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

GROUPS_CREATED = Counter(
	"kure_groups_created_total",
	"Community groups created",
)

GROUPS_DELETED = Counter(
	"kure_groups_deleted_total",
	"Community groups deleted with their memberships and posts",
)

MEMBERSHIP_MUTATIONS = Counter(
	"kure_membership_mutations_total",
	"Membership mutations by action and outcome",
	["action", "result"],
)

POSTS_CHANGED = Counter(
	"kure_group_posts_total",
	"Group posts added or removed",
	["action"],
)

VIEW_LATENCY = Histogram(
	"kure_view_duration_seconds",
	"Composed read view latency in seconds",
	["view"],
	buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

STORE_ERRORS = Counter(
	"kure_store_errors_total",
	"Backing store failures surfaced as internal errors",
	["operation"],
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_groups_created() -> None:
	GROUPS_CREATED.inc()


def inc_groups_deleted() -> None:
	GROUPS_DELETED.inc()


def inc_membership_mutation(action: str, result: str) -> None:
	MEMBERSHIP_MUTATIONS.labels(action=action, result=result).inc()


def inc_posts_changed(action: str) -> None:
	POSTS_CHANGED.labels(action=action).inc()


def observe_view(view: str, elapsed_seconds: float) -> None:
	VIEW_LATENCY.labels(view=view).observe(elapsed_seconds)


def inc_store_error(operation: str) -> None:
	STORE_ERRORS.labels(operation=operation).inc()
