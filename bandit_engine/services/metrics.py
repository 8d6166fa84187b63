from prometheus_client import Counter, Histogram

from bandit_engine.config.settings import settings

bandit_select_counter = Counter(
    "bandit_select_total",
    "Count of arm selections",
    ["phase"],  # phase: cold|warm
)

bandit_reward_counter = Counter(
    "bandit_reward_total",
    "Count of recorded rewards",
    ["arm"],
)

bandit_error_counter = Counter(
    "bandit_errors_total",
    "Count of errors surfaced to callers",
    ["kind"],  # kind: invalid_arm|invalid_reward|storage
)

bandit_store_duration_histogram = Histogram(
    "bandit_store_duration_seconds",
    "Duration of state store calls in seconds",
    ["operation"],  # operation: snapshot|record|replace
    buckets=[0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
)


def record_select(phase: str) -> None:
    if settings.ENABLE_METRICS:
        bandit_select_counter.labels(phase=phase).inc()


def record_reward(arm: int) -> None:
    if settings.ENABLE_METRICS:
        bandit_reward_counter.labels(arm=str(arm)).inc()


def record_error(kind: str) -> None:
    if settings.ENABLE_METRICS:
        bandit_error_counter.labels(kind=kind).inc()


def observe_store_call(operation: str, seconds: float) -> None:
    if settings.ENABLE_METRICS:
        bandit_store_duration_histogram.labels(operation=operation).observe(seconds)
