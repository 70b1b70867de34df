"""Monitoring configuration for the game engine."""
from prometheus_client import Counter, Histogram, start_http_server

# Session metrics
sessions_started = Counter(
    "spellclash_sessions_started_total",
    "Total number of game sessions started",
    ["mode"],
)

sessions_completed = Counter(
    "spellclash_sessions_completed_total",
    "Total number of game sessions finalized",
    ["mode"],
)

# Gameplay metrics
answers = Counter(
    "spellclash_answers_total",
    "Total number of answers and guesses processed",
    ["mode", "result"],
)

points_awarded = Counter(
    "spellclash_points_awarded_total",
    "Total number of points awarded to players",
    ["mode"],
)

answer_duration = Histogram(
    "spellclash_answer_duration_seconds",
    "Time between a practice word being shown and answered",
    buckets=[1, 2, 5, 10, 30, 60],
)

# Error metrics
cursor_conflicts = Counter(
    "spellclash_cursor_conflicts_total",
    "Total number of concurrent updates rejected on a cursor or game row",
)

error_count = Counter(
    "spellclash_errors_total",
    "Total number of errors reported to callers",
    ["error_type"],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
