from typing import Any


STATUSES = ("OK", "KO", "MISSING", "EMPTY")


def status_from_metrics(available: bool, metrics: dict[str, Any], alpha: float) -> str:
    if not available:
        return "MISSING"
    if float(metrics.get("reference_entries", 0)) <= 0 and float(metrics.get("candidate_entries", 0)) <= 0:
        return "EMPTY"
    if metrics.get("identical"):
        return "OK"
    p_value = metrics.get("p_value")
    if p_value is None:
        # Only one side is filled: the distributions cannot agree.
        return "KO"
    return "OK" if float(p_value) >= float(alpha) else "KO"


def summarize(statuses: dict[str, str]) -> dict[str, int]:
    counts = {status: 0 for status in STATUSES}
    for status in statuses.values():
        if status not in counts:
            raise ValueError(f"Unknown comparison status '{status}'.")
        counts[status] += 1
    return counts


def comparison_passed(summary: dict[str, int]) -> bool:
    return summary.get("KO", 0) == 0 and summary.get("MISSING", 0) == 0
