from datetime import datetime
from typing import Any, Dict, List

REQUIRED_STR_FIELDS = ["job_type"]
WHEN_FIELDS = ["run_at", "run_in"]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _valid_timestamp(v: str) -> bool:
    try:
        datetime.fromisoformat(v)
        return True
    except ValueError:
        return False


def validate_job_request(data: Dict[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.

    A request looks like:
        {"job_type": "send_invoice", "run_in": 3600, "args": [42]}
    or
        {"job_type": "send_invoice", "run_at": "2026-01-01T09:00:00"}
    """
    errors: List[str] = []

    if not isinstance(data, dict):
        return ["Request must be a JSON object"]

    for f in REQUIRED_STR_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    present = [f for f in WHEN_FIELDS if f in data]
    if not present:
        errors.append("One of 'run_at' or 'run_in' is required")
    elif len(present) > 1:
        errors.append("Only one of 'run_at' or 'run_in' may be given")

    if "run_at" in data:
        if not isinstance(data["run_at"], str) or not _valid_timestamp(data["run_at"]):
            errors.append("Field 'run_at' must be an ISO-8601 timestamp string")

    if "run_in" in data:
        value = data["run_in"]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            errors.append("Field 'run_in' must be a number of seconds")
        elif value < 0:
            errors.append("Field 'run_in' must not be negative")

    if "args" in data and not isinstance(data["args"], list):
        errors.append("Field 'args' must be a list if provided")

    return errors
