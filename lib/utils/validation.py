"""Validation helpers."""

def ensure(condition: bool, error: Exception) -> None:
    if not condition:
        raise error
