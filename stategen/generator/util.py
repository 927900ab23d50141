"""Name conversion helpers."""

import re

_WORD_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def to_snake_case(name: str) -> str:
    """Convert CamelCase to snake_case: MainState -> main_state."""
    return _WORD_BOUNDARY.sub("_", name).lower()
