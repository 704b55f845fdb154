"""Exit codes used by the aggfetch CLI."""

VALIDATION_EXIT_CODE = 2
INIT_EXIT_CODE = 3

__all__ = ["INIT_EXIT_CODE", "VALIDATION_EXIT_CODE"]
