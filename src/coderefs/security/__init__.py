"""Path safety primitives."""

from .paths import PathBlockedError, normalize_result_path

__all__ = ["PathBlockedError", "normalize_result_path"]
