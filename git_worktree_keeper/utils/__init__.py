"""Helpers shared by the CLI and discovery."""

from .threading import clamp_worker_count, get_python_threading_mode, get_threading_info, is_free_threading_enabled

__all__ = ["clamp_worker_count", "get_python_threading_mode", "get_threading_info", "is_free_threading_enabled"]
