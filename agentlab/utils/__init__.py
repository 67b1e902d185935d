"""Shared utilities."""

from .canonical import stable_stringify
from .fingerprint import (
    build_provenance_snapshot,
    create_config_hash,
    create_run_fingerprint,
)
from .logger import clear_run_context, get_logger, set_run_context
from .paths import SourceRef, ValueArena, get_by_path, parse_source, set_by_path

__all__ = [
    "get_logger",
    "set_run_context",
    "clear_run_context",
    "stable_stringify",
    "build_provenance_snapshot",
    "create_config_hash",
    "create_run_fingerprint",
    "SourceRef",
    "ValueArena",
    "parse_source",
    "get_by_path",
    "set_by_path",
]
