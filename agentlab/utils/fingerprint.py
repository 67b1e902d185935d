"""Provenance fingerprinting for reproducible runs."""

import hashlib
from typing import Any

from .canonical import stable_stringify


def build_provenance_snapshot(task: Any, runner_id: str, config: Any) -> dict[str, Any]:
    """Build the snapshot that identifies a run configuration."""
    return {
        "task": task,
        "runner_id": runner_id,
        "config": config,
    }


def create_config_hash(snapshot: dict[str, Any]) -> str:
    """SHA-256 hex digest of the canonical form of ``snapshot``."""
    normalized = stable_stringify(snapshot)
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def create_run_fingerprint(snapshot: dict[str, Any]) -> str:
    """
    Fingerprint of a run.

    Identical to the config hash for now. Kept separate so that run-time only
    inputs can be folded in later without changing what the config hash means.
    """
    return create_config_hash(snapshot)
