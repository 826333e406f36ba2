"""
ONKOFHIR Utilities Package - Cross-Cutting Helpers

Logging setup shared by services and batch jobs that embed the
reconciliation core.
"""

from .logging import (
    get_logger,
    get_session_id,
    setup_logging,
)

__all__ = [
    "get_logger",
    "get_session_id",
    "setup_logging",
]
