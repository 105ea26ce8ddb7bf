"""Shared helpers for query-variable-lib."""

from qv_common.api import QVError, configure_logging

__all__ = ["configure_logging", "QVError"]
