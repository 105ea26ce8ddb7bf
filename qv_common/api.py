"""Public API surface for qv_common."""

from qv_common.errors import QVError, error_to_payload, wrap_error
from qv_common.logging import configure_logging

__all__ = ["configure_logging", "error_to_payload", "QVError", "wrap_error"]
