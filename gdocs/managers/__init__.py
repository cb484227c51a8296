"""
Google Docs Operation Managers

Managers that keep validation and API batching out of the tool functions.
"""

from .batch_operation_manager import BatchOperationManager
from .validation_manager import ValidationManager

__all__ = [
    "BatchOperationManager",
    "ValidationManager",
]
