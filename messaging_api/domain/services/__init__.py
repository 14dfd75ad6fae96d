"""
Domain Services
"""

from .batch_classifier import BatchErrorClassifier, get_error_message, is_error_613

__all__ = [
    "BatchErrorClassifier",
    "get_error_message",
    "is_error_613",
]
