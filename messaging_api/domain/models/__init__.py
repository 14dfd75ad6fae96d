"""
Domain Models
"""

from .batch import (
    BatchOutcome,
    BatchRequestItem,
    BatchResultItem,
    ClassifiedError,
    ClassifiedResult,
    get_user_profile_request,
    send_message_request,
    send_request,
    send_text_request,
)

__all__ = [
    "BatchOutcome",
    "BatchRequestItem",
    "BatchResultItem",
    "ClassifiedError",
    "ClassifiedResult",
    "send_request",
    "send_message_request",
    "send_text_request",
    "get_user_profile_request",
]
