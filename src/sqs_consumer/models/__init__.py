"""
Module: models
Description: Package initialization for Pydantic data models.

This package contains the data models shared by the consumer:
- Message: one delivery of a queue message
"""

from .message import Message

__all__ = [
    "Message",
]
