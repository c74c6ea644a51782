"""
Package: consumer
Description: Receiver pool, processor and the Consumer that wires them.
"""

from .config import ConsumerConfig
from .consumer import Consumer
from .processor import Processor
from .receiver import Receiver

__all__ = [
    "Consumer",
    "ConsumerConfig",
    "Processor",
    "Receiver",
]
