"""
Module: utils
Description: Package initialization for utility functions.

Current utilities:
- logger: Structured logging configuration and helpers
- metrics: Optional CloudWatch metrics publishing
"""

__all__ = []
