"""Infrastructure faults raised by the engine.

Business outcomes such as "no subscription" are never exceptions; they are
returned as an ``AccessVerdict`` with ``has_access=False``.
"""
from __future__ import annotations


class EngineError(Exception):
    """Base class for faults surfaced to the caller as HTTP 500."""


class ConfigurationError(EngineError):
    """Required configuration is missing or malformed."""


class AuthenticationError(EngineError):
    """The bearer credential is missing, malformed or expired."""


class StoreError(EngineError):
    """The backing store rejected a read or write."""


class RuleEvaluationError(EngineError):
    """A subscription row could not be mapped onto the access rules."""
