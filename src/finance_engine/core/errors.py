"""Exception types raised by the finance engine."""

from __future__ import annotations

from typing import Optional


class FinanceEngineError(Exception):
    """Base class for every error reported back to the caller as a tool error."""

    label: Optional[str] = None

    @property
    def user_message(self) -> str:
        """Message shown to the caller, prefixed with the error kind where it has one."""
        if self.label:
            return f"{self.label}: {self}"
        return str(self)


class InputParseError(FinanceEngineError, ValueError):
    """A raw input value could not be turned into a finite number."""


class CalculationError(FinanceEngineError, ValueError):
    """Parsed inputs violate a calculation's domain constraints."""

    label = "Calculation error"


class SerializationError(FinanceEngineError):
    """A computed result could not be encoded for the response channel."""

    label = "Serialization error"
