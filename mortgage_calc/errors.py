"""Exception types raised by the mortgage calculator.

Every error derives from :class:`MortgageCalcError` so callers (the CLI and
the web app) can catch the whole family in one place. The concrete classes
also inherit from the closest built-in exception so code that only knows
about ``ValueError`` keeps working.
"""

from __future__ import annotations


class MortgageCalcError(Exception):
    """Base class for all calculator errors."""


class InvalidParameter(MortgageCalcError, ValueError):
    """An input value is missing, non-numeric or outside its allowed range."""

    def __init__(self, name: str, message: str) -> None:
        super().__init__(f"{name}: {message}")
        self.name = name


class NonAmortizing(MortgageCalcError, ArithmeticError):
    """The payment never reduces the balance, so the loan cannot be repaid."""


class ConfigurationError(MortgageCalcError, ValueError):
    """A reference table (e.g. a tier table) has an invalid shape."""


class _NotApplicable:
    """Sentinel for values that do not exist, such as an unreachable break-even."""

    _instance = None

    def __new__(cls) -> "_NotApplicable":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_APPLICABLE"

    def __str__(self) -> str:
        return "N/A"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_NotApplicable, ())


NOT_APPLICABLE = _NotApplicable()
