"""
Exceptions raised by the decision engine.

Every error carries the identifier of the farm whose computation failed so
that the driver can decide, farm by farm, whether to abort the run or to
substitute a fallback.
"""


class FarmindError(Exception):
    """Base class of all decision-engine errors.

    Parameters
    ----------
    message : str
        Human readable description.
    farm_id : str, optional
        The farm whose computation failed.
    """

    def __init__(self, message="", farm_id=None):
        self.farm_id = farm_id
        if farm_id is not None:
            message = f"[{farm_id}] {message}"
        super().__init__(message)


class DegenerateReferenceError(FarmindError, ValueError):
    """The reference income is zero, so satisfaction cannot be normalized."""


class DivideByZeroError(FarmindError, ZeroDivisionError):
    """A population mean used as a divisor in the income trend is zero."""


class NoViableActivityError(FarmindError):
    """A strategy produced an empty candidate activity set."""


class UnknownFarmError(FarmindError, LookupError):
    """A farm identifier is not part of the population."""


class InconsistentMemoryError(FarmindError, ValueError):
    """An income history length differs from the shared memory length."""
