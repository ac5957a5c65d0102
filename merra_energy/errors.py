"""
Error types for merra_energy.

Structural problems (missing columns, unknown model selectors, bad vector
shapes) raise one of these before any output table is built. Numeric edge
cases are never raised: they are absorbed by masking and clamping.
"""

from typing import Iterable, List


class MerraEnergyError(Exception):
    """Base class for all merra_energy errors."""


class MissingColumnError(MerraEnergyError, KeyError):
    """One or more required columns are absent from the record table."""

    def __init__(self, columns: Iterable[str], available: Iterable[str] = ()):
        self.columns: List[str] = list(columns)
        self.available: List[str] = [str(c) for c in available]
        super().__init__(
            f"Missing required column(s): {', '.join(self.columns)} "
            f"(available: {', '.join(self.available) or 'none'})"
        )

    def __str__(self) -> str:
        # KeyError repr-quotes its message otherwise
        return self.args[0]


class UnsupportedMethodError(MerraEnergyError, ValueError):
    """Diffuse fraction method is unknown or has no implemented model."""

    def __init__(self, method, reason: str = "unknown method"):
        self.method = method
        super().__init__(f"Unsupported diffuse fraction method {method!r}: {reason}")


class InputShapeError(MerraEnergyError, ValueError):
    """Input vectors are empty or have incompatible lengths."""
