"""
Diffuse Fraction Models for merra_energy

Empirical regressions of the diffuse fraction kd = DHI / GHI on the
clearness index kt:

- Erbs (Erbs, Klein and Duffie, 1982)
- Reindl.2 (Reindl, Beckman and Duffie, 1990; kt and solar elevation)
- Combined: Reindl.2 middle branch for kt > 0.22, fully diffuse below,
  floored at 0.17 (default)

Orgill and Reindl.1 are selectable names but have no coefficients here;
selecting them raises UnsupportedMethodError.

Every model is a pure function (kt, cos_zenith) -> kd over numpy arrays.
"""

import logging
import re
from enum import Enum
from typing import Callable, Dict, Optional

import numpy as np

from merra_energy.errors import UnsupportedMethodError

logger = logging.getLogger(__name__)

# Lower bound of the Combined model
COMBINED_KD_FLOOR = 0.17


class DiffuseMethod(Enum):
    """Diffuse fraction models, valued by their numeric selector code."""
    ERBS = 1
    ORGILL = 2
    REINDL1 = 3
    REINDL2 = 4
    COMBINED = 5

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def resolve(cls, value) -> "DiffuseMethod":
        """
        Turn a member, integer code or name into a DiffuseMethod.

        Names are matched case-insensitively with punctuation and spaces
        ignored, so "Reindl.2", "reindl-2" and "REINDL2" are the same.

        Raises:
            UnsupportedMethodError: if the value matches no method
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, (int, np.integer)) and not isinstance(value, bool):
            try:
                return cls(int(value))
            except ValueError:
                raise UnsupportedMethodError(
                    value, f"code must be one of {[m.value for m in cls]}"
                ) from None
        if isinstance(value, str):
            key = re.sub(r"[^a-z0-9]", "", value.lower())
            if key in _BY_KEY:
                return _BY_KEY[key]
        raise UnsupportedMethodError(
            value, f"expected one of {', '.join(m.label for m in cls)}"
        )


_LABELS = {
    DiffuseMethod.ERBS: "Erbs",
    DiffuseMethod.ORGILL: "Orgill",
    DiffuseMethod.REINDL1: "Reindl.1",
    DiffuseMethod.REINDL2: "Reindl.2",
    DiffuseMethod.COMBINED: "Combined",
}

_BY_KEY = {m.name.lower(): m for m in DiffuseMethod}


def erbs(kt, cos_zenith=None) -> np.ndarray:
    """
    Erbs diffuse fraction.

        kt < 0.22          kd = 1 - 0.09 kt
        0.22 <= kt <= 0.8  kd = 0.9511 - 0.1604 kt + 4.388 kt^2
                                - 16.638 kt^3 + 12.336 kt^4
        kt > 0.8           kd = 0.165

    cos_zenith is accepted for a uniform signature and ignored.
    """
    kt = np.asarray(kt, dtype=float)
    middle = (0.9511 - 0.1604 * kt + 4.388 * kt ** 2
              - 16.638 * kt ** 3 + 12.336 * kt ** 4)
    return np.select(
        [kt < 0.22, kt <= 0.8, kt > 0.8],
        [1.0 - 0.09 * kt, middle, 0.165],
        default=np.nan,
    )


def reindl2(kt, cos_zenith) -> np.ndarray:
    """
    Reindl diffuse fraction with clearness index and solar elevation.

        kt <= 0.3          kd = 1.02 - 0.254 kt + 0.0123 cos(z)
        0.3 < kt < 0.78    kd = 1.4 - 1.749 kt + 0.177 cos(z)
        kt >= 0.78         kd = 0.486 kt - 0.182 cos(z)
    """
    kt = np.asarray(kt, dtype=float)
    cosz = np.asarray(cos_zenith, dtype=float)
    return np.select(
        [kt <= 0.3, kt < 0.78, kt >= 0.78],
        [1.02 - 0.254 * kt + 0.0123 * cosz,
         1.4 - 1.749 * kt + 0.177 * cosz,
         0.486 * kt - 0.182 * cosz],
        default=np.nan,
    )


def combined(kt, cos_zenith) -> np.ndarray:
    """
    Combined diffuse fraction.

        kt <= 0.22   kd = 1
        kt > 0.22    kd = max(1.4 - 1.749 kt + 0.177 cos(z), 0.17)
    """
    kt = np.asarray(kt, dtype=float)
    cosz = np.asarray(cos_zenith, dtype=float)
    kd = np.select(
        [kt <= 0.22, kt > 0.22],
        [1.0, 1.4 - 1.749 * kt + 0.177 * cosz],
        default=np.nan,
    )
    return np.maximum(kd, COMBINED_KD_FLOOR)


MODELS: Dict[DiffuseMethod, Callable[..., np.ndarray]] = {
    DiffuseMethod.ERBS: erbs,
    DiffuseMethod.REINDL2: reindl2,
    DiffuseMethod.COMBINED: combined,
}


def get_model(method) -> Callable[..., np.ndarray]:
    """
    Look up the model function for a method selector.

    Raises:
        UnsupportedMethodError: unknown selector, or a method without an
            implemented model (Orgill, Reindl.1)
    """
    resolved = DiffuseMethod.resolve(method)
    model = MODELS.get(resolved)
    if model is None:
        logger.error(f"[diffuse_fraction] {resolved.label} has no implemented model")
        raise UnsupportedMethodError(method, f"{resolved.label} model is not implemented")
    return model


def diffuse_fraction(kt, cos_zenith, method=DiffuseMethod.COMBINED,
                     valid: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Calculate the diffuse fraction with the selected model.

    The model output is clamped to [0, 1], and invalid records (sun below
    the zenith cutoff, beam flag unset) are fully diffuse (kd = 1).

    Args:
        kt: Clearness index
        cos_zenith: Cosine of the zenith angle
        method: DiffuseMethod, integer code or name
        valid: Validity mask; all records valid when None

    Returns:
        Diffuse fraction array
    """
    model = get_model(method)
    kd = np.clip(model(kt, cos_zenith), 0.0, 1.0)
    if valid is not None:
        kd[~np.asarray(valid, dtype=bool)] = 1.0
    return kd
