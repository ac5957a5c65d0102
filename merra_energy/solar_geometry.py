"""
Solar Geometry Module for merra_energy

Computes the geometric inputs of the decomposition pipeline:
1. Extraterrestrial irradiance (Ge) from day of year
2. Cosine of the solar zenith angle
3. Validity mask (sun high enough, beam flag set)
4. Clearness index (kt)

All functions work on whole columns (numpy arrays or anything
numpy.asarray accepts) and return arrays of the same length.
"""

import logging
from typing import Optional

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

# Solar constant, W/m2 (Kopp and Lean, 2011)
SOLAR_CONSTANT = 1360.8

# Eccentricity correction amplitude
ECCENTRICITY_AMPLITUDE = 0.033

# Default zenith cutoff in degrees; rows above are treated as night
DEFAULT_ZENITH_MAX = 89.0


def extraterrestrial_irradiance(yday, legacy_day_angle: bool = False) -> np.ndarray:
    """
    Calculate extraterrestrial irradiance on a plane normal to the sun.

        Ge = Gsc * (1 + 0.033 * cos(360 * n / 365))

    The day angle 360 * n / 365 is in degrees. With legacy_day_angle the
    degree value is passed to a radian cosine unchanged, which reproduces
    output computed that way.

    Args:
        yday: Day of year (1-366); not validated
        legacy_day_angle: Skip the degree-to-radian conversion

    Returns:
        Extraterrestrial irradiance in W/m2
    """
    day_angle = 360.0 * np.asarray(yday, dtype=float) / 365.0
    if not legacy_day_angle:
        day_angle = np.radians(day_angle)
    return SOLAR_CONSTANT * (1.0 + ECCENTRICITY_AMPLITUDE * np.cos(day_angle))


def cos_zenith(zenith) -> np.ndarray:
    """Cosine of the solar zenith angle given in degrees."""
    return np.cos(np.radians(np.asarray(zenith, dtype=float)))


def check_zenith_max(zenith_max: float) -> float:
    """
    Validate a zenith cutoff.

    The cutoff must stay strictly between 0 and 90 degrees: at the horizon
    cos(zenith) vanishes and DNI = (GHI - DHI) / cos(zenith) diverges.

    Raises:
        ValueError: if zenith_max is not in (0, 90)
    """
    zenith_max = float(zenith_max)
    if not 0.0 < zenith_max < 90.0:
        logger.error(f"[check_zenith_max] Rejected zenith_max={zenith_max}")
        raise ValueError(f"zenith_max must be between 0 and 90 degrees (exclusive), got {zenith_max}")
    return zenith_max


def validity_mask(zenith, zenith_max: float = DEFAULT_ZENITH_MAX, beam=None) -> np.ndarray:
    """
    Flag records whose geometry supports a beam/diffuse split.

    A record is valid when zenith <= zenith_max and, if a beam flag column
    is supplied, the flag is set. NaN zenith and missing flags (NaN, None,
    pd.NA) are never valid.

    Args:
        zenith: Solar zenith angle in degrees
        zenith_max: Largest zenith angle treated as daytime, in (0, 90)
        beam: Optional boolean validity flags

    Returns:
        Boolean array

    Raises:
        ValueError: if zenith_max is not in (0, 90)
    """
    zenith_max = check_zenith_max(zenith_max)
    zenith = np.asarray(zenith, dtype=float)
    with np.errstate(invalid="ignore"):
        valid = zenith <= zenith_max
    if beam is not None:
        beam = np.asarray(beam, dtype=object)
        # NaN/None/pd.NA flags count as not set
        beam = np.where(pd.isna(beam), False, beam).astype(bool)
        valid = valid & beam
    return valid


def clearness_index(ghi, ext_irrad, cosz, valid: Optional[np.ndarray] = None) -> np.ndarray:
    """
    Calculate the clearness index kt = GHI / (Ge * cos(zenith)).

    The ratio is only evaluated where the record is valid, so near-horizon
    cosines never produce Inf/NaN. The result is clamped to [0, 1] and set
    to 0 for invalid records.

    Args:
        ghi: Global horizontal irradiance, W/m2
        ext_irrad: Extraterrestrial irradiance, W/m2
        cosz: Cosine of the zenith angle
        valid: Validity mask; all records valid when None

    Returns:
        Clearness index array
    """
    ghi = np.asarray(ghi, dtype=float)
    denominator = np.asarray(ext_irrad, dtype=float) * np.asarray(cosz, dtype=float)
    if valid is None:
        valid = np.ones(ghi.shape, dtype=bool)

    kt = np.zeros(ghi.shape, dtype=float)
    np.divide(ghi, denominator, out=kt, where=valid)
    # NaN GHI stays NaN here; clip leaves it untouched
    kt = np.clip(kt, 0.0, 1.0)
    kt[~valid] = 0.0
    return kt
