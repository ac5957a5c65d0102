"""
Wind Power Module for merra_energy

Turns reanalysis wind speeds into turbine capacity factors:
1. Hellmann exponent from 10 m and 50 m wind speeds
2. Power-law extrapolation of the 10 m speed to hub height
3. Power curve lookup (linear interpolation between cut-in and cut-off)

See https://en.wikipedia.org/wiki/Wind_gradient for the power law.
"""

import logging
from typing import Callable, Mapping, Optional, Union

import numpy as np
import pandas as pd

from merra_energy.errors import InputShapeError, MissingColumnError

logger = logging.getLogger(__name__)

# Averaged power curve from the "WindCurves" package
DEFAULT_POWER_CURVE = pd.DataFrame({
    "speed": [float(s) for s in range(1, 26)] + [30.0],
    "af": [
        0, 0, 0, 0.017, 0.066, 0.138, 0.235, 0.362, 0.518, 0.688,
        0.84, 0.941, 0.983, 0.995, 0.999, 1, 1, 1, 1, 1, 1, 1, 1,
        1, 1, 1,
    ],
})

# Reference heights of the input wind speeds, meters
LOWER_HEIGHT = 10.0
UPPER_HEIGHT = 50.0

_HELLMANN_OPTIONS = ("na", "inf", "lo", "up")


def wind_power_curve(speed, cutin: float = 3, cutoff: float = 25,
                     curve: Optional[Union[pd.DataFrame, Mapping]] = None) -> np.ndarray:
    """
    Estimate turbine capacity factor from wind speed.

    Speeds inside [cutin, cutoff] are interpolated linearly on the power
    curve; speeds outside produce 0. Missing speeds stay missing.

    Args:
        speed: Wind speed, m/s
        cutin: Minimal speed of production
        cutoff: Maximum operating speed
        curve: Table with `speed` and `af` columns; DEFAULT_POWER_CURVE if None

    Returns:
        Capacity factor array
    """
    if curve is None:
        curve = DEFAULT_POWER_CURVE
    curve_speed = np.asarray(curve["speed"], dtype=float)
    curve_af = np.asarray(curve["af"], dtype=float)
    order = np.argsort(curve_speed)
    curve_speed, curve_af = curve_speed[order], curve_af[order]

    speed = np.atleast_1d(np.asarray(speed, dtype=float))
    cf = np.zeros(speed.shape, dtype=float)
    cf[np.isnan(speed)] = np.nan

    with np.errstate(invalid="ignore"):
        inside = (speed >= cutin) & (speed <= cutoff)
    # Beyond the tabulated range the curve is undefined
    cf[inside] = np.interp(speed[inside], curve_speed, curve_af, left=np.nan, right=np.nan)
    return cf


def hellmann_exponent(speed10, speed50, na: float = 0, inf: float = 0,
                      lo: float = 0, up: float = 0.6) -> np.ndarray:
    """
    Estimate the Hellmann exponent from wind speeds at 10 and 50 meters.

        a = log(W50 / W10) / log(50 / 10)

    Args:
        speed10: Wind speed at 10 m, m/s
        speed50: Wind speed at 50 m, m/s
        na: Value used where the exponent is NaN
        inf: Value used where the exponent is infinite
        lo: Lower bound
        up: Upper bound

    Returns:
        Hellmann exponent array

    Raises:
        InputShapeError: empty inputs, or two vectors of different length
    """
    speed10 = np.atleast_1d(np.asarray(speed10, dtype=float))
    speed50 = np.atleast_1d(np.asarray(speed50, dtype=float))
    if speed10.size == 0 or speed50.size == 0:
        raise InputShapeError("Wind speed vectors must not be empty")
    if speed10.size > 1 and speed50.size > 1 and speed10.size != speed50.size:
        raise InputShapeError(
            f"Wind speed vectors differ in length: {speed10.size} vs {speed50.size}"
        )

    with np.errstate(divide="ignore", invalid="ignore"):
        h = np.log(speed50 / speed10) / np.log(UPPER_HEIGHT / LOWER_HEIGHT)
    h[np.isnan(h)] = na
    h[np.isinf(h)] = inf
    return np.clip(h, lo, up)


def extrapolate_wind_speed(height, speed10, hellmann) -> np.ndarray:
    """Extrapolate the 10 m wind speed to `height` meters with the power law."""
    height = np.asarray(height, dtype=float)
    return np.asarray(speed10, dtype=float) * (height / LOWER_HEIGHT) ** np.asarray(hellmann, dtype=float)


def wind_capacity_factor(
    records: Union[pd.DataFrame, Mapping],
    height: float = 50,
    speed_col: Optional[str] = None,
    return_col: Optional[str] = None,
    hellmann_col: str = "hellmann",
    speed10_col: str = "W10M",
    speed50_col: str = "W50M",
    power_curve: Callable[..., np.ndarray] = wind_power_curve,
    verbose: bool = False,
    **kwargs,
) -> pd.DataFrame:
    """
    Add a wind capacity factor column to a table of wind speeds.

    When the hub-height speed column is missing it is extrapolated from
    W10M with the Hellmann exponent; the exponent column is computed from
    W10M and W50M when missing too. Both are kept in the output.

    Args:
        records: DataFrame, or a mapping of equal-length columns
        height: Hub height, meters
        speed_col: Hub-height speed column; "W{height}M" when None
        return_col: Output column; "win{height}af" when None
        hellmann_col: Hellmann exponent column
        speed10_col: 10 m wind speed column
        speed50_col: 50 m wind speed column
        power_curve: Function speed -> capacity factor
        verbose: Report progress at INFO instead of DEBUG
        **kwargs: Passed to hellmann_exponent and power_curve

    Returns:
        New DataFrame with the capacity factor column

    Raises:
        MissingColumnError: the speed columns needed for extrapolation are absent
    """
    log = logger.info if verbose else logger.debug
    label = f"{height:g}"
    speed_col = speed_col or f"W{label}M"
    return_col = return_col or f"win{label}af"

    out = records.copy() if isinstance(records, pd.DataFrame) else pd.DataFrame(records)
    hellmann_kwargs = {k: kwargs.pop(k) for k in _HELLMANN_OPTIONS if k in kwargs}

    if speed_col not in out.columns:
        needed = [speed10_col] + ([] if hellmann_col in out.columns else [speed50_col])
        missing = [c for c in needed if c not in out.columns]
        if missing:
            logger.error(f"[wind_capacity_factor] Cannot extrapolate {speed_col}, missing {missing}")
            raise MissingColumnError(missing, out.columns)

        if hellmann_col not in out.columns:
            log(f"[wind_capacity_factor] Estimating Hellmann exponent -> '{hellmann_col}'")
            out[hellmann_col] = hellmann_exponent(
                out[speed10_col].to_numpy(), out[speed50_col].to_numpy(), **hellmann_kwargs
            )
        log(f"[wind_capacity_factor] Extrapolating wind speed to {label} m -> '{speed_col}'")
        out[speed_col] = extrapolate_wind_speed(
            height, out[speed10_col].to_numpy(), out[hellmann_col].to_numpy()
        )

    log(f"[wind_capacity_factor] Applying power curve -> '{return_col}'")
    out[return_col] = power_curve(out[speed_col].to_numpy(), **kwargs)
    return out
