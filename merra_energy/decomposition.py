"""
Irradiance Decomposition for merra_energy

Splits Global Horizontal Irradiance into its diffuse (DHI) and direct
normal (DNI) components:

    Geometry        ext_irrad = Gsc * (1 + 0.033 cos(360 n / 365))
    Clearness       kt = GHI / (ext_irrad * cos z), clamped to [0, 1]
    Diffuse frac.   kd = model(kt, cos z)   (Erbs / Reindl.2 / Combined)
    Components      DHI = GHI * kd
                    DNI = (GHI - DHI) / cos z   (0 for invalid rows)

DNI is derived from the energy balance residual, so
GHI == DHI + DNI * cos z holds for every valid record.

Invalid records (zenith above zenith_max, beam flag unset) are fully
diffuse: kd = 1, DHI = GHI, DNI = 0.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd

from merra_energy.config import DEFAULT_CONFIG, DecompositionConfig
from merra_energy.diffuse_fraction import DiffuseMethod, diffuse_fraction, get_model
from merra_energy.errors import MissingColumnError
from merra_energy.solar_geometry import (
    clearness_index,
    cos_zenith,
    extraterrestrial_irradiance,
    validity_mask,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IrradianceColumns:
    """Column names read from and written to the record table."""
    yday: str = "yday"
    ghi: str = "GHI"
    zenith: str = "zenith"
    beam: Optional[str] = None
    # Outputs
    ext_irrad: str = "ext_irrad"
    clearness_index: str = "clearness_index"
    diffuse_fraction: str = "diffuse_fraction"
    dhi: str = "DHI"
    dni: str = "DNI"

    @property
    def required(self) -> Tuple[str, ...]:
        names = (self.yday, self.ghi, self.zenith)
        return names + ((self.beam,) if self.beam else ())

    def resolve(self, table: pd.DataFrame) -> "IrradianceInputs":
        """
        Pull the input columns out of a table as numpy arrays.

        Raises:
            MissingColumnError: listing every required column not in the table
        """
        missing = [name for name in self.required if name not in table.columns]
        if missing:
            logger.error(f"[IrradianceColumns] Missing columns: {missing}")
            raise MissingColumnError(missing, table.columns)

        return IrradianceInputs(
            yday=table[self.yday].to_numpy(dtype=float),
            ghi=table[self.ghi].to_numpy(dtype=float),
            zenith=table[self.zenith].to_numpy(dtype=float),
            beam=table[self.beam].to_numpy(dtype=object) if self.beam else None,
        )


@dataclass
class IrradianceInputs:
    """Input columns as arrays of equal length."""
    yday: np.ndarray
    ghi: np.ndarray
    zenith: np.ndarray
    beam: Optional[np.ndarray] = None


@dataclass
class IrradianceComponents:
    """All columns produced by one decomposition run."""
    ext_irrad: np.ndarray
    cos_zenith: np.ndarray
    valid: np.ndarray
    clearness_index: np.ndarray
    diffuse_fraction: np.ndarray
    dhi: np.ndarray
    dni: np.ndarray

    @property
    def n_valid(self) -> int:
        return int(np.count_nonzero(self.valid))


def split_components(ghi, kd, cosz, valid) -> Tuple[np.ndarray, np.ndarray]:
    """
    Derive DHI and DNI from GHI and the diffuse fraction.

    Args:
        ghi: Global horizontal irradiance, W/m2
        kd: Diffuse fraction
        cosz: Cosine of the zenith angle
        valid: Validity mask

    Returns:
        Tuple of (DHI, DNI) arrays
    """
    ghi = np.asarray(ghi, dtype=float)
    valid = np.asarray(valid, dtype=bool)
    dhi = ghi * np.asarray(kd, dtype=float)

    dni = np.zeros(ghi.shape, dtype=float)
    np.divide(ghi - dhi, np.asarray(cosz, dtype=float), out=dni, where=valid)
    return dhi, dni


def decompose_arrays(
    yday,
    ghi,
    zenith,
    beam=None,
    config: DecompositionConfig = DEFAULT_CONFIG,
) -> IrradianceComponents:
    """
    Run the four decomposition stages on plain arrays.

    Args:
        yday: Day of year
        ghi: Global horizontal irradiance, W/m2
        zenith: Solar zenith angle, degrees
        beam: Optional boolean validity flags
        config: Method, zenith cutoff and day angle convention

    Returns:
        IrradianceComponents with every intermediate column
    """
    # Reject reserved/unknown methods before touching the data
    get_model(config.method)

    ext_irrad = extraterrestrial_irradiance(yday, legacy_day_angle=config.legacy_day_angle)
    cosz = cos_zenith(zenith)
    valid = validity_mask(zenith, config.zenith_max, beam)

    kt = clearness_index(ghi, ext_irrad, cosz, valid)
    kd = diffuse_fraction(kt, cosz, config.method, valid)
    dhi, dni = split_components(ghi, kd, cosz, valid)

    return IrradianceComponents(
        ext_irrad=ext_irrad,
        cos_zenith=cosz,
        valid=valid,
        clearness_index=kt,
        diffuse_fraction=kd,
        dhi=dhi,
        dni=dni,
    )


def decompose_irradiance(
    records: Union[pd.DataFrame, Mapping],
    yday_col: Optional[str] = None,
    ghi_col: Optional[str] = None,
    zenith_col: Optional[str] = None,
    beam_col: Optional[str] = None,
    method: Union[DiffuseMethod, str, int, None] = None,
    zenith_max: Optional[float] = None,
    keep_intermediate: Optional[bool] = None,
    config: Optional[DecompositionConfig] = None,
    columns: Optional[IrradianceColumns] = None,
) -> pd.DataFrame:
    """
    Estimate DHI and DNI for every record of a table.

    The input is not modified: a copy is returned with the DHI and DNI
    columns appended (or overwritten), plus ext_irrad, clearness_index and
    diffuse_fraction when keep_intermediate is set. Derived columns already
    present in the input are recomputed, never read.

    Keyword arguments left as None fall back to `config` (and to
    `columns` for column names).

    Args:
        records: DataFrame, or a mapping of equal-length columns
        yday_col: Day-of-year column
        ghi_col: GHI column
        zenith_col: Zenith angle column (degrees)
        beam_col: Optional boolean validity column
        method: Diffuse fraction model (DiffuseMethod, code or name)
        zenith_max: Largest zenith angle treated as daytime
        keep_intermediate: Attach the intermediate columns
        config: Base configuration; DEFAULT_CONFIG when None
        columns: Base column schema; IrradianceColumns() when None

    Returns:
        New DataFrame with the derived columns

    Raises:
        MissingColumnError: a required input column is absent
        UnsupportedMethodError: the method is unknown or not implemented
        ValueError: zenith_max is not between 0 and 90 degrees
    """
    config = (config or DEFAULT_CONFIG).with_overrides(
        method=method, zenith_max=zenith_max, keep_intermediate=keep_intermediate
    )
    columns = columns or IrradianceColumns()
    if any(c is not None for c in (yday_col, ghi_col, zenith_col, beam_col)):
        columns = IrradianceColumns(
            yday=yday_col or columns.yday,
            ghi=ghi_col or columns.ghi,
            zenith=zenith_col or columns.zenith,
            beam=beam_col or columns.beam,
            ext_irrad=columns.ext_irrad,
            clearness_index=columns.clearness_index,
            diffuse_fraction=columns.diffuse_fraction,
            dhi=columns.dhi,
            dni=columns.dni,
        )

    table = records if isinstance(records, pd.DataFrame) else pd.DataFrame(records)
    inputs = columns.resolve(table)

    log = logger.info if config.verbose else logger.debug
    log(f"[decompose_irradiance] {len(table)} records, method={config.method.label}, "
        f"zenith_max={config.zenith_max}")

    result = decompose_arrays(inputs.yday, inputs.ghi, inputs.zenith, inputs.beam, config)

    log(f"[decompose_irradiance] {result.n_valid} valid, "
        f"{len(table) - result.n_valid} masked as fully diffuse")

    out = table.copy()
    if config.keep_intermediate:
        out[columns.ext_irrad] = result.ext_irrad
        out[columns.clearness_index] = result.clearness_index
        out[columns.diffuse_fraction] = result.diffuse_fraction
    out[columns.dhi] = result.dhi
    out[columns.dni] = result.dni
    return out
