"""
merra_energy: solar and wind resource transforms for reanalysis time series

Estimates Direct Normal (DNI) and Diffuse Horizontal (DHI) irradiance from
Global Horizontal Irradiance, solar zenith and day of year, and turns wind
speeds into turbine capacity factors.

Architecture:
    solar_geometry.py    - Extraterrestrial irradiance, cos(zenith),
                           validity mask, clearness index
    diffuse_fraction.py  - Diffuse fraction models (Erbs, Reindl.2, Combined)
    decomposition.py     - GHI -> DHI/DNI pipeline over column tables
    wind_power.py        - Hellmann exponent, wind speed extrapolation,
                           power curve capacity factors
    config.py            - DecompositionConfig (.env aware), logging setup
    errors.py            - Exception types

Entry Points:
    decompose_irradiance(table, method="Combined")
    wind_capacity_factor(table, height=100)
"""

from merra_energy.config import DecompositionConfig, configure_logging
from merra_energy.decomposition import (
    IrradianceColumns,
    IrradianceComponents,
    decompose_arrays,
    decompose_irradiance,
    split_components,
)
from merra_energy.diffuse_fraction import DiffuseMethod, diffuse_fraction
from merra_energy.errors import (
    InputShapeError,
    MerraEnergyError,
    MissingColumnError,
    UnsupportedMethodError,
)
from merra_energy.solar_geometry import (
    clearness_index,
    cos_zenith,
    extraterrestrial_irradiance,
    validity_mask,
)
from merra_energy.wind_power import (
    extrapolate_wind_speed,
    hellmann_exponent,
    wind_capacity_factor,
    wind_power_curve,
)

__version__ = "0.1.0"

__all__ = [
    # Solar decomposition
    "decompose_irradiance",
    "decompose_arrays",
    "split_components",
    "IrradianceColumns",
    "IrradianceComponents",
    "DiffuseMethod",
    "diffuse_fraction",
    "extraterrestrial_irradiance",
    "cos_zenith",
    "validity_mask",
    "clearness_index",
    # Wind
    "wind_power_curve",
    "hellmann_exponent",
    "extrapolate_wind_speed",
    "wind_capacity_factor",
    # Config
    "DecompositionConfig",
    "configure_logging",
    # Errors
    "MerraEnergyError",
    "MissingColumnError",
    "UnsupportedMethodError",
    "InputShapeError",
]
