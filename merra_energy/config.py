"""
Configuration for merra_energy.

Settings are carried in a DecompositionConfig that callers pass explicitly;
nothing here is read implicitly at import time. Use
DecompositionConfig.from_env() to build one from the environment / a .env
file, and configure_logging() from an application entry point.
"""

import logging
import os
import sys
from dataclasses import dataclass, replace
from typing import Optional, Union

from dotenv import load_dotenv

from merra_energy.diffuse_fraction import DiffuseMethod
from merra_energy.solar_geometry import check_zenith_max

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Environment variable names
ENV_METHOD = "MERRA_DIFFUSE_METHOD"
ENV_ZENITH_MAX = "MERRA_ZENITH_MAX"
ENV_KEEP_INTERMEDIATE = "MERRA_KEEP_INTERMEDIATE"
ENV_VERBOSE = "MERRA_VERBOSE"
ENV_LEGACY_DAY_ANGLE = "MERRA_LEGACY_DAY_ANGLE"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {raw!r}")


@dataclass(frozen=True)
class DecompositionConfig:
    """Options for the irradiance decomposition pipeline."""
    method: DiffuseMethod = DiffuseMethod.COMBINED
    zenith_max: float = 89.0        # degrees; rows above are treated as night
    keep_intermediate: bool = False  # attach ext_irrad / kt / kd columns
    verbose: bool = False            # progress at INFO instead of DEBUG
    legacy_day_angle: bool = False   # degree day angle fed to a radian cosine

    def __post_init__(self):
        object.__setattr__(self, "method", DiffuseMethod.resolve(self.method))
        object.__setattr__(self, "zenith_max", check_zenith_max(self.zenith_max))

    def with_overrides(self, **overrides) -> "DecompositionConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self

    @classmethod
    def from_env(cls, dotenv_path: Optional[Union[str, os.PathLike]] = None) -> "DecompositionConfig":
        """
        Build a config from environment variables.

        A .env file is loaded first (without overriding variables that are
        already set). Unset variables keep the dataclass defaults.

        Args:
            dotenv_path: Explicit .env path; searched for when None

        Returns:
            DecompositionConfig

        Raises:
            ValueError: if a variable cannot be parsed
            UnsupportedMethodError: if the method is unknown or unsupported
        """
        load_dotenv(dotenv_path=dotenv_path)

        kwargs = {}
        if os.getenv(ENV_METHOD):
            method = os.environ[ENV_METHOD].strip()
            kwargs["method"] = int(method) if method.isdigit() else method
        if os.getenv(ENV_ZENITH_MAX):
            try:
                kwargs["zenith_max"] = float(os.environ[ENV_ZENITH_MAX])
            except ValueError:
                raise ValueError(
                    f"{ENV_ZENITH_MAX} must be a number, got {os.environ[ENV_ZENITH_MAX]!r}"
                ) from None
        for key, name in (("keep_intermediate", ENV_KEEP_INTERMEDIATE),
                          ("verbose", ENV_VERBOSE),
                          ("legacy_day_angle", ENV_LEGACY_DAY_ANGLE)):
            if os.getenv(name) is not None:
                kwargs[key] = _parse_bool(name, os.environ[name])

        config = cls(**kwargs)
        logger.debug(f"[DecompositionConfig] Loaded from environment: {config}")
        return config


DEFAULT_CONFIG = DecompositionConfig()


def configure_logging(level: Optional[str] = None) -> None:
    """
    Install the standard log format on the root logger.

    Args:
        level: Log level name; defaults to LOG_LEVEL or INFO
    """
    logging.basicConfig(
        level=level or os.getenv("LOG_LEVEL", "INFO"),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )
