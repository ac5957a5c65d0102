"""
Tests for DecompositionConfig and environment loading.

Run with: python -m pytest tests/test_config.py -v
"""

import logging
import sys
from pathlib import Path

import pytest

logging.basicConfig(level=logging.DEBUG)
logger = logging.getLogger(__name__)

sys.path.insert(0, str(Path(__file__).parent.parent))

from merra_energy import config as config_module
from merra_energy.config import DecompositionConfig
from merra_energy.diffuse_fraction import DiffuseMethod
from merra_energy.errors import UnsupportedMethodError

ENV_NAMES = [
    config_module.ENV_METHOD,
    config_module.ENV_ZENITH_MAX,
    config_module.ENV_KEEP_INTERMEDIATE,
    config_module.ENV_VERBOSE,
    config_module.ENV_LEGACY_DAY_ANGLE,
]


@pytest.fixture
def clean_env(monkeypatch):
    """Unset every config variable and restore the environment afterwards."""
    for name in ENV_NAMES:
        # setenv first so the teardown also removes values load_dotenv adds
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch


def write_env(tmp_path, text):
    path = tmp_path / ".env"
    path.write_text(text)
    return path


class TestDecompositionConfig:
    """Test suite for the DecompositionConfig dataclass."""

    def test_defaults(self):
        """Defaults: Combined, 89 degree cutoff, everything else off."""
        config = DecompositionConfig()
        assert config.method is DiffuseMethod.COMBINED
        assert config.zenith_max == 89.0
        assert not config.keep_intermediate
        assert not config.verbose
        assert not config.legacy_day_angle

    def test_method_resolved_on_construction(self):
        """Method selectors are resolved (and rejected) when the config is built."""
        assert DecompositionConfig(method="reindl.2").method is DiffuseMethod.REINDL2
        assert DecompositionConfig(method=1).method is DiffuseMethod.ERBS
        with pytest.raises(UnsupportedMethodError):
            DecompositionConfig(method="Bogus")

    def test_with_overrides_skips_none(self):
        """None overrides leave the base config unchanged."""
        base = DecompositionConfig(zenith_max=85)
        assert base.with_overrides(method=None, zenith_max=None) is base
        changed = base.with_overrides(method="Erbs", keep_intermediate=True)
        assert changed.method is DiffuseMethod.ERBS
        assert changed.keep_intermediate
        assert changed.zenith_max == 85.0
        assert base.method is DiffuseMethod.COMBINED

    @pytest.mark.parametrize("zenith_max", [90, 90.0, 95.0, 0, -5.0])
    def test_rejects_horizon_zenith_max(self, zenith_max):
        """A cutoff at or beyond the horizon is rejected on construction."""
        with pytest.raises(ValueError, match="zenith_max"):
            DecompositionConfig(zenith_max=zenith_max)

    def test_with_overrides_validates_zenith_max(self):
        with pytest.raises(ValueError, match="zenith_max"):
            DecompositionConfig().with_overrides(zenith_max=120)


class TestFromEnv:
    """Test suite for loading the config from the environment and .env files."""

    def test_reads_dotenv(self, clean_env, tmp_path):
        """Every variable in a .env file is applied."""
        path = write_env(tmp_path, "MERRA_DIFFUSE_METHOD=Erbs\n"
                                   "MERRA_ZENITH_MAX=85.5\n"
                                   "MERRA_KEEP_INTERMEDIATE=yes\n"
                                   "MERRA_VERBOSE=true\n")
        config = DecompositionConfig.from_env(path)
        logger.info(f"[TEST] Loaded config: {config}")
        assert config.method is DiffuseMethod.ERBS
        assert config.zenith_max == 85.5
        assert config.keep_intermediate
        assert config.verbose
        assert not config.legacy_day_angle

    def test_numeric_method_code(self, clean_env, tmp_path):
        """Digit-only method values are read as integer codes."""
        path = write_env(tmp_path, "MERRA_DIFFUSE_METHOD=4\nMERRA_LEGACY_DAY_ANGLE=1\n")
        config = DecompositionConfig.from_env(path)
        assert config.method is DiffuseMethod.REINDL2
        assert config.legacy_day_angle

    def test_environment_wins_over_dotenv(self, clean_env, tmp_path):
        """Variables already set are not overridden by the .env file."""
        clean_env.setenv(config_module.ENV_METHOD, "Reindl.2")
        path = write_env(tmp_path, "MERRA_DIFFUSE_METHOD=Erbs\n")
        assert DecompositionConfig.from_env(path).method is DiffuseMethod.REINDL2

    def test_empty_environment_gives_defaults(self, clean_env, tmp_path):
        """An empty .env yields the default config."""
        path = write_env(tmp_path, "")
        assert DecompositionConfig.from_env(path) == DecompositionConfig()

    def test_bad_zenith_max(self, clean_env, tmp_path):
        """A non-numeric cutoff names the offending variable."""
        path = write_env(tmp_path, "MERRA_ZENITH_MAX=high\n")
        with pytest.raises(ValueError, match="MERRA_ZENITH_MAX"):
            DecompositionConfig.from_env(path)

    def test_zenith_max_beyond_horizon(self, clean_env, tmp_path):
        """A numeric but out-of-range cutoff fails at load, not mid-pipeline."""
        path = write_env(tmp_path, "MERRA_ZENITH_MAX=95\n")
        with pytest.raises(ValueError, match="zenith_max"):
            DecompositionConfig.from_env(path)

    def test_bad_flag(self, clean_env, tmp_path):
        path = write_env(tmp_path, "MERRA_VERBOSE=maybe\n")
        with pytest.raises(ValueError, match="MERRA_VERBOSE"):
            DecompositionConfig.from_env(path)

    def test_bad_method(self, clean_env, tmp_path):
        path = write_env(tmp_path, "MERRA_DIFFUSE_METHOD=Bogus\n")
        with pytest.raises(UnsupportedMethodError):
            DecompositionConfig.from_env(path)


class TestConfigureLogging:
    """Test suite for the logging setup helper."""

    def test_uses_log_level_env(self, monkeypatch):
        """LOG_LEVEL picks the level when none is given."""
        captured = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        config_module.configure_logging()
        assert captured["level"] == "WARNING"
        assert captured["format"] == config_module.LOG_FORMAT

    def test_explicit_level(self, monkeypatch):
        """An explicit level takes precedence over LOG_LEVEL."""
        captured = {}
        monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))
        config_module.configure_logging("DEBUG")
        assert captured["level"] == "DEBUG"
