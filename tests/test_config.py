"""Tests for NaiveBayesConfig."""

from __future__ import annotations

import dataclasses
import math
import os
from pathlib import Path

import pytest

from ml_toolkit.config import NaiveBayesConfig
from ml_toolkit.errors import InvalidConfigurationError, NullArgumentError

ENV_VARS = (
    "ML_TOOLKIT_CLASS_DELTA",
    "ML_TOOLKIT_COND_DELTA",
    "ML_TOOLKIT_BINARIZED",
    "ML_TOOLKIT_MODEL_FILE",
    "ML_TOOLKIT_SYS_OUTPUT_FILE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Isolate os.environ so .env loading cannot leak between tests."""
    environ = {k: v for k, v in os.environ.items() if k not in ENV_VARS}
    monkeypatch.setattr(os, "environ", environ)


class TestNaiveBayesConfig:
    """Construction and validation."""

    def test_defaults(self):
        config = NaiveBayesConfig()
        assert config.class_delta == 1.0
        assert config.cond_delta == 1.0
        assert config.binarized is False
        assert config.model_file == Path("nb.model.txt")
        assert config.sys_output_file == Path("nb.sys_output.txt")

    def test_coerces_types(self):
        config = NaiveBayesConfig(class_delta=1, cond_delta=0, model_file="out/m.txt")
        assert isinstance(config.class_delta, float)
        assert config.cond_delta == 0.0
        assert config.model_file == Path("out/m.txt")

    @pytest.mark.parametrize("value", [-0.1, math.inf, math.nan])
    def test_invalid_deltas(self, value):
        with pytest.raises(InvalidConfigurationError):
            NaiveBayesConfig(class_delta=value)
        with pytest.raises(InvalidConfigurationError):
            NaiveBayesConfig(cond_delta=value)

    def test_invalid_delta_is_a_value_error(self):
        with pytest.raises(ValueError):
            NaiveBayesConfig(cond_delta=-1)

    def test_none_values(self):
        with pytest.raises(NullArgumentError, match="class_delta"):
            NaiveBayesConfig(class_delta=None)
        with pytest.raises(NullArgumentError, match="model_file"):
            NaiveBayesConfig(model_file=None)

    def test_frozen(self):
        config = NaiveBayesConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.class_delta = 0.5

    def test_to_dict(self):
        data = NaiveBayesConfig(binarized=True).to_dict()
        assert data["binarized"] is True
        assert data["model_file"] == "nb.model.txt"


class TestFromEnv:
    """Environment and .env loading."""

    def test_no_environment_gives_defaults(self):
        assert NaiveBayesConfig.from_env() == NaiveBayesConfig()

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("ML_TOOLKIT_CLASS_DELTA", "0.1")
        monkeypatch.setenv("ML_TOOLKIT_COND_DELTA", "0.5")
        monkeypatch.setenv("ML_TOOLKIT_BINARIZED", "yes")
        monkeypatch.setenv("ML_TOOLKIT_MODEL_FILE", "models/nb.txt")
        config = NaiveBayesConfig.from_env()
        assert config.class_delta == 0.1
        assert config.cond_delta == 0.5
        assert config.binarized is True
        assert config.model_file == Path("models/nb.txt")

    def test_overrides_win(self, monkeypatch):
        monkeypatch.setenv("ML_TOOLKIT_COND_DELTA", "0.5")
        monkeypatch.setenv("ML_TOOLKIT_BINARIZED", "true")
        config = NaiveBayesConfig.from_env(cond_delta=0.2, binarized=False)
        assert config.cond_delta == 0.2
        assert config.binarized is False

    def test_none_overrides_are_ignored(self, monkeypatch):
        monkeypatch.setenv("ML_TOOLKIT_COND_DELTA", "0.5")
        config = NaiveBayesConfig.from_env(cond_delta=None, model_file=None)
        assert config.cond_delta == 0.5
        assert config.model_file == Path("nb.model.txt")

    def test_env_file(self, tmp_path: Path):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "ML_TOOLKIT_CLASS_DELTA=0.25\nML_TOOLKIT_BINARIZED=1\n", encoding="utf-8"
        )
        config = NaiveBayesConfig.from_env(env_file)
        assert config.class_delta == 0.25
        assert config.binarized is True

    def test_existing_environment_beats_env_file(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("ML_TOOLKIT_CLASS_DELTA", "0.75")
        env_file = tmp_path / ".env"
        env_file.write_text("ML_TOOLKIT_CLASS_DELTA=0.25\n", encoding="utf-8")
        assert NaiveBayesConfig.from_env(env_file).class_delta == 0.75

    @pytest.mark.parametrize(
        "name, value",
        [
            ("ML_TOOLKIT_CLASS_DELTA", "lots"),
            ("ML_TOOLKIT_BINARIZED", "maybe"),
            ("ML_TOOLKIT_COND_DELTA", "-1"),
        ],
    )
    def test_bad_environment_values(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(InvalidConfigurationError):
            NaiveBayesConfig.from_env()
