"""Configuration for the Naive Bayes model.

Values can be given directly or read from the environment (optionally via a
``.env`` file)::

    ML_TOOLKIT_CLASS_DELTA=0.1
    ML_TOOLKIT_COND_DELTA=0.1
    ML_TOOLKIT_BINARIZED=true
    ML_TOOLKIT_MODEL_FILE=out/nb.model.txt
    ML_TOOLKIT_SYS_OUTPUT_FILE=out/nb.sys_output.txt
"""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from .errors import InvalidConfigurationError, NullArgumentError

ENV_PREFIX = "ML_TOOLKIT_"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off", ""})


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise InvalidConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError as exc:
        raise InvalidConfigurationError(f"{name} must be a number, got {raw!r}") from exc


@dataclass(frozen=True)
class NaiveBayesConfig:
    """Immutable Naive Bayes settings.

    Args:
        class_delta: Additive smoothing on class priors P(C). Must be >= 0.
        cond_delta: Additive smoothing on conditionals P(f|C). Must be >= 0.
        binarized: Use the Bernoulli (presence/absence) model instead of the
            multinomial (count) model.
        model_file: Where ``train()`` writes the model.
        sys_output_file: Where classification results are written.

    Raises:
        InvalidConfigurationError: If a delta is negative or not finite.
        NullArgumentError: If a path is None.
    """

    class_delta: float = 1.0
    cond_delta: float = 1.0
    binarized: bool = False
    model_file: Path = Path("nb.model.txt")
    sys_output_file: Path = Path("nb.sys_output.txt")

    def __post_init__(self) -> None:
        for name in ("class_delta", "cond_delta"):
            value = getattr(self, name)
            if value is None:
                raise NullArgumentError(name, "NaiveBayesConfig()")
            if not math.isfinite(value) or value < 0:
                raise InvalidConfigurationError(
                    f"{name} must be a finite number >= 0, got {value!r}"
                )
            object.__setattr__(self, name, float(value))
        for name in ("model_file", "sys_output_file"):
            value = getattr(self, name)
            if value is None:
                raise NullArgumentError(name, "NaiveBayesConfig()")
            object.__setattr__(self, name, Path(value))
        object.__setattr__(self, "binarized", bool(self.binarized))

    @classmethod
    def from_env(
        cls,
        env_file: Optional[str | Path] = None,
        **overrides: Any,
    ) -> "NaiveBayesConfig":
        """Build a config from ``ML_TOOLKIT_*`` environment variables.

        Args:
            env_file: Optional ``.env`` file loaded with python-dotenv before
                reading the environment. Existing variables are not replaced.
            **overrides: Explicit values; these win over the environment.
                ``None`` values are ignored.
        """
        if env_file is not None:
            load_dotenv(env_file)

        values: dict[str, Any] = {}
        raw = os.getenv(f"{ENV_PREFIX}CLASS_DELTA")
        if raw is not None:
            values["class_delta"] = _parse_float(f"{ENV_PREFIX}CLASS_DELTA", raw)
        raw = os.getenv(f"{ENV_PREFIX}COND_DELTA")
        if raw is not None:
            values["cond_delta"] = _parse_float(f"{ENV_PREFIX}COND_DELTA", raw)
        raw = os.getenv(f"{ENV_PREFIX}BINARIZED")
        if raw is not None:
            values["binarized"] = _parse_bool(f"{ENV_PREFIX}BINARIZED", raw)
        raw = os.getenv(f"{ENV_PREFIX}MODEL_FILE")
        if raw:
            values["model_file"] = Path(raw)
        raw = os.getenv(f"{ENV_PREFIX}SYS_OUTPUT_FILE")
        if raw:
            values["sys_output_file"] = Path(raw)

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def to_dict(self) -> dict:
        return {
            "class_delta": self.class_delta,
            "cond_delta": self.cond_delta,
            "binarized": self.binarized,
            "model_file": str(self.model_file),
            "sys_output_file": str(self.sys_output_file),
        }
