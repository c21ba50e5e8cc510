"""
Pipeline configuration
======================

All tuning knobs of a run live in one dataclass. Values come from the
defaults below, then `STORMRANK_*` environment variables, then CLI flags.
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass, fields
from typing import Mapping, Optional

from .errors import ConfigError

logger = logging.getLogger(__name__)

DISTANCE_METHODS = ("levenshtein", "osa")
TIE_POLICIES = ("first", "reject")


@dataclass
class PipelineConfig:
    """Knobs for normalization, parsing and ranking."""
    # largest edit distance still accepted as a match
    max_distance: int = 8
    distance_method: str = "levenshtein"
    # matcher tie on minimum distance: lowest catalog index, or no match
    tie_policy: str = "first"
    # strict: a malformed numeric field aborts the run
    strict: bool = True
    top_n: int = 10

    def validate(self) -> "PipelineConfig":
        if self.max_distance < 0:
            raise ConfigError(f"max_distance must be >= 0, got {self.max_distance}")
        if self.distance_method not in DISTANCE_METHODS:
            raise ConfigError(f"distance_method must be one of {DISTANCE_METHODS}, got {self.distance_method!r}")
        if self.tie_policy not in TIE_POLICIES:
            raise ConfigError(f"tie_policy must be one of {TIE_POLICIES}, got {self.tie_policy!r}")
        if self.top_n < 1:
            raise ConfigError(f"top_n must be >= 1, got {self.top_n}")
        return self

    @classmethod
    def from_env(cls, prefix: str = "STORMRANK_", environ: Optional[Mapping[str, str]] = None) -> "PipelineConfig":
        """Build a config from environment variables such as STORMRANK_MAX_DISTANCE."""
        env = os.environ if environ is None else environ
        cfg = cls()
        for f in fields(cls):
            raw = env.get(prefix + f.name.upper())
            if raw is None:
                continue
            setattr(cfg, f.name, _coerce(f.name, raw, getattr(cfg, f.name)))
            logger.debug("Config %s=%r from environment", f.name, raw)
        return cfg.validate()


def _coerce(name: str, raw: str, default: object) -> object:
    if isinstance(default, bool):
        v = raw.strip().lower()
        if v in ("1", "true", "yes", "on"):
            return True
        if v in ("0", "false", "no", "off"):
            return False
        raise ConfigError(f"{name}: expected a boolean, got {raw!r}")
    if isinstance(default, int):
        try:
            return int(raw)
        except ValueError as e:
            raise ConfigError(f"{name}: expected an integer, got {raw!r}") from e
    return raw.strip().lower()
