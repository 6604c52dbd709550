"""Structured configuration for the interpreter and its driver."""

import dataclasses
from typing import Any, Optional

from omegaconf import DictConfig, OmegaConf
from omegaconf.errors import OmegaConfBaseException

from chipcore.state import Quirks


@dataclasses.dataclass
class DriverConfig:
    """Settings for the interactive driver in ``main.py``."""
    rom: Optional[str] = None
    seed: int = 0
    cycles_per_frame: int = 10
    fps: int = 60
    scale: int = 10
    color_scheme: str = "tango"
    debounce_cycles: int = 25
    log_level: str = "INFO"
    quirks: Quirks = dataclasses.field(default_factory=Quirks)


def default_config() -> DictConfig:
    """Default driver configuration as a typed omegaconf object."""
    return OmegaConf.structured(DriverConfig)


def load_config(overrides: Any = None) -> DriverConfig:
    """Merge ``overrides`` (dict, DictConfig or YAML path) onto the defaults."""
    config = default_config()
    if overrides is not None:
        if isinstance(overrides, str):
            overrides = OmegaConf.load(overrides)
        try:
            config = OmegaConf.merge(config, overrides)
        except OmegaConfBaseException as e:
            raise ValueError(f"Invalid interpreter configuration: {e}") from e
    return OmegaConf.to_object(config)


def load_quirks(overrides: Any = None) -> Quirks:
    """Build a :class:`Quirks` from a partial mapping, validating names and types."""
    schema = OmegaConf.structured(Quirks)
    try:
        merged = OmegaConf.merge(schema, overrides or {})
    except OmegaConfBaseException as e:
        raise ValueError(f"Invalid quirks configuration: {e}") from e
    return OmegaConf.to_object(merged)
