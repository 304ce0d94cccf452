"""
Engine configuration.

Defaults live in `EngineConfig`. An optional TOML file can override them:

    [engine]
    search_depth = 4
    variant = "variant"
    starting_position = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
    log_level = "DEBUG"
"""

import logging
import os
import tomllib
from dataclasses import dataclass, fields

from protochess.core.exceptions import GameStateError
from protochess.engine.fen import STARTING_FEN
from protochess.engine.pieces import STANDARD_RULES, VARIANT_RULES, PieceRules

DEFAULT_CONFIG_PATH = "protochess.toml"

VARIANTS: dict[str, PieceRules] = {
    "standard": STANDARD_RULES,
    "variant": VARIANT_RULES,
}


@dataclass
class EngineConfig:
    search_depth: int = 6
    starting_position: str = STARTING_FEN
    variant: str = "standard"
    order_captures_first: bool = False
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.log_level.upper() not in logging.getLevelNamesMapping():
            raise GameStateError(f"Unknown log_level {self.log_level!r}")
        if self.search_depth < 0:
            raise GameStateError(f"search_depth cannot be negative. got {self.search_depth}")
        if self.variant not in VARIANTS:
            raise GameStateError(f"Unknown variant {self.variant!r}. Pick one from {','.join(VARIANTS)}")


def load_config(path: str = DEFAULT_CONFIG_PATH) -> EngineConfig:
    """Read the [engine] table of a TOML file. No file means the defaults."""
    if not os.path.exists(path):
        return EngineConfig()

    with open(path, "rb") as config_file:
        data = tomllib.load(config_file)

    engine_table = data.get("engine", {})
    known = {config_field.name for config_field in fields(EngineConfig)}
    unknown = set(engine_table) - known
    if unknown:
        raise GameStateError(f"Unknown configuration key(s) in {path}: {', '.join(sorted(unknown))}")
    return EngineConfig(**engine_table)


def rules_for(config: EngineConfig) -> PieceRules:
    return VARIANTS[config.variant]


def configure_logging(level: str = "INFO") -> None:
    """For applications embedding the engine. The library itself never adds handlers."""
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def setup(path: str = DEFAULT_CONFIG_PATH) -> EngineConfig:
    """Entry point for applications: read the configuration and set up logging at its `log_level`."""
    config = load_config(path)
    configure_logging(config.log_level)
    return config
