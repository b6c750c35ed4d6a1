"""
Settings of the engine and the game loop.

Defaults cover a normal game from the standard starting position. Every field can be overridden
with an environment variable named JCHESS_<FIELD NAME>, e.g. JCHESS_LOG_LEVEL=debug.
"""

import os
from typing import Mapping, Optional, Self

from pydantic import BaseModel, Field, field_validator

from jchess.chess.board import STARTING_POSITION_FEN, is_valid_position

ENV_PREFIX = "JCHESS_"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class EngineSettings(BaseModel):
    log_level: str = "INFO"
    # board placement part of a FEN string
    starting_position: str = STARTING_POSITION_FEN
    bot_seed: Optional[int] = None
    auto_flip: bool = False
    # safety cap for automated play (two bots could otherwise shuffle pieces forever)
    max_plies: int = Field(default=500, gt=0)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level {value!r}, expected one of {LOG_LEVELS}")
        return level

    @field_validator("starting_position")
    @classmethod
    def validate_starting_position(cls, value: str) -> str:
        value = value.strip()
        if not is_valid_position(value):
            raise ValueError(f"Not a valid board placement: {value!r}")
        return value

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> Self:
        """Build settings from JCHESS_* variables (of `os.environ` unless another mapping is given)"""
        environ = os.environ if environ is None else environ
        overrides = {
            name: environ[ENV_PREFIX + name.upper()]
            for name in cls.model_fields
            if ENV_PREFIX + name.upper() in environ
        }
        return cls.model_validate(overrides)
