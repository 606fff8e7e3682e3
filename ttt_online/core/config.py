"""Runtime configuration, read from the environment."""

import os
from typing import Self


def _env_bool(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    DATABASE_URL = "sqlite:///ttt_online.db"
    SQL_ECHO = False
    # Board sizes accepted by create_game
    DEFAULT_BOARD_SIZE = 3
    MAX_BOARD_SIZE = 10
    # Attempts for read-validate-write loops (join / reset) before giving up on a busy record
    TRANSACTION_ATTEMPTS = 5
    LOG_LEVEL = "INFO"

    def __init__(self, **overrides: object) -> None:
        for key, value in overrides.items():
            if not hasattr(type(self), key):
                raise AttributeError(f"Unknown setting: {key!r}")
            setattr(self, key, value)

    @classmethod
    def from_env(cls) -> Self:
        return cls(
            DATABASE_URL=os.environ.get("DATABASE_URL") or cls.DATABASE_URL,
            SQL_ECHO=_env_bool("SQL_ECHO"),
            DEFAULT_BOARD_SIZE=int(os.environ.get("DEFAULT_BOARD_SIZE", cls.DEFAULT_BOARD_SIZE)),
            MAX_BOARD_SIZE=int(os.environ.get("MAX_BOARD_SIZE", cls.MAX_BOARD_SIZE)),
            TRANSACTION_ATTEMPTS=int(os.environ.get("TRANSACTION_ATTEMPTS", cls.TRANSACTION_ATTEMPTS)),
            LOG_LEVEL=os.environ.get("LOG_LEVEL", cls.LOG_LEVEL).upper(),
        )
