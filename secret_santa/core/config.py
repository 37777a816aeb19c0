import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    log_level: str
    log_path: str
    state_path: str
    strict: bool
    seed: Optional[int]


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError(f"{name} must be a boolean flag, got {value!r}.")


def load_settings() -> Settings:
    log_level = os.getenv("LOG_LEVEL", "INFO")
    log_path = os.getenv("LOG_PATH", "logs/secret_santa.log")
    state_path = os.getenv("SANTA_STATE_PATH", "santa_state.json")
    strict = _parse_bool("SANTA_STRICT", os.getenv("SANTA_STRICT", "true"))
    raw_seed = os.getenv("SANTA_SEED")

    seed = None
    if raw_seed:
        try:
            seed = int(raw_seed)
        except ValueError:
            raise ValueError(f"SANTA_SEED must be an integer, got {raw_seed!r}.") from None

    return Settings(
        log_level=log_level,
        log_path=log_path,
        state_path=state_path,
        strict=strict,
        seed=seed,
    )
