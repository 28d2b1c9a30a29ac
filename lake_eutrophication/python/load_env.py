# load_env.py — .env loading and typed LAKE_* lookups

import os
from pathlib import Path
from typing import Callable, Optional

ENV_CANDIDATES = (".env", "../.env", "lake_eutrophication/.env")


def load_dotenv(path: str = ".env") -> None:
    """Copy KEY=value pairs into os.environ; '# KEY=value' lines count too."""
    env_file = Path(path)
    if not env_file.is_file():
        return
    for raw in env_file.read_text(encoding="utf-8").splitlines():
        entry = raw.strip().lstrip("#").strip()
        key, sep, val = entry.partition("=")
        key, val = key.strip(), val.strip()
        if sep and key and val:
            os.environ[key] = val


def find_env_path() -> str:
    """First existing .env among the project locations, else '.env'."""
    return next((name for name in ENV_CANDIDATES if Path(name).exists()), ".env")


def env_value(name: str, default, cast: Callable = float):
    """Environment lookup: unset or empty gives default, else cast(value)."""
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be {cast.__name__}-valued, got {raw!r}.") from e


def env_seed(name: str, default: Optional[int]) -> Optional[int]:
    """Seed lookup where 'none' (any case) means unseeded; empty keeps default."""
    if os.environ.get(name, "").strip().lower() == "none":
        return None
    return env_value(name, default, int)
