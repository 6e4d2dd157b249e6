import os
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv, find_dotenv

REQUIRED_VARS = ("IMAGGA_API_KEY", "IMAGGA_API_SECRET", "DATABASE_URL")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class SettingsError(Exception):
    """Raised when the environment does not describe a usable configuration"""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("Invalid environment:\n" + "\n".join(f"  - {p}" for p in problems))


@dataclass(frozen=True)
class Settings:
    imagga_api_key: str
    imagga_api_secret: str
    database_url: str
    imagga_api_url: str = "https://api.imagga.com/v2"
    imagga_timeout: float = 30.0
    public_base_url: str = "http://localhost:8000"
    host: str = "127.0.0.1"
    port: int = 8000
    log_level: str = "DEBUG"
    log_dir: str | None = None


def _positive_number(env: Mapping[str, str], name: str, cast, default, problems: list[str]):
    value = env.get(name)
    if value is None or value == "":
        return default
    try:
        number = cast(value)
    except ValueError:
        problems.append(f"'{name}' value must be a number.")
        return default
    if not number > 0:
        problems.append(f"'{name}' value must be greater than 0.")
    return number


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Build the settings from the environment.
    Every problem is collected before raising so a misconfigured deployment
    can be fixed in one go.
    """
    if environ is None:
        load_dotenv(find_dotenv())
        environ = os.environ

    problems = []
    for v in REQUIRED_VARS:
        if not environ.get(v):
            problems.append(f"'{v}' must have a value.")

    timeout = _positive_number(environ, "IMAGGA_TIMEOUT", float, 30.0, problems)
    port = _positive_number(environ, "PORT", int, 8000, problems)

    log_level = environ.get("LOG_LEVEL") or "DEBUG"
    if log_level not in LOG_LEVELS:
        problems.append(f"'LOG_LEVEL' value must be one of the following: '{', '.join(LOG_LEVELS)}'")

    log_dir = environ.get("LOG_DIR") or None
    if log_dir is not None and not os.path.isdir(log_dir):
        problems.append("'LOG_DIR' directory must exist.")

    if problems:
        raise SettingsError(problems)

    return Settings(
        imagga_api_key=environ["IMAGGA_API_KEY"],
        imagga_api_secret=environ["IMAGGA_API_SECRET"],
        database_url=environ["DATABASE_URL"],
        imagga_api_url=(environ.get("IMAGGA_API_URL") or "https://api.imagga.com/v2").rstrip("/"),
        imagga_timeout=timeout,
        public_base_url=(environ.get("PUBLIC_BASE_URL") or "http://localhost:8000").rstrip("/"),
        host=environ.get("HOST") or "127.0.0.1",
        port=port,
        log_level=log_level,
        log_dir=log_dir,
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
