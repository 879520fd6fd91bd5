import tomllib
from dataclasses import dataclass
from pathlib import Path

from caption_scribe.errors import ConfigError

CONFIG_DIR = Path.home() / ".caption-scribe"
CONFIG_FILE = CONFIG_DIR / "config.toml"

DEFAULT_LANGUAGES = ("en",)
DEFAULT_PRESERVE_FORMATTING = False
DEFAULT_CONCURRENCY = 5
DEFAULT_TIMEOUT = 10.0
DEFAULT_RETRIES = 3


@dataclass(frozen=True)
class Config:
    languages: tuple[str, ...] = DEFAULT_LANGUAGES
    preserve_formatting: bool = DEFAULT_PRESERVE_FORMATTING
    concurrency: int = DEFAULT_CONCURRENCY
    timeout: float = DEFAULT_TIMEOUT
    retries: int = DEFAULT_RETRIES


def load_config(path: Path = CONFIG_FILE) -> Config:
    """Load configuration from TOML file, falling back to defaults for missing values."""
    if not path.exists():
        return Config()

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e

    defaults = data.get("defaults", {})
    http = data.get("http", {})

    return Config(
        languages=tuple(defaults.get("languages", DEFAULT_LANGUAGES)),
        preserve_formatting=defaults.get("preserve_formatting", DEFAULT_PRESERVE_FORMATTING),
        concurrency=defaults.get("concurrency", DEFAULT_CONCURRENCY),
        timeout=float(http.get("timeout", DEFAULT_TIMEOUT)),
        retries=http.get("retries", DEFAULT_RETRIES),
    )
