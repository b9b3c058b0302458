import os
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import yaml

from dodgem.errors import ConfigError

# ──────────────────────────────────────────────────────────
# CONSTANTS
# ──────────────────────────────────────────────────────────

APP_ID = "com.jamiestraw.dodgem"

DEFAULT_INTERVAL = 15

EMAIL_RE          = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
NON_WHITESPACE_RE = re.compile(r"^\S(?:.*\S)?$")
INTERVAL_RE       = re.compile(r"^\d+$")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_SETTINGS = {
    "browser": {"headless": True, "timeout_seconds": 30},
    "logging": {"level": "INFO"},
}


def app_dir() -> Path:
    """Preferences directory, outside the working directory."""
    override = os.environ.get("DODGEM_HOME")
    if override:
        return Path(override)
    return Path.home() / ".config" / APP_ID


# ──────────────────────────────────────────────────────────
# RUN CONFIG
# ──────────────────────────────────────────────────────────

class Target(Enum):
    ALL    = "all"
    OLDEST = "oldest"

    @property
    def description(self) -> str:
        return "the oldest trade" if self is Target.OLDEST else "all trades"


@dataclass(frozen=True)
class RunConfig:
    target: Target = Target.ALL
    interval_minutes: int = DEFAULT_INTERVAL

    def __post_init__(self):
        if self.interval_minutes < 1:
            raise ValueError("interval_minutes must be a positive whole number")


def parse_interval(value: str) -> int:
    value = str(value)
    if not INTERVAL_RE.fullmatch(value) or int(value) < 1:
        raise ValueError(f"Invalid interval {value!r} — expected a positive whole number of minutes")
    return int(value)


# ──────────────────────────────────────────────────────────
# CREDENTIALS
# ──────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Credentials:
    username: str
    email_address: str
    password: str


def validate_credentials(creds: Credentials) -> None:
    if not NON_WHITESPACE_RE.match(creds.username or ""):
        raise ConfigError("Please enter a valid username")
    if not EMAIL_RE.match(creds.email_address or ""):
        raise ConfigError("Please enter a valid email address")
    if not NON_WHITESPACE_RE.match(creds.password or ""):
        raise ConfigError("Please enter a valid password")


class CredentialStore:
    """One credential record kept as YAML in the preferences directory."""

    def __init__(self, path: Path = None):
        self.path = Path(path) if path else app_dir() / "credentials.yaml"

    def get(self) -> Credentials | None:
        if not self.path.exists():
            return None
        with open(self.path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not data:
            return None

        missing = [k for k in ("username", "email_address", "password") if not data.get(k)]
        if missing:
            raise ConfigError(
                f"Missing {', '.join(missing)} in {self.path} — run  dodgem login  to fix it"
            )
        return Credentials(
            username=str(data["username"]),
            email_address=str(data["email_address"]),
            password=str(data["password"]),
        )

    def set(self, creds: Credentials) -> None:
        validate_credentials(creds)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "username":      creds.username,
            "email_address": creds.email_address,
            "password":      creds.password,
        }
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        # An existing file keeps its old mode through os.open
        os.chmod(self.path, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, allow_unicode=True, sort_keys=False)


# ──────────────────────────────────────────────────────────
# SETTINGS
# ──────────────────────────────────────────────────────────

def load_settings(path: Path = None) -> dict:
    path = Path(path) if path else app_dir() / "settings.yaml"
    settings = {section: dict(values) for section, values in DEFAULT_SETTINGS.items()}
    if not path.exists():
        return settings

    with open(path, encoding="utf-8") as f:
        loaded = yaml.safe_load(f) or {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path} must contain a mapping")

    for section, values in loaded.items():
        if isinstance(values, dict):
            settings.setdefault(section, {}).update(values)

    timeout = settings["browser"].get("timeout_seconds")
    if not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigError("browser.timeout_seconds must be a positive number")

    level = settings["logging"].get("level")
    if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
        raise ConfigError(f"logging.level must be one of {', '.join(LOG_LEVELS)}")
    return settings
