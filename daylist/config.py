from pathlib import Path

import yaml

DAYLIST_DIR = Path.home() / ".daylist"
DB_PATH = DAYLIST_DIR / "store.db"
CONFIG_PATH = DAYLIST_DIR / "config.yaml"
BACKUP_DIR = DAYLIST_DIR / "backups"
LOG_PATH = DAYLIST_DIR / "daylist.log"

DEFAULT_DAY_CHECK_INTERVAL = 60
DEFAULT_WEEK_CHECK_INTERVAL = 60 * 60


class Config:
    """Single-instance config manager. Load once, cache in memory."""

    _instance: "Config | None" = None
    _data: dict[str, object]

    def __new__(cls) -> "Config":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._data = {}
            cls._instance._load()
        return cls._instance

    def _load(self) -> None:
        """Load config from disk."""
        if not CONFIG_PATH.exists():
            self._data = {}
            return
        try:
            with CONFIG_PATH.open() as f:
                self._data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError):
            self._data = {}

    def reload(self) -> None:
        self._load()

    def _save(self) -> None:
        """Persist config to disk."""
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        with CONFIG_PATH.open("w") as f:
            yaml.dump(self._data, f, default_flow_style=False, allow_unicode=True)

    def get(self, key: str, default: object = None) -> object:
        """Get config value."""
        return self._data.get(key, default)

    def set(self, key: str, value: object) -> None:
        """Set config value and persist."""
        self._data[key] = value
        self._save()


_config = Config()


def _positive_int(key: str, default: int) -> int:
    val = _config.get(key)
    try:
        number = int(val) if val is not None else default
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


def get_log_level() -> str:
    """Logging level name for the app log (default INFO)."""
    val = _config.get("log_level")
    return str(val).strip().upper() if val else "INFO"


def get_day_check_interval() -> int:
    """Seconds between daily rollover checks."""
    return _positive_int("day_check_interval", DEFAULT_DAY_CHECK_INTERVAL)


def get_week_check_interval() -> int:
    """Seconds between weekly rollover checks."""
    return _positive_int("week_check_interval", DEFAULT_WEEK_CHECK_INTERVAL)


def get_export_dir() -> Path:
    """Directory markdown exports are written to."""
    val = _config.get("export_dir")
    return Path(str(val)).expanduser() if val else Path.home() / "Downloads"


def set_export_dir(path: Path) -> None:
    _config.set("export_dir", str(path))
