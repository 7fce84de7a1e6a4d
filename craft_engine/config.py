from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Dict, Any
import yaml

DEFAULT_STATE_KEY = "craftGameData"
DEFAULT_DB_PATH = "craft_state.db"
DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_AUTOSAVE_INTERVAL = 5.0
TRUE_STRINGS = ("true", "yes", "on", "1")
FALSE_STRINGS = ("false", "no", "off", "0")


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    if config_path is None:
        return {}

    config_path = Path(config_path)
    if not config_path.exists():
        return {}

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def get_config_value(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    keys = key_path.split(".")
    value = config
    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default
    return value if value is not None else default


def parse_bool(value: Any, key_path: str = "") -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
    raise ValueError(f"Invalid boolean for {key_path or 'config value'}: {value!r}")


@dataclass
class EngineSettings:
    storage_backend: str = "sqlite"
    storage_path: str = DEFAULT_DB_PATH
    state_key: str = DEFAULT_STATE_KEY
    autosave_interval: float = DEFAULT_AUTOSAVE_INTERVAL
    model: str = DEFAULT_MODEL
    temperature: float = 0.7
    max_tokens: int = 200
    timeout: float = 30.0
    use_fallback: bool = True

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "EngineSettings":
        defaults = cls()
        return cls(
            storage_backend=get_config_value(config, "storage.backend", defaults.storage_backend),
            storage_path=str(get_config_value(config, "storage.path", defaults.storage_path)),
            state_key=get_config_value(config, "storage.state_key", defaults.state_key),
            autosave_interval=float(get_config_value(config, "engine.autosave_interval", defaults.autosave_interval)),
            model=get_config_value(config, "generation.model", defaults.model),
            temperature=float(get_config_value(config, "generation.temperature", defaults.temperature)),
            max_tokens=int(get_config_value(config, "generation.max_tokens", defaults.max_tokens)),
            timeout=float(get_config_value(config, "generation.timeout", defaults.timeout)),
            use_fallback=parse_bool(get_config_value(config, "generation.fallback", defaults.use_fallback),
                                    "generation.fallback"),
        )

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "EngineSettings":
        return cls.from_config(load_config(config_path))
