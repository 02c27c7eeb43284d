import json
from pathlib import Path
from typing import Any, Dict

from constants import DEFAULT_MODEL_NAME

SETTINGS_DIR = Path.home() / ".fitsnap"
SETTINGS_PATH = SETTINGS_DIR / "settings.json"

# Bundled qt_material themes offered in the Settings dialog.
THEMES = (
    "dark_teal.xml",
    "dark_blue.xml",
    "dark_amber.xml",
    "dark_purple.xml",
    "light_teal.xml",
    "light_blue.xml",
)

DEFAULT_SETTINGS: Dict[str, str] = {
    "model_name": DEFAULT_MODEL_NAME,
    "theme": "dark_teal.xml",
}


def load_settings(path: Path = SETTINGS_PATH) -> Dict[str, str]:
    """Read persisted UI preferences from disk."""
    if not path.exists():
        return DEFAULT_SETTINGS.copy()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        merged = DEFAULT_SETTINGS.copy()
        if isinstance(data, dict):
            merged.update({k: str(v) for k, v in data.items() if k in DEFAULT_SETTINGS and v})
        if merged["theme"] not in THEMES:
            merged["theme"] = DEFAULT_SETTINGS["theme"]
        return merged
    except (OSError, json.JSONDecodeError):
        return DEFAULT_SETTINGS.copy()


def save_settings(settings: Dict[str, Any], path: Path = SETTINGS_PATH) -> None:
    """Persist UI preferences to disk. The API key is never written here."""
    path.parent.mkdir(parents=True, exist_ok=True)
    filtered = {
        key: str(settings.get(key) or default).strip()
        for key, default in DEFAULT_SETTINGS.items()
    }
    path.write_text(json.dumps(filtered, indent=2), encoding="utf-8")
