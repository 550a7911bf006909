"""Engine configuration: defaults, optional TOML file, environment overrides."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

_ENV_PREFIX = "PAGESHAPER_"

DEFAULTS: dict[str, Any] = {
    "words_per_minute": 200,
    "excerpt_length": 100,
    "navigation_limit": 20,
    "structural_limit": 100,
    "element_text_limit": 500,
    "structural_text_limit": 200,
    "max_suggestions": 10,
    "storage_dir": os.path.join(os.path.expanduser("~"), ".pageshaper"),
    "selection_color": "#2563eb",
    "highlight_color": "#2563eb",
    "prompt_token_budget": 6000,
}


@dataclass(frozen=True)
class EngineConfig:
    words_per_minute: int = DEFAULTS["words_per_minute"]
    excerpt_length: int = DEFAULTS["excerpt_length"]
    navigation_limit: int = DEFAULTS["navigation_limit"]
    structural_limit: int = DEFAULTS["structural_limit"]
    element_text_limit: int = DEFAULTS["element_text_limit"]
    structural_text_limit: int = DEFAULTS["structural_text_limit"]
    max_suggestions: int = DEFAULTS["max_suggestions"]
    storage_dir: str = DEFAULTS["storage_dir"]
    selection_color: str = DEFAULTS["selection_color"]
    highlight_color: str = DEFAULTS["highlight_color"]
    prompt_token_budget: int = DEFAULTS["prompt_token_budget"]

    @classmethod
    def from_mapping(cls, mapping: dict[str, Any]) -> "EngineConfig":
        """Build a config from a partial mapping; unknown keys are ignored."""
        data = dict(DEFAULTS)
        data.update({k: v for k, v in mapping.items() if k in DEFAULTS})
        return cls(
            words_per_minute=int(data["words_per_minute"]),
            excerpt_length=int(data["excerpt_length"]),
            navigation_limit=int(data["navigation_limit"]),
            structural_limit=int(data["structural_limit"]),
            element_text_limit=int(data["element_text_limit"]),
            structural_text_limit=int(data["structural_text_limit"]),
            max_suggestions=int(data["max_suggestions"]),
            storage_dir=os.path.expanduser(str(data["storage_dir"])),
            selection_color=str(data["selection_color"]),
            highlight_color=str(data["highlight_color"]),
            prompt_token_budget=int(data["prompt_token_budget"]),
        )


def _load_toml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("rb") as fh:
        return tomllib.load(fh)


def load_config(config_path: Path | str | None = None) -> EngineConfig:
    """
    Load configuration from defaults, an optional TOML file and the environment.

    The file contributes its ``[pageshaper]`` table; ``PAGESHAPER_*``
    environment variables win over the file.
    """
    path = Path(config_path) if config_path is not None else Path("pageshaper.toml")
    file_map = _load_toml(path).get("pageshaper", {})

    env_map: dict[str, Any] = {}
    for key, value in os.environ.items():
        if key.startswith(_ENV_PREFIX):
            env_map[key[len(_ENV_PREFIX):].lower()] = value

    return EngineConfig.from_mapping({**file_map, **env_map})
