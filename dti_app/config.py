"""Configuration helpers for the Dress to Impress outfit engine."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Optional

DEFAULT_SPECIES_ID = "1"
DEFAULT_COLOR_ID = "8"
DEFAULT_POSE = "HAPPY_FEM"
DEFAULT_BASE_URL = "https://impress-2020.openneo.net"


@dataclass
class AppConfig:
    """Configuration values for the outfit engine.

    Unsaved outfits fall back to the default species, color and pose when the
    URL does not name them, which is the Blue Acara in its happy feminine pose.
    """

    base_url: str = DEFAULT_BASE_URL
    catalog_db_path: Optional[str] = None
    outfit_store_backend: str = "json"
    outfit_store_path: Optional[str] = None
    default_species_id: str = DEFAULT_SPECIES_ID
    default_color_id: str = DEFAULT_COLOR_ID
    default_pose: str = DEFAULT_POSE
    log_level: str = "INFO"
    # Zone labels and item names are ordered with this LC_COLLATE locale; "" means the host default.
    collation_locale: str = ""
    environment: str | None = None

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default and is merged with environment variables, which take priority.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("DTI_CONFIG_DIR", "config/environments"))
        yaml_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            yaml_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            env_key = key.upper()
            return os.getenv(env_key, yaml_config.get(key, default))

        base_url = get_value("base_url", DEFAULT_BASE_URL)
        catalog_db_path = get_value("catalog_db_path")
        outfit_store_backend = get_value("outfit_store_backend", "json")
        outfit_store_path = get_value("outfit_store_path")
        default_species_id = get_value("default_species_id", DEFAULT_SPECIES_ID)
        default_color_id = get_value("default_color_id", DEFAULT_COLOR_ID)
        default_pose = get_value("default_pose", DEFAULT_POSE)
        log_level = get_value("log_level", "INFO")
        collation_locale = get_value("collation_locale", "")

        return cls(
            base_url=str(base_url or DEFAULT_BASE_URL).rstrip("/"),
            catalog_db_path=catalog_db_path,
            outfit_store_backend=str(outfit_store_backend or "json"),
            outfit_store_path=outfit_store_path,
            default_species_id=str(default_species_id or DEFAULT_SPECIES_ID),
            default_color_id=str(default_color_id or DEFAULT_COLOR_ID),
            default_pose=str(default_pose or DEFAULT_POSE),
            log_level=str(log_level or "INFO"),
            collation_locale=str(collation_locale or ""),
            environment=env_name,
        )

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a minimal YAML/INI-style config without external dependencies."""

        config: dict[str, str] = {}
        for line in path.read_text().splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if (value.startswith("\"") and value.endswith("\"")) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            config[key.strip()] = value
        return config
