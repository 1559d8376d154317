"""
Configuration management system for the eBay Deal Scanner.
"""

import copy
import json
import os
import re
from typing import Any, Dict, List, Optional

import yaml

from ..models.config import (
    Configuration,
    LLMProviderConfig,
    NotifierConfig,
    ScraperConfig,
    SearchProfile,
    SystemConfig,
)

ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")
MISSING_ENV_PREFIX = "__MISSING_ENV_VAR_"

DEFAULT_SEARCHES: List[Dict[str, Any]] = [
    {
        "name": "Maton Guitar",
        "term": "Maton guitar",
        "expected_price": 1000,
        "postcode": "5000",
        "distance": "200",
        "top_n": 5,
        "urgent_hours": 4,
        "unicorn_threshold": 85,
        "auction_only": False,
    },
    {
        "name": "Caravan",
        "term": "Caravan",
        "expected_price": 8000,
        "postcode": "5000",
        "distance": "200",
        "top_n": 5,
        "urgent_hours": 6,
        "unicorn_threshold": 85,
        "auction_only": False,
    },
]


class ConfigurationManager:
    """Manages loading and validation of scanner configuration."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file. If None, standard
                locations are searched and, failing that, the built-in
                template is read from the environment.
        """
        self.config_path = config_path or self._find_config_file()

    def _find_config_file(self) -> Optional[str]:
        """Find the configuration file in standard locations."""
        possible_paths = [
            "config/config.yaml",
            "config/config.yml",
            "config/config.json",
            "config.yaml",
            "config.yml",
            "config.json",
        ]

        for path in possible_paths:
            if os.path.exists(path):
                return path

        return None

    def _read_raw_config(self) -> Dict[str, Any]:
        if self.config_path is None:
            return self.get_config_template()

        if not os.path.exists(self.config_path):
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, "r", encoding="utf-8") as f:
            if self.config_path.endswith(".json"):
                raw_config = json.load(f)
            else:
                raw_config = yaml.safe_load(f)

        if raw_config is None:
            return {}
        if not isinstance(raw_config, dict):
            raise ValueError("Configuration root must be a mapping")
        return raw_config

    def load_config(self) -> Configuration:
        """
        Load configuration from file.

        Returns:
            Configuration object with validated settings.

        Raises:
            ValueError: If configuration is invalid or file cannot be read.
            FileNotFoundError: If configuration file doesn't exist.
        """
        try:
            raw_config = self._read_raw_config()
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}") from e
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file: {e}") from e

        # Expand environment variables
        raw_config = self._expand_env_vars(raw_config)

        config = self._parse_config(raw_config)
        config.validate()

        return config

    def _expand_env_vars(self, obj: Any) -> Any:
        """
        Recursively expand ``${VAR}`` references.

        Unset variables become a ``__MISSING_ENV_VAR_<name>`` marker so that
        validation can report which required setting is absent.
        """
        if isinstance(obj, dict):
            return {key: self._expand_env_vars(value) for key, value in obj.items()}
        elif isinstance(obj, list):
            return [self._expand_env_vars(item) for item in obj]
        elif isinstance(obj, str):
            return ENV_VAR_PATTERN.sub(
                lambda m: os.getenv(m.group(1), f"{MISSING_ENV_PREFIX}{m.group(1)}"),
                obj,
            )
        else:
            return obj

    def _parse_search(self, data: Dict[str, Any]) -> SearchProfile:
        expected_price = data.get("expected_price")
        return SearchProfile(
            name=str(data["name"]),
            term=str(data["term"]),
            expected_price=float(expected_price) if expected_price is not None else None,
            postcode=str(data.get("postcode", "")),
            distance=str(data.get("distance", "")),
            top_n=int(data.get("top_n", 5)),
            urgent_hours=float(data.get("urgent_hours", 4)),
            unicorn_threshold=float(data.get("unicorn_threshold", 85)),
            auction_only=bool(data.get("auction_only", False)),
            enrich_all_top_n=bool(data.get("enrich_all_top_n", False)),
        )

    def _parse_config(self, raw_config: Dict[str, Any]) -> Configuration:
        """Parse raw configuration dictionary into Configuration object."""
        try:
            scraper_data = dict(raw_config.get("scraper") or {})
            scraper = ScraperConfig(
                api_key=scraper_data.pop("api_key", ""), **scraper_data
            )

            llm_data = dict(raw_config.get("llm_provider") or {})
            llm_provider = LLMProviderConfig(
                provider=llm_data.pop("provider", "google"),
                model=llm_data.pop("model", "gemini-3-flash-preview"),
                api_key=llm_data.pop("api_key", ""),
                **llm_data,
            )

            notifier_data = dict(raw_config.get("notifier") or {})
            notifier = NotifierConfig(
                webhook_url=notifier_data.pop("webhook_url", ""),
                recipient_email=notifier_data.pop("recipient_email", ""),
                **notifier_data,
            )

            system = SystemConfig(**(raw_config.get("system") or {}))

            searches_data = raw_config.get("searches")
            if searches_data is None:
                searches_data = DEFAULT_SEARCHES

            return Configuration(
                scraper=scraper,
                llm_provider=llm_provider,
                notifier=notifier,
                searches=[self._parse_search(item) for item in searches_data],
                system=system,
            )

        except KeyError as e:
            raise ValueError(f"Missing required configuration key: {e}") from e
        except TypeError as e:
            raise ValueError(f"Unknown or malformed configuration setting: {e}") from e

    def get_config_template(self) -> Dict[str, Any]:
        """
        Get a template configuration dictionary.

        Returns:
            Dictionary with example configuration structure.
        """
        return {
            "scraper": {
                "api_key": "${SCRAPER_API_KEY}",
                "render": True,
                "timeout": 60,
            },
            "llm_provider": {
                "provider": "google",
                "model": "gemini-3-flash-preview",
                "api_key": "${GEMINI_API_KEY}",
                "temperature": 0.2,
            },
            "notifier": {
                "webhook_url": "${GOOGLE_SCRIPT_URL}",
                "recipient_email": "${RECIPIENT_EMAIL}",
            },
            "system": {
                "profile_delay": 5.0,
                "scan_log_path": "scan-log.txt",
                "timezone": "Australia/Adelaide",
            },
            "searches": copy.deepcopy(DEFAULT_SEARCHES),
        }
