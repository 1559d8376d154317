"""
Configuration models for the system.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse


def _is_missing(value: Optional[str]) -> bool:
    """Check for an empty value or an unexpanded environment placeholder."""
    return not value or value.startswith("__MISSING_ENV_VAR_")


@dataclass(frozen=True)
class SearchProfile:
    """A single eBay search driving one scan cycle."""

    name: str
    term: str
    expected_price: Optional[float]
    postcode: str
    distance: str
    top_n: int = 5
    urgent_hours: float = 4
    unicorn_threshold: float = 85
    auction_only: bool = False
    enrich_all_top_n: bool = False

    @property
    def urgent_minutes(self) -> float:
        """Urgency window expressed in minutes."""
        return self.urgent_hours * 60

    def validate(self) -> bool:
        """Validate search profile values."""
        if not self.name or not self.name.strip():
            raise ValueError("Search profile name cannot be empty")

        if not self.term or not self.term.strip():
            raise ValueError(f"Search profile '{self.name}' must include a term")

        if self.expected_price is not None and self.expected_price <= 0:
            raise ValueError(
                f"Expected price for '{self.name}' must be positive"
            )

        if not isinstance(self.top_n, int) or self.top_n <= 0:
            raise ValueError(f"top_n for '{self.name}' must be a positive integer")

        if self.urgent_hours <= 0:
            raise ValueError(f"urgent_hours for '{self.name}' must be positive")

        if not (0 <= self.unicorn_threshold <= 100):
            raise ValueError(
                f"unicorn_threshold for '{self.name}' must be between 0 and 100"
            )

        return True


@dataclass
class ScraperConfig:
    """Configuration for the rendering scraper proxy."""

    api_key: str
    endpoint: str = "https://api.scraperapi.com"
    render: bool = True
    timeout: int = 60
    max_attempts: int = 3
    pre_delay: float = 3.0
    pre_delay_jitter: float = 4.0
    backoff_step: float = 5.0

    def validate(self) -> bool:
        """Validate scraper proxy configuration."""
        if _is_missing(self.api_key):
            raise ValueError(
                "Scraper API key is required. Please set the SCRAPER_API_KEY "
                "environment variable."
            )

        parsed_url = urlparse(self.endpoint)
        if not parsed_url.scheme or not parsed_url.netloc:
            raise ValueError(f"Invalid scraper endpoint URL: {self.endpoint}")

        if self.timeout <= 0:
            raise ValueError("Scraper timeout must be positive")

        if self.max_attempts <= 0:
            raise ValueError("Scraper max_attempts must be positive")

        if self.pre_delay < 0 or self.pre_delay_jitter < 0 or self.backoff_step < 0:
            raise ValueError("Scraper delays cannot be negative")

        return True


@dataclass
class LLMProviderConfig:
    """Configuration for the ranking LLM provider."""

    provider: str
    model: str
    api_key: str
    base_url: Optional[str] = None
    temperature: float = 0.2
    max_output_tokens: int = 8000
    timeout: int = 60
    max_attempts: int = 3
    backoff_step: float = 3.0

    def validate(self) -> bool:
        """Validate LLM provider configuration."""
        valid_providers = ["google", "openai", "anthropic"]
        if self.provider not in valid_providers:
            raise ValueError(f"LLM provider must be one of: {valid_providers}")

        if not self.model:
            raise ValueError("LLM configuration must include 'model'")

        if _is_missing(self.api_key):
            raise ValueError(
                "API key is required for the LLM provider. Please set the "
                "GEMINI_API_KEY (or provider specific) environment variable."
            )

        if not (0 <= self.temperature <= 2):
            raise ValueError("LLM temperature must be between 0 and 2")

        if self.max_attempts <= 0:
            raise ValueError("LLM max_attempts must be positive")

        return True


@dataclass
class NotifierConfig:
    """Configuration for the deal notification webhook."""

    webhook_url: str
    recipient_email: str
    timeout: int = 30
    max_retries: int = 3

    def validate(self) -> bool:
        """Validate notifier configuration."""
        if _is_missing(self.webhook_url):
            raise ValueError(
                "Notifier webhook URL is required. Please set the "
                "GOOGLE_SCRIPT_URL environment variable."
            )

        parsed_url = urlparse(self.webhook_url)
        if parsed_url.scheme not in ["http", "https"] or not parsed_url.netloc:
            raise ValueError(f"Invalid webhook URL format: {self.webhook_url}")

        if _is_missing(self.recipient_email) or "@" not in self.recipient_email:
            raise ValueError(
                "A valid recipient email is required. Please set the "
                "RECIPIENT_EMAIL environment variable."
            )

        return True


@dataclass
class SystemConfig:
    """Run-level settings."""

    search_base_url: str = "https://www.ebay.com.au"
    profile_delay: float = 5.0
    log_dir: str = "logs"
    log_level: str = "INFO"
    scan_log_path: str = "scan-log.txt"
    timezone: str = "Australia/Adelaide"
    prompt_template: Optional[str] = None

    def validate(self) -> bool:
        """Validate system settings."""
        parsed_url = urlparse(self.search_base_url)
        if not parsed_url.scheme or not parsed_url.netloc:
            raise ValueError(f"Invalid search base URL: {self.search_base_url}")

        if self.profile_delay < 0:
            raise ValueError("Profile delay cannot be negative")

        if self.log_level.upper() not in ["DEBUG", "INFO", "WARNING", "ERROR"]:
            raise ValueError(f"Unsupported log level: {self.log_level}")

        return True


@dataclass
class Configuration:
    """System configuration."""

    scraper: ScraperConfig
    llm_provider: LLMProviderConfig
    notifier: NotifierConfig
    searches: List[SearchProfile]
    system: SystemConfig = field(default_factory=SystemConfig)

    def validate(self) -> bool:
        """Validate system configuration."""
        if not isinstance(self.searches, list):
            raise ValueError("Searches must be a list")

        if not self.searches:
            raise ValueError("At least one search profile must be configured")

        names = [profile.name for profile in self.searches]
        if len(names) != len(set(names)):
            raise ValueError("Search profile names must be unique")

        # Validate nested configurations
        self.scraper.validate()
        self.llm_provider.validate()
        self.notifier.validate()
        self.system.validate()
        for profile in self.searches:
            profile.validate()

        return True

    def summary(self) -> Dict[str, Any]:
        """Non-secret overview used in startup logging."""
        return {
            "searches": [profile.name for profile in self.searches],
            "llm_provider": self.llm_provider.provider,
            "llm_model": self.llm_provider.model,
            "profile_delay": self.system.profile_delay,
        }
