import os
from dotenv import load_dotenv
from pathlib import Path
from enum import Enum

from utils.logger import get_logger

logger = get_logger(__name__)


class SearchProviderType(Enum):
    """Supported search providers."""
    TAVILY = "tavily"
    SERPER = "serper"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid integer for {name}={raw!r}; using default {default}")
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid number for {name}={raw!r}; using default {default}")
        return default


class Config:
    """Configuration management for the research loop."""

    def __init__(self):
        """Initialize configuration with environment variables."""
        # Load environment variables from .env file if it exists
        env_path = Path(__file__).parent.parent / '.env'
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)

        # Oracle (language model) configuration
        self.OPENAI_API_KEY = os.getenv('OPENAI_API_KEY')
        self.OPENAI_BASE_URL = os.getenv('OPENAI_BASE_URL') or None
        self.DECISION_MODEL = os.getenv('DECISION_MODEL', 'gpt-4o-mini')
        self.ANSWER_MODEL = os.getenv('ANSWER_MODEL') or self.DECISION_MODEL
        self.ORACLE_TIMEOUT_S = _float_env('ORACLE_TIMEOUT_S', 60.0)
        self.ORACLE_MAX_RETRIES = _int_env('ORACLE_MAX_RETRIES', 2)

        # Search configuration
        self.SEARCH_PROVIDER = os.getenv('SEARCH_PROVIDER', SearchProviderType.TAVILY.value).lower()
        self.TAVILY_API_KEY = os.getenv('TAVILY_API_KEY')
        self.SERPER_API_KEY = os.getenv('SERPER_API_KEY')
        self.SEARCH_RESULTS_COUNT = _int_env('SEARCH_RESULTS_COUNT', 3)

        # Loop configuration
        self.MAX_STEPS = _int_env('MAX_STEPS', 10)

        # Crawler configuration
        self.CRAWL_TIMEOUT_S = _float_env('CRAWL_TIMEOUT_S', 15.0)
        self.CRAWL_MAX_CONCURRENCY = _int_env('CRAWL_MAX_CONCURRENCY', 5)
        self.CRAWL_MAX_CONTENT_CHARS = _int_env('CRAWL_MAX_CONTENT_CHARS', 20000)

        # Shared stores
        self.REDIS_URL = os.getenv('REDIS_URL') or None
        self.CACHE_TTL_SECONDS = _int_env('CACHE_TTL_SECONDS', 60 * 60 * 6)

        # Entry-point rate limit
        self.RATE_LIMIT_MAX_REQUESTS = _int_env('RATE_LIMIT_MAX_REQUESTS', 1)
        self.RATE_LIMIT_WINDOW_MS = _int_env('RATE_LIMIT_WINDOW_MS', 20_000)
        self.RATE_LIMIT_MAX_RETRIES = _int_env('RATE_LIMIT_MAX_RETRIES', 3)
        self.RATE_LIMIT_KEY_PREFIX = os.getenv('RATE_LIMIT_KEY_PREFIX', 'research')

    def validate(self) -> bool:
        """
        Validate that all required configuration is present for the selected providers.

        Returns:
            bool: True if configuration is valid, False otherwise
        """
        if not self.OPENAI_API_KEY:
            logger.error("OPENAI_API_KEY is not set. Please set it in the .env file.")
            return False

        if self.SEARCH_PROVIDER == SearchProviderType.TAVILY.value:
            if not self.TAVILY_API_KEY:
                logger.error("TAVILY_API_KEY is not set. Please set it in the .env file.")
                return False
        elif self.SEARCH_PROVIDER == SearchProviderType.SERPER.value:
            if not self.SERPER_API_KEY:
                logger.error("SERPER_API_KEY is not set. Please set it in the .env file.")
                return False
        else:
            logger.error(
                f"Unknown SEARCH_PROVIDER '{self.SEARCH_PROVIDER}'. "
                f"Must be one of: {', '.join([e.value for e in SearchProviderType])}"
            )
            return False

        if self.MAX_STEPS < 1:
            logger.error(f"MAX_STEPS must be at least 1, got {self.MAX_STEPS}")
            return False

        return True

    def get_model_info(self) -> str:
        """
        Describe the configured oracles and search provider.

        Returns:
            str: Formatted string with model information
        """
        return (
            f"decision={self.DECISION_MODEL}, answer={self.ANSWER_MODEL}, "
            f"search={self.SEARCH_PROVIDER}"
        )
