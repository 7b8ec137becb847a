from abc import ABC, abstractmethod
from typing import Any, Dict


class BaseOracleClient(ABC):
    """
    Abstract base class for language-model clients used as oracles.
    The decision oracle needs structured output; the generation oracle needs text.
    """

    provider_name: str = "unknown"

    @abstractmethod
    def __init__(self, api_key: str, **kwargs):
        """
        Initialize the oracle client.

        Args:
            api_key: API key for the model service
            **kwargs: Additional provider-specific parameters
        """
        self.api_key = api_key
        self.model_name = kwargs.get('model_name')

    @abstractmethod
    async def generate_object(
        self,
        system: str,
        prompt: str,
        schema: Dict[str, Any],
        schema_name: str = "response",
        **kwargs,
    ) -> Dict[str, Any]:
        """
        Ask the model for one JSON object matching ``schema``.

        Returns:
            The decoded object. Callers validate it; this method only guarantees
            that it parsed as JSON.

        Raises:
            OracleError: if the call fails
            ActionValidationError: if the output is not a JSON object
        """

    @abstractmethod
    async def generate_text(self, system: str, prompt: str, **kwargs) -> str:
        """
        Ask the model for free-form text.

        Raises:
            OracleError: if the call fails
        """
