import json
from typing import Any, Dict, Optional

import openai

from models.errors import ActionValidationError, OracleError
from utils.logger import get_logger

from .base_client import BaseOracleClient

logger = get_logger(__name__)


class OpenAIOracleClient(BaseOracleClient):
    """
    Oracle client for the OpenAI API and OpenAI-compatible endpoints.
    Transient failures are retried by the SDK (``max_retries``, exponential backoff);
    whatever still fails is raised as OracleError and aborts the run.
    """

    provider_name = "openai"

    def __init__(
        self,
        api_key: str,
        model_name: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        timeout_s: float = 60.0,
        max_retries: int = 2,
        **kwargs,
    ):
        """
        Initialize the OpenAI client.

        Args:
            api_key: The OpenAI API key
            model_name: Model used when a call doesn't override it
            base_url: Optional OpenAI-compatible endpoint
            timeout_s: Per-request timeout in seconds
            max_retries: SDK-level retries for connection errors, 429s and 5xx
            **kwargs: Additional keyword arguments
        """
        super().__init__(api_key, model_name=model_name, **kwargs)
        self.client = openai.AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_s,
            max_retries=max_retries,
        )

    async def generate_object(
        self,
        system: str,
        prompt: str,
        schema: Dict[str, Any],
        schema_name: str = "response",
        **kwargs,
    ) -> Dict[str, Any]:
        """
        Get a structured completion constrained by a JSON schema.

        Args:
            system: System instruction
            prompt: User prompt
            schema: JSON schema of the expected object
            schema_name: Name reported to the API for the schema
            **kwargs:
                - model: Override the default model for this call
                - temperature: Sampling temperature (default: 0)
        """
        model = kwargs.get('model', self.model_name)
        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                temperature=kwargs.get('temperature', 0),
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": schema_name, "schema": schema, "strict": True},
                },
            )
        except openai.OpenAIError as e:
            logger.error(f"Structured completion failed: {e}")
            raise OracleError(f"{self.provider_name}/{model}: {e}") from e

        content = response.choices[0].message.content or ""
        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            raise ActionValidationError(f"Oracle returned invalid JSON: {e}", raw=content) from e

        if not isinstance(parsed, dict):
            raise ActionValidationError("Oracle returned a non-object JSON value", raw=parsed)
        return parsed

    async def generate_text(self, system: str, prompt: str, **kwargs) -> str:
        """
        Get a free-form completion.

        Args:
            system: System instruction
            prompt: User prompt
            **kwargs:
                - model: Override the default model for this call
                - temperature: Sampling temperature (default: 0.3)
                - max_tokens: Maximum number of tokens to generate
        """
        model = kwargs.get('model', self.model_name)
        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                temperature=kwargs.get('temperature', 0.3),
                max_tokens=kwargs.get('max_tokens', openai.NOT_GIVEN),
            )
        except openai.OpenAIError as e:
            logger.error(f"Text completion failed: {e}")
            raise OracleError(f"{self.provider_name}/{model}: {e}") from e

        usage = getattr(response, 'usage', None)
        if usage is not None:
            logger.debug(
                "Completion usage",
                extra={
                    "extra_fields": {
                        "model": model,
                        "prompt_tokens": usage.prompt_tokens,
                        "completion_tokens": usage.completion_tokens,
                    }
                },
            )
        return response.choices[0].message.content or ""

    async def aclose(self) -> None:
        await self.client.close()
