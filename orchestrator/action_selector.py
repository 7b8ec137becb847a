from api.base_client import BaseOracleClient
from models.action import ACTION_JSON_SCHEMA, Action, parse_action
from orchestrator.prompts import decision_prompt, decision_system_prompt
from utils.logger import get_logger

logger = get_logger(__name__)


class ActionSelector:
    """Asks the decision oracle for the next action and validates the reply."""

    def __init__(self, client: BaseOracleClient, model: str | None = None):
        self._client = client
        self._model = model

    async def next_action(self, question: str, evidence: str) -> Action:
        """
        Returns:
            Exactly one validated Action

        Raises:
            ActionValidationError: if the oracle's object violates the action schema
            OracleError: if the oracle call fails
        """
        kwargs = {"model": self._model} if self._model else {}
        raw = await self._client.generate_object(
            system=decision_system_prompt(),
            prompt=decision_prompt(question, evidence),
            schema=ACTION_JSON_SCHEMA,
            schema_name="next_action",
            **kwargs,
        )
        action = parse_action(raw)
        logger.debug(f"Decision oracle chose '{action.type}'", extra={"extra_fields": {"raw": raw}})
        return action
