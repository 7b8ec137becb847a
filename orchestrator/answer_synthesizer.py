from api.base_client import BaseOracleClient
from orchestrator.prompts import answer_prompt, answer_system_prompt
from utils.logger import get_logger

logger = get_logger(__name__)


class AnswerSynthesizer:
    """
    Produces the final answer text from accumulated evidence.

    ``is_final=True`` means the step budget ran out: the oracle is told to give a
    best-effort answer from incomplete evidence instead of declining.
    """

    def __init__(self, client: BaseOracleClient, model: str | None = None):
        self._client = client
        self._model = model

    async def answer(self, question: str, evidence: str, *, is_final: bool = False) -> str:
        kwargs = {"model": self._model} if self._model else {}
        logger.info("Synthesizing answer", extra={"extra_fields": {"is_final": is_final}})
        return await self._client.generate_text(
            system=answer_system_prompt(is_final),
            prompt=answer_prompt(question, evidence),
            **kwargs,
        )
