#!/usr/bin/env python3
"""
Run the research service over an eval dataset and print per-question scores.

Usage:
    python -m evals.run_evals --dataset regression
"""

import argparse
import asyncio
import sys

from dotenv import load_dotenv

load_dotenv()

from evals.datasets import DATASETS, EvalCase
from evals.scorers import SCORERS
from models.errors import ResearchError
from orchestrator.core import ResearchService, create_research_service_from_env
from utils.logger import get_logger

logger = get_logger(__name__)


async def score_case(service: ResearchService, case: EvalCase, max_steps: int | None) -> dict:
    try:
        answer = await service.ask(case.input, max_steps=max_steps)
    except ResearchError as e:
        logger.warning(f"Eval case failed: {e.message}", extra={"extra_fields": {"code": e.code}})
        return {"input": case.input, "error": e.code, "scores": {name: 0.0 for name in SCORERS}}

    scores = {name: scorer(answer.text, case.expected) for name, scorer in SCORERS.items()}
    return {"input": case.input, "steps": answer.steps, "scores": scores}


def summarize(results: list[dict]) -> dict[str, float]:
    if not results:
        return {name: 0.0 for name in SCORERS}
    return {
        name: sum(r["scores"][name] for r in results) / len(results)
        for name in SCORERS
    }


async def run(dataset: str, max_steps: int | None) -> list[dict]:
    service = create_research_service_from_env()
    results = []
    try:
        # Sequential: the entry rate limiter admits one run per window anyway
        for case in DATASETS[dataset]:
            result = await score_case(service, case, max_steps)
            results.append(result)
            scores = ", ".join(f"{k}={v:.0f}" for k, v in result["scores"].items())
            print(f"- {case.input}\n    {scores}" + (f" (error: {result['error']})" if "error" in result else ""))
    finally:
        await service.aclose()
    return results


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Score research answers on a dataset")
    parser.add_argument("--dataset", choices=sorted(DATASETS), default="regression")
    parser.add_argument("--max-steps", type=int, default=None)
    args = parser.parse_args(argv)

    print(f"=== Eval: {args.dataset} ===")
    results = asyncio.run(run(args.dataset, args.max_steps))

    print("\n=== Averages ===")
    for name, avg in summarize(results).items():
        print(f"{name}: {avg:.2f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
