import argparse
import asyncio
import sys
import threading
import time

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from models.errors import ResearchError
from models.research_response import ResearchAnswer
from orchestrator.core import ResearchService, create_research_service_from_env


def show_loading_animation(stop_event: threading.Event) -> None:
    """
    Show a loading animation in the console.

    Args:
        stop_event: A threading.Event that will be set to stop the animation
    """
    while not stop_event.is_set():
        for char in '|/-\\':
            if stop_event.is_set():
                break
            sys.stdout.write(f'\r\033[93mResearching {char}\033[0m')
            sys.stdout.flush()
            time.sleep(0.1)

    # Clear the loading line
    sys.stdout.write('\r' + ' ' * 20 + '\r')
    sys.stdout.flush()


def print_answer(answer: ResearchAnswer) -> None:
    print(f"\n{answer.text}\n")
    if answer.is_final_attempt:
        print("\033[93m(step budget exhausted: best-effort answer)\033[0m")
    if answer.sources:
        print("=== Sources ===")
        for i, url in enumerate(answer.sources, 1):
            print(f"{i}. {url}")
    print(f"\n[{answer.steps}/{answer.max_steps} steps, {answer.latency_ms} ms]\n")


async def run_question(service: ResearchService, question: str, max_steps: int | None) -> None:
    stop_animation = threading.Event()
    animation = threading.Thread(target=show_loading_animation, args=(stop_animation,), daemon=True)
    animation.start()
    try:
        answer = await service.ask(question, max_steps=max_steps)
    finally:
        stop_animation.set()
        animation.join()
    print_answer(answer)


async def interactive(service: ResearchService, max_steps: int | None) -> None:
    print("\n=== DeepSearch ===")
    print("Type 'exit' to quit or 'help' for commands\n")

    while True:
        try:
            user_input = (await asyncio.to_thread(input, "Question: ")).strip()
        except (EOFError, KeyboardInterrupt):
            print("\nGoodbye!")
            return

        if not user_input:
            continue

        if user_input.lower() in ('exit', 'quit'):
            print("\nGoodbye!")
            return

        if user_input.lower() == 'help':
            print("\n=== Available Commands ===")
            print("help     - Show this help message")
            print("exit/quit - Exit the program\n")
            continue

        try:
            await run_question(service, user_input, max_steps)
        except ResearchError as e:
            print(f"\nError [{e.code}]: {e.message}")


async def run(args: argparse.Namespace) -> int:
    try:
        service = create_research_service_from_env()
    except ValueError as e:
        print(f"Error initializing research service: {str(e)}")
        return 1

    try:
        if args.question:
            try:
                await run_question(service, " ".join(args.question), args.max_steps)
            except ResearchError as e:
                print(f"\nError [{e.code}]: {e.message}")
                return 1
        else:
            await interactive(service, args.max_steps)
        return 0
    finally:
        await service.aclose()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Answer a question with iterative web research")
    parser.add_argument("question", nargs="*", help="Question to research (interactive if omitted)")
    parser.add_argument("--max-steps", type=int, default=None, help="Search/scrape budget for the run")
    args = parser.parse_args(argv)

    if args.max_steps is not None and args.max_steps < 1:
        parser.error("--max-steps must be at least 1")

    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
