"""Question sets for scoring research runs."""

from dataclasses import dataclass


@dataclass(frozen=True)
class EvalCase:
    input: str
    expected: str


REGRESSION_DATA = [
    EvalCase("What is the capital of France?", "Paris"),
    EvalCase("What is the largest planet in our solar system?", "Jupiter"),
    EvalCase("Who wrote the novel '1984'?", "George Orwell"),
    EvalCase("What is the speed of light in a vacuum?", "299,792,458 meters per second"),
    EvalCase("What is the chemical symbol for gold?", "Au"),
    EvalCase("In which year did the Berlin Wall fall?", "1989"),
    EvalCase("What is the smallest unit of matter?", "Atom"),
    EvalCase("Who painted the Mona Lisa?", "Leonardo da Vinci"),
    EvalCase("What is the currency of Japan?", "Yen"),
    EvalCase("What is the tallest mountain in the world?", "Mount Everest"),
]

# Time-sensitive questions; expected answers go stale and need periodic refresh
DEV_DATA = [
    EvalCase(
        "What is the latest version of TypeScript?",
        "The current TypeScript version is 5.8.3",
    ),
    EvalCase(
        "What are the main features of Next.js 15?",
        "React 19 Support: Full support for React 19 including new hooks like useActionState, "
        "useFormStatus, and useOptimistic.\n"
        "Caching Improvements: GET Route Handlers and Client Router Cache no longer cached by "
        "default, with opt-in caching available.\n"
        "Async Request APIs: Request-specific APIs like headers, cookies, params, and "
        "searchParams are now asynchronous.\n"
        "<Form> Component: New component enhances HTML forms with prefetching, client-side "
        "navigation, and progressive enhancement.\n"
        "Turbopack Dev (Stable): Turbopack is now stable for development.\n"
        "Static Route Indicator: Visual indicator shows static routes during development.\n"
        "instrumentation.js API (Stable): Provides server lifecycle observability.\n"
        "TypeScript Support: Next.js now supports TypeScript for next.config.ts files.\n"
        "ESLint 9 Support: Includes support for ESLint 9.\n"
        "Enhanced Security: Improved Server Actions security with unguessable endpoints.\n"
        "Optimized Bundling: Enhanced bundling of external packages for better performance.",
    ),
]

DATASETS = {
    "regression": REGRESSION_DATA,
    "dev": DEV_DATA,
}
