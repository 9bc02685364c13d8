"""Colored workflow logger — ANSI-colored console output for article workflows.

Each create/update/delete request is logged as a sequence of stages so a
single request can be followed through the terminal:

    🟢 SKELETON / COMPLETE   skeleton persisted, workflow finished
    🔵 TAGS                  tag resolution
    🟡 UPLOAD                media upload
    🟣 PERSIST               writing the merged article
    ⚪ CLEANUP               best-effort file discards
    🟠 COMPENSATE            rolling back a failed create
    🔴 ERROR
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, NamedTuple


# ── ANSI Color Codes ─────────────────────────────────────────────────

RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
RED = "\033[91m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
BLUE = "\033[94m"
MAGENTA = "\033[95m"
CYAN = "\033[96m"
GRAY = "\033[90m"


class Stage(NamedTuple):
    label: str
    color: str
    icon: str


class WorkflowStage:
    """The stages an article workflow moves through."""

    SKELETON = Stage("SKELETON", GREEN, "📝")
    TAGS = Stage("TAGS", BLUE, "🏷️")
    UPLOAD = Stage("UPLOAD", YELLOW, "📁")
    PERSIST = Stage("PERSIST", MAGENTA, "💾")
    CLEANUP = Stage("CLEANUP", GRAY, "🧹")
    COMPENSATE = Stage("COMPENSATE", CYAN, "↩️")
    ERROR = Stage("ERROR", RED, "❌")
    COMPLETE = Stage("COMPLETE", GREEN, "✅")


def _with_details(text: str, details: dict[str, Any], tone: str = GRAY) -> str:
    if not details:
        return text
    joined = " | ".join(f"{k}={v}" for k, v in details.items())
    return f"{text} {tone}({joined}){RESET}"


class WorkflowLogger:
    """Stage-colored logger wrapping a standard ``logging.Logger``.

    Usage:
        wlog = WorkflowLogger("ArticleWorkflow")
        wlog.separator("Create article")
        with wlog.timed_step(WorkflowStage.UPLOAD, "Uploading media", files=3):
            uploaded = await coordinator.upload(batch)
    """

    def __init__(self, name: str):
        self._logger = logging.getLogger(name)

    def step_start(self, stage: Stage, message: str, **details: Any) -> None:
        text = f"{stage.color}{BOLD}{stage.icon} [{stage.label}]{RESET} {stage.color}{message}{RESET}"
        self._logger.info(_with_details(text, details))

    def step_complete(self, stage: Stage, message: str, **details: Any) -> None:
        text = f"{stage.color}{stage.icon} [{stage.label}]{RESET} {GREEN}✓ {message}{RESET}"
        self._logger.info(_with_details(text, details))

    def step_error(self, stage: Stage, message: str, error: BaseException | None = None) -> None:
        text = f"{RED}{BOLD}❌ [{stage.label}]{RESET} {RED}{message}{RESET}"
        if error is not None:
            text += f" {DIM}→ {type(error).__name__}: {error}{RESET}"
        self._logger.error(text)

    def detail(self, message: str, **details: Any) -> None:
        self._logger.info(_with_details(f"   {GRAY}├─ {message}{RESET}", details, tone=DIM))

    def separator(self, title: str = "") -> None:
        line = f"{'─' * 10} {title} {'─' * max(0, 50 - len(title))}" if title else "─" * 60
        self._logger.info(f"{GRAY}{line}{RESET}")

    @contextmanager
    def timed_step(self, stage: Stage, message: str, **details: Any):
        """Log start and end of a step with its elapsed time.

        The body may ``await``; it runs inside the enclosing coroutine.
        """
        self.step_start(stage, message, **details)
        started = time.perf_counter()
        try:
            yield
        except Exception as e:
            self.step_error(stage, f"{message} (failed after {time.perf_counter() - started:.2f}s)", error=e)
            raise
        self.step_complete(stage, f"{message} ({time.perf_counter() - started:.2f}s)", **details)
