"""Completion orchestration: provider routing and the assistants run stream."""

from .orchestrator import CompletionOrchestrator
from .streaming import MessageStream, RunEvent, parse_line, parse_run_stream

__all__ = [
    "CompletionOrchestrator",
    "MessageStream",
    "RunEvent",
    "parse_line",
    "parse_run_stream",
]
