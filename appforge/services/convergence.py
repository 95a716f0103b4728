"""Completion marker detection for the coding agent's output."""

from __future__ import annotations

SUMMARY_OPEN = "<task_summary>"
SUMMARY_CLOSE = "</task_summary>"


def extract_task_summary(text: str | None) -> str | None:
    """Return the task summary if ``text`` carries a well-formed marker.

    The summary is the stripped text between the first opening tag and the
    first closing tag after it. A missing closing tag or an empty summary
    means the agent has not converged.
    """
    if not text:
        return None
    start = text.find(SUMMARY_OPEN)
    if start == -1:
        return None
    body_start = start + len(SUMMARY_OPEN)
    end = text.find(SUMMARY_CLOSE, body_start)
    if end == -1:
        return None
    summary = text[body_start:end].strip()
    return summary or None
