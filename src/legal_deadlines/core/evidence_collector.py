"""
Evidence Collector
Extracts text excerpts that justify a template match for audit and review
"""

import re
from typing import List

from .models import DeadlineTemplate

MAX_SNIPPETS = 3
MAX_SCANNED_LINES = 220
MAX_LINE_CHARS = 240
WINDOW_BEFORE = 80
WINDOW_AFTER = 160

_LINE_BREAK = re.compile(r'\r?\n')
_WHITESPACE = re.compile(r'\s+')


def collect_evidence_snippets(text: str, template: DeadlineTemplate) -> List[str]:
    """
    Collect up to three lines that mention the trigger or an event hint

    Falls back to a whitespace-collapsed window around the first trigger
    match when no single line matches (e.g. the trigger spans a line break).
    """

    lines = [line.strip() for line in _LINE_BREAK.split(text)]
    lines = [line for line in lines if line][:MAX_SCANNED_LINES]

    patterns = (template.trigger,) + tuple(template.base_event_hints)
    snippets = []
    for line in lines:
        if any(pattern.search(line) for pattern in patterns):
            snippets.append(line[:MAX_LINE_CHARS])
            if len(snippets) >= MAX_SNIPPETS:
                break

    if not snippets:
        match = template.trigger.search(text)
        if match:
            start = max(0, match.start() - WINDOW_BEFORE)
            end = min(len(text), match.start() + WINDOW_AFTER)
            snippets.append(_WHITESPACE.sub(' ', text[start:end]).strip())

    return snippets
