"""Workflow pattern log.

Successful multi-step plans are remembered as one text line each in the
configuration record's pattern log::

    - [2026-01-05T09:30:00Z] plan: create_account → create_contact

The log keeps the most recent entries only. Reading it returns the parsed
entries most-recent-first together with frequency insights over the whole
log.
"""

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from toolsmith_server.errors import CacheWriteError
from toolsmith_server.store import ConfigRecord, ConfigStore

logger = logging.getLogger(__name__)

MAX_PATTERN_ENTRIES = 50
DEFAULT_PATTERN_LIMIT = 10
TOP_INSIGHTS = 5
SEQUENCE_SEPARATOR = " → "

_LINE_PATTERN = re.compile(r"^- \[(?P<timestamp>[^\]]+)\] (?P<type>[^:]+): (?P<tools>.+)$")


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_pattern_line(timestamp: str, pattern_type: str, tools: list[str]) -> str:
    return f"- [{timestamp}] {pattern_type}: {SEQUENCE_SEPARATOR.join(tools)}"


@dataclass
class Pattern:
    timestamp: str
    type: str
    tools: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {"timestamp": self.timestamp, "type": self.type, "tools": list(self.tools)}


def parse_pattern_line(line: str) -> Pattern | None:
    """Parse one log line; None if it is malformed."""
    match = _LINE_PATTERN.match(line.strip())
    if not match:
        return None
    tools = [t.strip() for t in match.group("tools").split(SEQUENCE_SEPARATOR.strip())]
    tools = [t for t in tools if t]
    if not tools:
        return None
    return Pattern(
        timestamp=match.group("timestamp").strip(),
        type=match.group("type").strip(),
        tools=tools,
    )


@dataclass
class PatternReport:
    """Filtered patterns plus insights over the entire log."""

    patterns: list[Pattern] = field(default_factory=list)
    total_patterns: int = 0
    update_count: int = 0
    top_tools: list[tuple[str, int]] = field(default_factory=list)
    top_sequences: list[tuple[tuple[str, str], int]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "patterns": [p.to_dict() for p in self.patterns],
            "total_patterns": self.total_patterns,
            "update_count": self.update_count,
            "insights": {
                "top_tools": [
                    {"tool": tool, "count": count} for tool, count in self.top_tools
                ],
                "top_sequences": [
                    {"sequence": list(pair), "count": count}
                    for pair, count in self.top_sequences
                ],
            },
        }


class PatternRecorder:
    """Appends to and reads the bounded pattern log in the config store."""

    def __init__(self, store: ConfigStore, max_entries: int = MAX_PATTERN_ENTRIES) -> None:
        self.store = store
        self.max_entries = max_entries

    async def record(
        self,
        tools: list[str],
        pattern_type: str = "plan",
        timestamp: str | None = None,
    ) -> bool:
        """Append one pattern line, dropping the oldest beyond the cap.

        Failures are logged and reported through the return value only.

        Returns:
            bool: True if the pattern was persisted
        """
        if not tools:
            return False
        line = format_pattern_line(timestamp or utc_timestamp(), pattern_type, tools)

        def append(record: ConfigRecord) -> None:
            lines = [entry for entry in (record.pattern_log or "").splitlines() if entry.strip()]
            lines.append(line)
            record.pattern_log = "\n".join(lines[-self.max_entries :])
            record.pattern_updates = (record.pattern_updates or 0) + 1

        try:
            await self.store.modify(append)
        except CacheWriteError as e:
            logger.warning(f"Workflow pattern not recorded: {e.message}")
            return False
        except Exception as e:
            logger.warning(f"Workflow pattern not recorded: {e}", exc_info=True)
            return False

        logger.debug(f"Recorded workflow pattern: {line}")
        return True

    async def read(
        self, tool_filter: str | None = None, limit: int = DEFAULT_PATTERN_LIMIT
    ) -> PatternReport:
        """Read the log most-recent-first.

        Args:
            tool_filter: Case-insensitive substring a pattern's tool names must contain
            limit: Maximum patterns returned (clamped to 1..50)
        """
        limit = max(1, min(limit, MAX_PATTERN_ENTRIES))
        record = await self.store.load()

        parsed = []
        for line in reversed((record.pattern_log or "").splitlines()):
            pattern = parse_pattern_line(line)
            if pattern is not None:
                parsed.append(pattern)

        tool_counts: Counter[str] = Counter()
        pair_counts: Counter[tuple[str, str]] = Counter()
        for pattern in parsed:
            tool_counts.update(pattern.tools)
            pair_counts.update(zip(pattern.tools, pattern.tools[1:]))

        matches = parsed
        if tool_filter:
            needle = tool_filter.lower()
            matches = [
                p for p in parsed if any(needle in tool.lower() for tool in p.tools)
            ]

        return PatternReport(
            patterns=matches[:limit],
            total_patterns=len(parsed),
            update_count=record.pattern_updates,
            top_tools=tool_counts.most_common(TOP_INSIGHTS),
            top_sequences=pair_counts.most_common(TOP_INSIGHTS),
        )
