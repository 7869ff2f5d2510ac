"""Unit tests for the workflow PatternRecorder."""

from unittest.mock import AsyncMock

import pytest

from toolsmith_server.errors import CacheWriteError
from toolsmith_server.orchestration import PatternRecorder
from toolsmith_server.orchestration.patterns import parse_pattern_line


def test_parse_pattern_line():
    """Test parsing of a well-formed line."""
    pattern = parse_pattern_line("- [2026-01-05T09:30:00Z] plan: a → b → c")

    assert pattern.timestamp == "2026-01-05T09:30:00Z"
    assert pattern.type == "plan"
    assert pattern.tools == ["a", "b", "c"]


@pytest.mark.parametrize(
    "line",
    ["", "garbage", "- 2026-01-05 plan: a → b", "- [2026-01-05] plan a → b"],
)
def test_malformed_lines_are_skipped(line):
    """Test lines missing the bracket or separator."""
    assert parse_pattern_line(line) is None


@pytest.mark.asyncio
async def test_record_appends_line_and_counts(config_store):
    """Test the stored line format and update counter."""
    recorder = PatternRecorder(config_store)

    assert await recorder.record(["create_account", "create_contact"], timestamp="T1")

    record = await config_store.load()
    assert record.pattern_log == "- [T1] plan: create_account → create_contact"
    assert record.pattern_updates == 1


@pytest.mark.asyncio
async def test_log_keeps_fifty_most_recent(config_store):
    """Test that 55 writes retain the 50 most recent in original order."""
    recorder = PatternRecorder(config_store)
    for i in range(55):
        await recorder.record([f"tool{i}", "next"], timestamp=f"T{i:02d}")

    record = await config_store.load()
    lines = record.pattern_log.splitlines()
    assert len(lines) == 50
    assert lines[0].startswith("- [T05]")
    assert lines[-1].startswith("- [T54]")
    assert record.pattern_updates == 55


@pytest.mark.asyncio
async def test_read_is_most_recent_first_with_insights(config_store):
    """Test read order, filtering and insights over the full log."""
    recorder = PatternRecorder(config_store)
    await recorder.record(["create_account", "create_contact"], timestamp="T1")
    await recorder.record(["create_account", "create_contact", "send_email"], timestamp="T2")
    await recorder.record(["list_lead", "update_lead"], timestamp="T3")

    report = await recorder.read()

    assert [p.timestamp for p in report.patterns] == ["T3", "T2", "T1"]
    assert report.total_patterns == 3
    assert report.update_count == 3
    assert report.top_tools[0] == ("create_account", 2)
    assert report.top_sequences[0] == (("create_account", "create_contact"), 2)

    filtered = await recorder.read(tool_filter="LEAD")
    assert [p.timestamp for p in filtered.patterns] == ["T3"]
    # Insights stay computed over the unfiltered log
    assert filtered.top_tools[0] == ("create_account", 2)


@pytest.mark.asyncio
async def test_read_limit_is_clamped(config_store):
    """Test the default and maximum limit."""
    recorder = PatternRecorder(config_store)
    for i in range(12):
        await recorder.record(["a", "b"], timestamp=f"T{i}")

    assert len((await recorder.read()).patterns) == 10
    assert len((await recorder.read(limit=500)).patterns) == 12
    assert len((await recorder.read(limit=0)).patterns) == 1


@pytest.mark.asyncio
async def test_read_skips_malformed_lines(config_store):
    """Test that garbage in the log is ignored."""
    await config_store.update(pattern_log="not a pattern\n- [T1] plan: a → b")

    report = await PatternRecorder(config_store).read()

    assert [p.tools for p in report.patterns] == [["a", "b"]]


@pytest.mark.asyncio
async def test_write_failure_is_logged_not_raised():
    """Test that store failures are swallowed."""
    store = AsyncMock()
    store.modify.side_effect = CacheWriteError("disk full")

    assert await PatternRecorder(store).record(["a", "b"]) is False
