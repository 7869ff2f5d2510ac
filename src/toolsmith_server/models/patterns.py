"""Pydantic models for workflow pattern responses."""

from pydantic import BaseModel, Field


class PatternResponse(BaseModel):
    """One recorded workflow pattern."""

    timestamp: str = Field(..., description="ISO 8601 UTC timestamp")
    type: str = Field(..., description="Pattern type, e.g. 'plan'")
    tools: list[str] = Field(..., description="Tool names in execution order")


class ToolFrequency(BaseModel):
    tool: str
    count: int


class SequenceFrequency(BaseModel):
    sequence: list[str] = Field(..., description="Two adjacent tool names")
    count: int


class PatternInsights(BaseModel):
    """Frequencies over the entire pattern log."""

    top_tools: list[ToolFrequency] = Field(default_factory=list)
    top_sequences: list[SequenceFrequency] = Field(default_factory=list)


class PatternsResponse(BaseModel):
    """Response model for reading the pattern log."""

    patterns: list[PatternResponse] = Field(
        default_factory=list, description="Matching patterns, most recent first"
    )
    total_patterns: int = Field(..., description="Entries in the whole log")
    update_count: int = Field(..., description="Number of writes to the log so far")
    insights: PatternInsights = Field(default_factory=PatternInsights)
