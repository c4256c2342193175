"""
Text chunk model.

Dependencies: pydantic
System role: Return type for ChunkingTask.split()
"""

from pydantic import BaseModel, Field


class TextChunk(BaseModel):
    """One splitter chunk with its position in the source page."""

    content: str = Field(description="Chunk text, including any overlap with the previous chunk")
    start_index: int = Field(ge=0, description="Offset of the chunk within its source page")
    overlap_chars: int = Field(
        default=0,
        ge=0,
        description="Leading characters repeated from the previous chunk of the same page",
    )

    @property
    def new_content(self) -> str:
        """Chunk text without the part already covered by the previous chunk."""
        return self.content[self.overlap_chars:]
