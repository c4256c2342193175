"""
Text chunking task using RecursiveCharacterTextSplitter.

Splits extracted material text into ordered chunks. Consecutive chunks of
a page overlap; each chunk records where it starts and how much of its
head repeats the previous chunk, so readers can stitch the page back
together without duplicated text.

Dependencies: langchain_text_splitters
System role: Chunking stage of material ingestion
"""

from langchain_core.documents import Document
from langchain_text_splitters import RecursiveCharacterTextSplitter

from studyloop.core.document_processing.models import TextChunk


class ChunkingTask:
    """Split documents into chunks using RecursiveCharacterTextSplitter."""

    def __init__(
        self,
        chunk_size: int = 800,
        chunk_overlap: int = 150,
    ) -> None:
        """
        Initialize chunking task with splitter configuration.

        Args:
            chunk_size: Maximum chunk size in characters
            chunk_overlap: Overlap between consecutive chunks
        """
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            add_start_index=True,
            length_function=len,
        )

    def split(self, documents: list[Document]) -> list[TextChunk]:
        """
        Split documents into ordered chunks with overlap bookkeeping.

        Pages are split one at a time; overlap never crosses a page.

        Args:
            documents: LangChain Documents in reading order

        Returns:
            list[TextChunk]: Chunks in reading order

        Raises:
            ValueError: When documents list is empty
        """
        if not documents:
            raise ValueError("No documents to chunk")

        chunks: list[TextChunk] = []
        for document in documents:
            previous_end = 0
            for piece in self._splitter.split_documents([document]):
                start = piece.metadata["start_index"]
                overlap = min(max(previous_end - start, 0), len(piece.page_content))
                chunks.append(
                    TextChunk(content=piece.page_content, start_index=start, overlap_chars=overlap)
                )
                previous_end = start + len(piece.page_content)
        return chunks

    def chunk_text(self, text: str) -> list[TextChunk]:
        """Split a single text into ordered chunks."""
        return self.split([Document(page_content=text)])
