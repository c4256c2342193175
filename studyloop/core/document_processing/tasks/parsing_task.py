"""
Material parsing task using LangChain PyPDFLoader.

Converts PDF course materials into LangChain Documents.

Dependencies: langchain_community.document_loaders
System role: Text extraction stage of material ingestion
"""

from pathlib import Path

from langchain_community.document_loaders import PyPDFLoader
from langchain_core.documents import Document

from studyloop.core.exceptions import ParsingError


class ParsingTask:
    """Parse PDF materials into LangChain Documents."""

    def parse(self, file_path: str, material_id: str | None = None) -> list[Document]:
        """
        Parse PDF document into LangChain Documents.

        Args:
            file_path: Path to PDF document
            material_id: Material being ingested (error context only)

        Returns:
            list[Document]: One document per page with extracted text

        Raises:
            ParsingError: When the file is missing, not a PDF, or has no text
        """
        path = Path(file_path)
        if not path.exists():
            raise ParsingError(f"File not found: {file_path}", material_id)

        if path.suffix.lower() != ".pdf":
            raise ParsingError(
                f"Unsupported file format: {path.suffix}. Only PDF files are supported.",
                material_id,
            )

        try:
            documents = PyPDFLoader(file_path).load()
        except Exception as e:
            raise ParsingError(f"Failed to parse PDF: {e}", material_id) from e

        documents = [doc for doc in documents if doc.page_content.strip()]
        if not documents:
            raise ParsingError("PDF document contains no extractable text", material_id)
        return documents
