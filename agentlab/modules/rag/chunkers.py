"""
Document chunking strategies.

- doc: the whole document is one chunk and keeps the document id
- sentence: split after ``.``, ``!`` or ``?`` followed by whitespace
- fixed: consecutive windows of ``size`` characters
- sliding: windows of ``size`` characters advancing by ``size - overlap``

Every strategy except ``doc`` names chunks ``<doc_id>#c<n>`` (1-based).
"""

import re
from abc import ABC, abstractmethod

from .models import Chunk, RagDocument

SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")


def split_sentences(text: str) -> list[str]:
    return [part.strip() for part in SENTENCE_BOUNDARY.split(text) if part.strip()]


def split_fixed(text: str, size: int) -> list[str]:
    if size <= 0:
        return []
    return [text[i:i + size] for i in range(0, len(text), size)]


def split_sliding(text: str, size: int, overlap: int) -> list[str]:
    """
    Overlapping windows of ``size`` characters.

    Text no longer than ``size`` is a single window. When the last full
    window stops short of the end, one more window aligned to the end of the
    text is added, so every window has full length.
    """
    if size <= 0 or not text:
        return []
    if len(text) <= size:
        return [text]

    step = max(1, size - overlap)
    windows = [text[start:start + size] for start in range(0, len(text) - size + 1, step)]
    if (len(text) - size) % step:
        windows.append(text[-size:])
    return windows


class Chunker(ABC):
    strategy: str

    @abstractmethod
    def split(self, text: str) -> list[str]:
        """Split raw text into chunk texts."""

    def chunk(self, document: RagDocument) -> list[Chunk]:
        return [
            Chunk(chunk_id=f"{document.id}#c{index}", text=text, doc_id=document.id)
            for index, text in enumerate(self.split(document.text), start=1)
        ]

    def chunk_all(self, documents: list[RagDocument]) -> list[Chunk]:
        chunks: list[Chunk] = []
        for document in documents:
            chunks.extend(self.chunk(document))
        return chunks


class DocumentChunker(Chunker):
    """No chunking: one chunk per document."""

    strategy = "doc"

    def split(self, text: str) -> list[str]:
        return [text]

    def chunk(self, document: RagDocument) -> list[Chunk]:
        return [Chunk(chunk_id=document.id, text=document.text, doc_id=document.id)]


class SentenceChunker(Chunker):
    strategy = "sentence"

    def split(self, text: str) -> list[str]:
        return split_sentences(text)


class FixedSizeChunker(Chunker):
    strategy = "fixed"

    def __init__(self, size: int):
        self.size = size

    def split(self, text: str) -> list[str]:
        return split_fixed(text, self.size)


class SlidingWindowChunker(Chunker):
    strategy = "sliding"

    def __init__(self, size: int, overlap: int):
        self.size = size
        self.overlap = overlap

    def split(self, text: str) -> list[str]:
        return split_sliding(text, self.size, self.overlap)


def get_chunker(strategy: str, size: int = 200, overlap: int = 50) -> Chunker:
    """
    Build the chunker for ``strategy``.

    Raises:
        ValueError: If the strategy is unknown
    """
    if strategy == "doc":
        return DocumentChunker()
    if strategy == "sentence":
        return SentenceChunker()
    if strategy == "fixed":
        return FixedSizeChunker(size)
    if strategy == "sliding":
        return SlidingWindowChunker(size, overlap)
    raise ValueError(f"Unsupported chunking strategy: {strategy}")
