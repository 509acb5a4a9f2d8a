"""
Recursive Character Text Splitter

Splits normalized file content into overlapping, size-bounded chunks,
preferring paragraph, then line, then word boundaries, and falling back to
character boundaries only when no coarser separator fits.

Every chunk is an exact substring of the input; split_spans() exposes the
offsets so callers can reason about overlap.
"""

from collections import deque
from typing import List, Optional, Sequence, Tuple

Span = Tuple[int, int]

DEFAULT_SEPARATORS = ("\n\n", "\n", " ", "")


class RecursiveTextSplitter:
    """
    Greedy recursive splitter.

    Text is cut on the coarsest separator it contains (the separator stays
    attached to the piece before it). Pieces still longer than chunk_size are
    cut again with the next, finer separator. The resulting pieces are then
    merged left to right into chunks of at most chunk_size characters; when a
    chunk is emitted, its trailing pieces totalling at most chunk_overlap
    characters start the next chunk.
    """

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        separators: Optional[Sequence[str]] = None
    ):
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if chunk_overlap < 0 or chunk_overlap >= chunk_size:
            raise ValueError(
                f"chunk_overlap must be in [0, chunk_size), got {chunk_overlap}"
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.separators = tuple(separators) if separators is not None else DEFAULT_SEPARATORS

    def split_text(self, text: str) -> List[str]:
        """Split text into chunks (exact substrings, in order)."""
        return [text[start:end] for start, end in self.split_spans(text)]

    def split_spans(self, text: str) -> List[Span]:
        """Return (start, end) offsets of each chunk within text."""
        if not text:
            return []
        pieces = self._split_pieces(text, 0, len(text), self.separators)
        return self._merge_pieces(pieces)

    def _split_pieces(self, text: str, start: int, end: int, separators: Sequence[str]) -> List[Span]:
        """Cut text[start:end] into spans no longer than chunk_size."""
        if end - start <= self.chunk_size:
            return [(start, end)]

        for i, separator in enumerate(separators):
            if separator == "":
                return [(pos, pos + 1) for pos in range(start, end)]
            if text.find(separator, start, end) == -1:
                continue

            finer = separators[i + 1:]
            pieces: List[Span] = []
            piece_start = start
            while piece_start < end:
                idx = text.find(separator, piece_start, end)
                piece_end = end if idx == -1 else idx + len(separator)
                pieces.extend(self._split_pieces(text, piece_start, piece_end, finer))
                piece_start = piece_end
            return pieces

        # Separator list without "": hard cut
        return [(pos, min(pos + self.chunk_size, end)) for pos in range(start, end, self.chunk_size)]

    def _merge_pieces(self, pieces: List[Span]) -> List[Span]:
        chunks: List[Span] = []
        current = deque()
        total = 0

        for start, end in pieces:
            length = end - start
            if current and total + length > self.chunk_size:
                chunks.append((current[0][0], current[-1][1]))
                # Keep a tail of at most chunk_overlap chars that still leaves room for this piece
                while current and (total > self.chunk_overlap or total + length > self.chunk_size):
                    head_start, head_end = current.popleft()
                    total -= head_end - head_start
            current.append((start, end))
            total += length

        if current:
            chunks.append((current[0][0], current[-1][1]))

        return chunks
