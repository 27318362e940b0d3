# chunker.py
"""
Sentence-aligned chunker with overlap.

Text is split on sentence boundaries ('.', '!' or '?' followed by whitespace)
and sentences are packed into windows of roughly `chunk_size` characters. Each
new window starts with the last `overlap` characters of the previous one.
Sentences are never cut, so a single long sentence becomes its own oversized
chunk.

start_index / end_index are approximate positions in the source text, kept
compatible with the values already stored for existing documents. Do not use
them as exact slice indices.

Lengths, overlap and offsets are measured in Unicode code points (Python len),
not UTF-16 code units, so an emoji or other astral character counts as one
character. Text made only of BMP characters chunks identically either way.
"""
import re
from dataclasses import dataclass, asdict
from typing import List

SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")


class ChunkingConfigError(ValueError):
    pass


@dataclass(frozen=True)
class Chunk:
    text: str
    start_index: int
    end_index: int
    chunk_index: int

    def to_dict(self) -> dict:
        return asdict(self)


def split_sentences(text: str) -> List[str]:
    return SENTENCE_BOUNDARY.split(text)


def _validate(chunk_size: int, overlap: int):
    if chunk_size <= 0:
        raise ChunkingConfigError(f"chunk_size must be positive, got {chunk_size}")
    if overlap < 0:
        raise ChunkingConfigError(f"overlap must not be negative, got {overlap}")
    if overlap >= chunk_size:
        raise ChunkingConfigError(
            f"overlap ({overlap}) must be smaller than chunk_size ({chunk_size})"
        )


def chunk_text(text: str, chunk_size: int = 1000, overlap: int = 200) -> List[Chunk]:
    _validate(chunk_size, overlap)

    chunks: List[Chunk] = []
    current = ""
    start_index = 0
    chunk_index = 0

    for sentence in split_sentences(text or ""):
        potential = f"{current} {sentence}" if current else sentence

        if len(potential) > chunk_size and current:
            chunks.append(Chunk(
                text=current.strip(),
                start_index=start_index,
                end_index=start_index + len(current),
                chunk_index=chunk_index,
            ))
            chunk_index += 1

            # s[-0:] would be the whole string
            seed = current[-overlap:] if overlap else ""
            current = f"{seed} {sentence}"
            start_index = start_index + len(current) - overlap - len(sentence)
        else:
            current = potential

    if current.strip():
        chunks.append(Chunk(
            text=current.strip(),
            start_index=start_index,
            end_index=start_index + len(current),
            chunk_index=chunk_index,
        ))

    return chunks
