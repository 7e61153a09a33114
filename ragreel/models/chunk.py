from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class Chunk:
    """A bounded unit of source text with its id and metadata"""
    id: str
    text: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    sequence_index: int = 0  # position within the source document

    def to_payload(self) -> Dict[str, Any]:
        return {"id": self.id, "text": self.text, "metadata": self.metadata}


@dataclass
class SearchResult:
    chunk: Chunk
    score: float

    @property
    def text(self) -> str:
        return self.chunk.text

    @property
    def metadata(self) -> Dict[str, Any]:
        return self.chunk.metadata

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.chunk.id,
            "text": self.chunk.text,
            "metadata": self.chunk.metadata,
            "score": self.score,
        }
