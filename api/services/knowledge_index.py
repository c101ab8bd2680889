"""Preloaded embedding index over the ECM guidance corpus.

The index is a JSON file holding a list of ``{"text": ..., "embedding": [...]}``
records. One :class:`KnowledgeIndexHandle` is created per application and
owns the loaded :class:`KnowledgeIndex`. It is preloaded in a background
thread at startup; a request arriving before the preload finished (or after
it failed) loads the index through :meth:`KnowledgeIndexHandle.get` in a worker
thread so the event loop keeps serving other requests.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Sequence

import numpy as np

from .llm_client import embed_text

logger = logging.getLogger(__name__)

DEFAULT_INDEX_PATH = Path("data") / "knowledge_index.json"
DEFAULT_LIMIT = 10000
DEFAULT_TOP_K = 10
MIN_SCORE = 0.03
MAX_CONTEXT_CHARS = 50000


class KnowledgeIndexError(RuntimeError):
    """Raised when the index file is missing or malformed."""


@dataclass(frozen=True)
class Match:
    text: str
    score: float


@dataclass(frozen=True)
class RetrievedContext:
    text: str
    count: int


class KnowledgeIndex:
    def __init__(self, texts: Sequence[str], vectors: np.ndarray) -> None:
        matrix = np.asarray(vectors, dtype=np.float32)
        if matrix.ndim != 2 or matrix.shape[0] != len(texts):
            raise KnowledgeIndexError(
                f"expected {len(texts)} embedding rows, got array of shape {matrix.shape}"
            )
        norms = np.linalg.norm(matrix, axis=1, keepdims=True)
        norms[norms == 0] = 1.0
        self._texts = list(texts)
        self._vectors = matrix / norms

    def __len__(self) -> int:
        return len(self._texts)

    @property
    def dimensions(self) -> int:
        return int(self._vectors.shape[1]) if len(self) else 0

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]], limit: Optional[int] = None) -> "KnowledgeIndex":
        texts: List[str] = []
        vectors: List[List[float]] = []
        for i, record in enumerate(records):
            if limit is not None and i >= limit:
                break
            try:
                texts.append(str(record["text"]))
                vectors.append([float(v) for v in record["embedding"]])
            except (KeyError, TypeError, ValueError) as exc:
                raise KnowledgeIndexError(f"record {i} is malformed: {exc}") from exc
        if not texts:
            return cls([], np.zeros((0, 0), dtype=np.float32))
        if len({len(v) for v in vectors}) != 1:
            raise KnowledgeIndexError("embeddings have inconsistent dimensions")
        return cls(texts, np.array(vectors, dtype=np.float32))

    @classmethod
    def load(cls, path: Path, limit: Optional[int] = None) -> "KnowledgeIndex":
        if not path.exists():
            raise KnowledgeIndexError(f"knowledge index not found at {path}")
        try:
            records = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise KnowledgeIndexError(f"knowledge index at {path} is not valid JSON: {exc}") from exc
        if not isinstance(records, list):
            raise KnowledgeIndexError("knowledge index must be a JSON list of records")
        return cls.from_records(records, limit=limit)

    def search(self, query_vector: Sequence[float], top_k: int = DEFAULT_TOP_K) -> List[Match]:
        """Best ``top_k`` passages by cosine similarity, highest first."""

        if not len(self) or top_k <= 0:
            return []
        query = np.asarray(query_vector, dtype=np.float32)
        if query.shape != (self.dimensions,):
            raise KnowledgeIndexError(
                f"query has {query.shape[0] if query.ndim else 0} dimensions, index has {self.dimensions}"
            )
        norm = float(np.linalg.norm(query))
        if norm == 0:
            return []
        scores = self._vectors @ (query / norm)
        order = np.argsort(-scores)[:top_k]
        return [Match(text=self._texts[i], score=float(scores[i])) for i in order]


class KnowledgeIndexHandle:
    """Owns the application's single :class:`KnowledgeIndex`."""

    def __init__(self, path: Optional[Path] = None, limit: Optional[int] = None) -> None:
        self.path = path or Path(os.getenv("KNOWLEDGE_INDEX_PATH", str(DEFAULT_INDEX_PATH)))
        self.limit = limit if limit is not None else int(os.getenv("KNOWLEDGE_INDEX_LIMIT", str(DEFAULT_LIMIT)))
        self._index: Optional[KnowledgeIndex] = None
        self._lock = threading.Lock()

    @classmethod
    def from_index(cls, index: KnowledgeIndex) -> "KnowledgeIndexHandle":
        handle = cls(path=Path(os.devnull), limit=len(index))
        handle._index = index
        return handle

    @property
    def loaded(self) -> bool:
        return self._index is not None

    @property
    def size(self) -> int:
        return len(self._index) if self._index is not None else 0

    def get(self) -> KnowledgeIndex:
        """The loaded index, loading it now if the preload has not completed."""

        if self._index is not None:
            return self._index
        with self._lock:
            if self._index is None:
                self._index = KnowledgeIndex.load(self.path, limit=self.limit)
                logger.info(f"knowledge_index_loaded vectors={len(self._index)} path={self.path}")
            return self._index

    def preload(self) -> None:
        logger.info(f"knowledge_index_preload_started path={self.path} limit={self.limit}")
        try:
            self.get()
        except KnowledgeIndexError as exc:
            logger.error(f"knowledge_index_preload_failed: {exc}")

    def preload_in_background(self) -> threading.Thread:
        thread = threading.Thread(target=self.preload, name="knowledge-index-preload", daemon=True)
        thread.start()
        return thread


Embedder = Callable[[str], Awaitable[Sequence[float]]]


async def retrieve_context(
    handle: KnowledgeIndexHandle,
    question: str,
    embed: Embedder = embed_text,
    top_k: Optional[int] = None,
    min_score: float = MIN_SCORE,
    max_chars: int = MAX_CONTEXT_CHARS,
) -> RetrievedContext:
    """Passages relevant to ``question`` joined into one prompt context.

    Retrieval problems leave the report without context rather than failing
    the request.
    """

    k = top_k if top_k is not None else int(os.getenv("KNOWLEDGE_TOP_K", str(DEFAULT_TOP_K)))
    try:
        index = await asyncio.to_thread(handle.get)
        matches = index.search(await embed(question), top_k=k)
    except Exception as exc:
        logger.error(f"knowledge_index_query_failed: {exc}")
        return RetrievedContext(text="", count=0)

    kept = [m for m in matches if m.score >= min_score]
    logger.info(f"knowledge_index_matches count={len(kept)} question={question!r}")
    joined = "\n\n".join(m.text for m in kept)
    return RetrievedContext(text=joined[:max_chars], count=len(kept))
