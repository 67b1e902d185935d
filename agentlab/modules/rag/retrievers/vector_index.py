"""In-memory cosine-similarity index."""

import numpy as np


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine of the angle between ``a`` and ``b``; 0.0 when either is a zero vector."""
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    # Missing trailing components count as zero
    size = max(va.size, vb.size)
    va = np.pad(va, (0, size - va.size))
    vb = np.pad(vb, (0, size - vb.size))

    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(va, vb) / (norm_a * norm_b))


class InMemoryVectorIndex:
    """
    Flat vector index searched by brute-force cosine similarity.

    Example:
        index = InMemoryVectorIndex()
        index.add("doc.alpha", [1.0, 0.0])
        index.search([1.0, 0.0], top_k=1)  # [("doc.alpha", 1.0)]
    """

    def __init__(self):
        self._ids: list[str] = []
        self._vectors: list[list[float]] = []

    def add(self, item_id: str, vector: list[float]) -> None:
        self._ids.append(item_id)
        self._vectors.append(list(vector))

    def search(self, query: list[float], top_k: int) -> list[tuple[str, float]]:
        """Best ``top_k`` (id, score) pairs by descending similarity; ties keep insertion order."""
        scored = [
            (item_id, cosine_similarity(query, vector))
            for item_id, vector in zip(self._ids, self._vectors)
        ]
        scored.sort(key=lambda item: item[1], reverse=True)
        return scored[: max(0, top_k)]

    def __len__(self) -> int:
        return len(self._ids)
