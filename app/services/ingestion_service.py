"""
Knowledge-base setup: seed question/answer entries for RAG.

Responsibility: Provide the sample entries, read entry files, and write them to the
vector store. Called by the API and the seed script; no HTTP or FastAPI here.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from app.services.vector_store import clear_knowledge_base, store_entries

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("file_id", "question", "answer")

SAMPLE_ENTRIES: list[dict] = [
    {
        "file_id": "file_001",
        "question": "What is machine learning?",
        "answer": (
            "Machine learning is a subset of artificial intelligence that enables computers to learn and "
            "improve from experience without being explicitly programmed. It uses algorithms to identify "
            "patterns in data and make predictions or decisions."
        ),
    },
    {
        "file_id": "file_002",
        "question": "How does a neural network work?",
        "answer": (
            "A neural network is a computational model inspired by biological neural networks. It consists "
            "of interconnected nodes (neurons) organized in layers. Information flows through the network, "
            "with each connection having a weight that gets adjusted during training to minimize prediction errors."
        ),
    },
    {
        "file_id": "file_003",
        "question": "What is the difference between supervised and unsupervised learning?",
        "answer": (
            "Supervised learning uses labeled training data to learn the relationship between inputs and "
            "outputs, while unsupervised learning finds hidden patterns in unlabeled data. Supervised learning "
            "is used for classification and regression tasks, while unsupervised learning is used for "
            "clustering and dimensionality reduction."
        ),
    },
    {
        "file_id": "file_004",
        "question": "What are the main types of machine learning algorithms?",
        "answer": (
            "The main types include: 1) Supervised Learning (Linear Regression, Logistic Regression, Decision "
            "Trees, Random Forest, SVM), 2) Unsupervised Learning (K-means Clustering, Hierarchical Clustering, "
            "PCA), 3) Reinforcement Learning (Q-Learning, Deep Q-Networks), and 4) Deep Learning (CNNs, RNNs, "
            "Transformers)."
        ),
    },
    {
        "file_id": "file_005",
        "question": "How do you evaluate machine learning models?",
        "answer": (
            "Model evaluation involves metrics like accuracy, precision, recall, F1-score for classification; "
            "MSE, MAE, R-squared for regression; and cross-validation techniques to ensure robust performance. "
            "The choice of metrics depends on the specific problem and business requirements."
        ),
    },
]


class InvalidEntryError(Exception):
    """Raised when one or more entries lack file_id, question or answer."""

    def __init__(self, invalid: list[int]) -> None:
        self.invalid = invalid
        super().__init__(f"Entries missing {', '.join(REQUIRED_FIELDS)} at positions: {invalid}")


@dataclass
class SeedResult:
    """Result of writing entries to the knowledge base."""

    entries_inserted: int
    reset: bool


def validate_entries(entries: list[dict]) -> list[dict]:
    """Return entries with string fields stripped; raise InvalidEntryError on missing fields."""
    invalid: list[int] = []
    cleaned: list[dict] = []
    for i, entry in enumerate(entries):
        values = {f: str(entry.get(f) or "").strip() for f in REQUIRED_FIELDS}
        if not all(values.values()):
            invalid.append(i)
            continue
        cleaned.append(values)
    if invalid:
        raise InvalidEntryError(invalid)
    return cleaned


def load_entries_file(path: str | Path) -> list[dict]:
    """Read a JSON array of {file_id, question, answer} objects."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise InvalidEntryError([])
    return validate_entries(data)


def seed_knowledge_base(entries: list[dict] | None = None, reset: bool = False) -> SeedResult:
    """
    Write entries (default: the sample set) to the knowledge base.
    With reset=True the collection is dropped first so entries are not duplicated.
    """
    to_store = validate_entries(entries if entries is not None else SAMPLE_ENTRIES)
    if reset:
        clear_knowledge_base()
    inserted = store_entries(to_store)
    logger.info("Seeded knowledge base with %d entries (reset=%s)", inserted, reset)
    return SeedResult(entries_inserted=inserted, reset=reset)
