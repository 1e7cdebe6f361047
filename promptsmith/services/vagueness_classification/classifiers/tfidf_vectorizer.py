"""
TF-IDF text vectorizer.
"""

import math
import re
from collections import Counter
from typing import Dict, List, Sequence

import numpy as np

from ..models import MODEL_FORMAT_VERSION

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9\s]")
MIN_TOKEN_LENGTH = 2


def tokenize(text: str) -> List[str]:
    """Lowercase, drop punctuation, keep tokens of two or more characters"""
    cleaned = _NON_ALPHANUMERIC.sub(" ", text.lower())
    return [token for token in cleaned.split() if len(token) >= MIN_TOKEN_LENGTH]


class TfIdfVectorizer:
    """
    Bag-of-words TF-IDF features over a fixed, sorted vocabulary.

    idf = ln(N / df) + 1, tf is the term count divided by document length.
    Terms outside the vocabulary are ignored.
    """

    def __init__(self):
        self.vocabulary: List[str] = []
        self.idf_values: Dict[str, float] = {}
        self._index: Dict[str, int] = {}

    @property
    def feature_count(self) -> int:
        return len(self.vocabulary)

    def fit(self, documents: Sequence[str]) -> "TfIdfVectorizer":
        document_frequency: Counter = Counter()
        for document in documents:
            document_frequency.update(set(tokenize(document)))

        count = len(documents)
        self.vocabulary = sorted(document_frequency)
        self._index = {term: i for i, term in enumerate(self.vocabulary)}
        self.idf_values = {
            term: math.log(count / document_frequency[term]) + 1
            for term in self.vocabulary
        }
        return self

    def transform(self, document: str) -> np.ndarray:
        vector = np.zeros(self.feature_count, dtype=np.float64)
        tokens = tokenize(document)
        if not tokens or not self.vocabulary:
            return vector

        for term, count in Counter(tokens).items():
            index = self._index.get(term)
            if index is not None:
                vector[index] = (count / len(tokens)) * self.idf_values[term]
        return vector

    def transform_many(self, documents: Sequence[str]) -> np.ndarray:
        if not documents:
            return np.zeros((0, self.feature_count), dtype=np.float64)
        return np.vstack([self.transform(document) for document in documents])

    def fit_transform(self, documents: Sequence[str]) -> np.ndarray:
        return self.fit(documents).transform_many(documents)

    def to_dict(self) -> Dict:
        return {
            "version": MODEL_FORMAT_VERSION,
            "vocabulary": list(self.vocabulary),
            "idf_values": dict(self.idf_values)
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "TfIdfVectorizer":
        vectorizer = cls()
        vectorizer.vocabulary = list(data["vocabulary"])
        vectorizer._index = {term: i for i, term in enumerate(vectorizer.vocabulary)}
        vectorizer.idf_values = {term: float(data["idf_values"][term]) for term in vectorizer.vocabulary}
        return vectorizer
