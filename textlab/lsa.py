"""
Latent semantic analysis.

Principal component analysis of a document-term matrix: the leading
components separate documents by topic, and each term's loading shows
which words define that separation.
"""

import logging
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path

import numpy as np
import pandas as pd
from sklearn.decomposition import PCA
from sklearn.feature_extraction.text import TfidfTransformer
from sklearn.preprocessing import normalize as l2_normalize

logger = logging.getLogger("textlab.lsa")

BUNDLED_DTM = "nyt_sample.csv"


@dataclass
class DocumentTermMatrix:
    """Term counts with documents as rows and terms as columns."""
    counts: pd.DataFrame
    labels: pd.Series | None = None

    @property
    def n_documents(self) -> int:
        return self.counts.shape[0]

    @property
    def n_terms(self) -> int:
        return self.counts.shape[1]


@dataclass
class LSAResult:
    """PCA output, keyed by document and term."""
    document_scores: pd.DataFrame
    term_loadings: pd.DataFrame
    explained_variance_ratio: np.ndarray
    labels: pd.Series | None = None
    components: list[str] = field(default_factory=list)

    def _column(self, component) -> str:
        if isinstance(component, int):
            return f"PC{component}"
        return component

    def top_loadings(self, component=1, n: int = 10) -> pd.DataFrame:
        """
        Terms with the largest absolute loading on a component.

        Args:
            component: 1-based component number or a column name like "PC2".
            n: Number of terms.

        Returns:
            DataFrame with columns term, loading (signed), largest |loading| first.
        """
        column = self._column(component)
        if column not in self.term_loadings.columns:
            raise ValueError(f"Unknown component {component!r}; have {list(self.term_loadings.columns)}")
        loadings = self.term_loadings[column]
        order = loadings.abs().sort_values(ascending=False, kind="mergesort").index[:n]
        return pd.DataFrame({"term": order, "loading": loadings.loc[order].to_numpy()})


def load_document_term_matrix(path: str | Path, label_column: str | None = "class.labels") -> DocumentTermMatrix:
    """
    Load a wide document-term matrix from CSV.

    One row per document, one numeric column per term. A label column, when
    present, is split off as DocumentTermMatrix.labels; a `document`
    column becomes the index.

    Raises:
        ValueError: If no term columns remain.
    """
    raw = pd.read_csv(path)
    if "document" in raw.columns:
        raw = raw.set_index("document")

    labels = None
    if label_column and label_column in raw.columns:
        labels = raw.pop(label_column)

    counts = raw.apply(pd.to_numeric, errors="coerce").fillna(0)
    if counts.shape[1] == 0:
        raise ValueError(f"{path} has no term columns")

    logger.info(f"Loaded document-term matrix from {path}: {counts.shape[0]} documents x {counts.shape[1]} terms")
    return DocumentTermMatrix(counts=counts, labels=labels)


def bundled_document_term_matrix() -> DocumentTermMatrix:
    """The NYTimes art/music sample shipped with textlab."""
    with resources.as_file(resources.files("textlab") / "data" / BUNDLED_DTM) as path:
        return load_document_term_matrix(path)


def from_counts(
    counts: pd.DataFrame,
    document: str = "doc_id",
    term: str = "word",
    n: str = "n",
    labels: pd.Series | None = None,
) -> DocumentTermMatrix:
    """Pivot a long (document, term, n) table into a DocumentTermMatrix."""
    wide = counts.pivot_table(index=document, columns=term, values=n, aggfunc="sum", fill_value=0)
    wide.columns.name = None
    if labels is not None:
        labels = labels.reindex(wide.index)
    return DocumentTermMatrix(counts=wide, labels=labels)


def _weight(counts: pd.DataFrame, normalize: str | None) -> np.ndarray:
    values = counts.to_numpy(dtype=float)
    if normalize is None:
        return values
    if normalize == "tfidf":
        return TfidfTransformer(norm="l2", smooth_idf=True).fit_transform(values).toarray()
    if normalize == "l2":
        return l2_normalize(values, norm="l2")
    raise ValueError(f"Unknown normalization {normalize!r}; use 'tfidf', 'l2' or None")


def latent_semantic_analysis(
    dtm: DocumentTermMatrix,
    n_components: int = 2,
    normalize: str | None = "tfidf",
) -> LSAResult:
    """
    Run PCA over a document-term matrix.

    Args:
        dtm: Documents x terms.
        n_components: Components to keep; clipped to min(documents, terms).
        normalize: "tfidf" (tf-idf weighting, rows scaled to unit length),
            "l2" (rows scaled to unit length) or None (raw counts).

    Returns:
        LSAResult with one score row per document and one loading row per term.

    Raises:
        ValueError: With fewer than two documents or no terms.
    """
    if dtm.n_terms == 0:
        raise ValueError("Document-term matrix has no terms")
    if dtm.n_documents < 2:
        raise ValueError("Latent semantic analysis needs at least two documents")

    k = max(1, min(n_components, dtm.n_documents, dtm.n_terms))
    if k != n_components:
        logger.warning(f"n_components={n_components} clipped to {k}")

    weighted = _weight(dtm.counts, normalize)
    pca = PCA(n_components=k)
    scores = pca.fit_transform(weighted)

    columns = [f"PC{i + 1}" for i in range(k)]
    document_scores = pd.DataFrame(scores, index=dtm.counts.index, columns=columns)
    term_loadings = pd.DataFrame(pca.components_.T, index=dtm.counts.columns, columns=columns)

    logger.info(
        "LSA explained variance: "
        + ", ".join(f"{c}={v:.3f}" for c, v in zip(columns, pca.explained_variance_ratio_))
    )
    return LSAResult(
        document_scores=document_scores,
        term_loadings=term_loadings,
        explained_variance_ratio=pca.explained_variance_ratio_,
        labels=dtm.labels,
        components=columns,
    )
