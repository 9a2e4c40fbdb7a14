"""
tf-idf weighting of a document-term frequency table.
"""

import logging

import numpy as np
import pandas as pd

logger = logging.getLogger("textlab.tfidf")


def bind_tf_idf(
    counts: pd.DataFrame,
    term: str = "word",
    document: str = "group",
    n: str = "n",
) -> pd.DataFrame:
    """
    Add tf, idf and tf_idf columns to a long frequency table.

    tf is the count over the document's total, idf is
    ln(documents / documents containing the term), and tf_idf their product.
    A term present in every document gets zero weight.

    Args:
        counts: One row per (document, term) with a count column.
        term: Term column name.
        document: Document column name; a "document" can be a whole group.
        n: Count column name.

    Returns:
        A copy of counts, in the same row order, with tf, idf and tf_idf.
    """
    result = counts.copy()
    if result.empty:
        for column in ("tf", "idf", "tf_idf"):
            result[column] = pd.Series(dtype=float)
        return result

    totals = result.groupby(document)[n].transform("sum")
    result["tf"] = result[n] / totals

    n_documents = result[document].nunique()
    containing = result[result[n] > 0].groupby(term)[document].nunique()
    doc_freq = result[term].map(containing).fillna(0)
    # Terms never seen with a positive count get no weight
    idf = np.log(n_documents / doc_freq.where(doc_freq > 0))
    result["idf"] = idf.fillna(0.0)
    result["tf_idf"] = result["tf"] * result["idf"]

    logger.debug(f"tf-idf over {n_documents} documents and {result[term].nunique()} terms")
    return result


def top_tf_idf(weighted: pd.DataFrame, n: int = 10, document: str = "group") -> pd.DataFrame:
    """The n highest tf-idf terms per document."""
    return (
        weighted.sort_values("tf_idf", ascending=False, kind="mergesort")
        .groupby(document, sort=True)
        .head(n)
        .reset_index(drop=True)
    )
