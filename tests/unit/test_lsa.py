"""
Unit tests for textlab/lsa.py
"""

import numpy as np
import pandas as pd
import pytest

from textlab.frequency import count_words
from textlab.lsa import (
    DocumentTermMatrix,
    bundled_document_term_matrix,
    from_counts,
    latent_semantic_analysis,
    load_document_term_matrix,
)


@pytest.fixture
def nyt_dtm():
    return bundled_document_term_matrix()


class TestLoading:
    """Tests for reading document-term matrices."""

    def test_bundled_sample(self, nyt_dtm):
        """Test the shipped sample has labels split off."""
        assert nyt_dtm.n_documents == 16
        assert nyt_dtm.n_terms == 30
        assert set(nyt_dtm.labels) == {"art", "music"}
        assert "class.labels" not in nyt_dtm.counts.columns
        assert nyt_dtm.counts.index[0] == "art-01"

    def test_load_without_labels(self, tmp_path):
        """Test a plain matrix with no label column."""
        path = tmp_path / "dtm.csv"
        path.write_text("paint,song\n3,0\n0,2\n1,1\n")
        dtm = load_document_term_matrix(path)
        assert dtm.labels is None
        assert dtm.counts.shape == (3, 2)

    def test_load_with_no_terms(self, tmp_path):
        """Test a file with only labels is rejected."""
        path = tmp_path / "dtm.csv"
        path.write_text("document,class.labels\nd1,art\n")
        with pytest.raises(ValueError):
            load_document_term_matrix(path)

    def test_from_counts(self, device_tokens):
        """Test pivoting a long count table."""
        counts = count_words(device_tokens, by="doc_id")
        dtm = from_counts(counts)
        assert dtm.n_documents == device_tokens["doc_id"].nunique()
        assert dtm.n_terms == device_tokens["word"].nunique()
        assert dtm.counts.to_numpy().sum() == len(device_tokens)


class TestLatentSemanticAnalysis:
    """Tests for latent_semantic_analysis."""

    def test_shapes(self, nyt_dtm):
        """Test one score row per document and one loading row per term."""
        result = latent_semantic_analysis(nyt_dtm, n_components=3)
        assert result.document_scores.shape == (16, 3)
        assert result.term_loadings.shape == (30, 3)
        assert result.components == ["PC1", "PC2", "PC3"]
        assert list(result.document_scores.index) == list(nyt_dtm.counts.index)

    def test_variance_ratios(self, nyt_dtm):
        """Test explained variance is sorted and bounded."""
        result = latent_semantic_analysis(nyt_dtm, n_components=4)
        ratios = result.explained_variance_ratio
        assert np.all(np.diff(ratios) <= 1e-12)
        assert 0 < ratios.sum() <= 1 + 1e-9

    def test_first_component_separates_topics(self, nyt_dtm):
        """Test art and music documents fall on opposite sides of PC1."""
        result = latent_semantic_analysis(nyt_dtm, n_components=2)
        scores = result.document_scores["PC1"]
        art = scores[nyt_dtm.labels == "art"]
        music = scores[nyt_dtm.labels == "music"]
        assert (art.max() < music.min()) or (music.max() < art.min())

    @pytest.mark.parametrize("normalize", ["tfidf", "l2", None])
    def test_normalizations(self, nyt_dtm, normalize):
        """Test every weighting runs."""
        result = latent_semantic_analysis(nyt_dtm, normalize=normalize)
        assert result.document_scores.shape == (16, 2)

    def test_unknown_normalization(self, nyt_dtm):
        """Test an invalid weighting is rejected."""
        with pytest.raises(ValueError):
            latent_semantic_analysis(nyt_dtm, normalize="zscore")

    def test_components_clipped(self):
        """Test n_components is capped at the matrix size."""
        dtm = DocumentTermMatrix(pd.DataFrame({"a": [1, 0, 2], "b": [0, 3, 1]}))
        result = latent_semantic_analysis(dtm, n_components=5, normalize=None)
        assert result.components == ["PC1", "PC2"]

    def test_too_few_documents(self):
        """Test a single document is rejected."""
        dtm = DocumentTermMatrix(pd.DataFrame({"a": [1], "b": [2]}))
        with pytest.raises(ValueError):
            latent_semantic_analysis(dtm)

    def test_top_loadings(self, nyt_dtm):
        """Test terms are ordered by absolute loading."""
        result = latent_semantic_analysis(nyt_dtm)
        top = result.top_loadings(1, n=5)
        assert list(top.columns) == ["term", "loading"]
        assert len(top) == 5
        magnitudes = top["loading"].abs().tolist()
        assert magnitudes == sorted(magnitudes, reverse=True)
        assert top.equals(result.top_loadings("PC1", n=5))

    def test_top_loadings_unknown_component(self, nyt_dtm):
        """Test asking for a component that was not kept."""
        result = latent_semantic_analysis(nyt_dtm, n_components=2)
        with pytest.raises(ValueError):
            result.top_loadings(3)
