"""
textlab - Exploratory Text Analysis of Tweet Archives

This package builds corpora from Twitter/X timelines or bundled datasets and
walks them through tokenization, word frequencies, log ratios, tf-idf,
lexicon sentiment and latent semantic analysis, rendering charts and tables.
"""

__version__ = "1.0.0"
