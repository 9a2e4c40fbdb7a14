"""
Static charts for each analysis section.

Every function returns the matplotlib Figure and, when `path` is given,
saves it there and closes it.
"""

import logging
import math
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402
from wordcloud import WordCloud  # noqa: E402

logger = logging.getLogger("textlab.plots")

GROUP_COLORS = ["#1b9e77", "#d95f02", "#7570b3", "#e7298a", "#66a61e", "#e6ab02"]


def _finish(fig, path: str | Path | None, dpi: int):
    fig.tight_layout()
    if path is not None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(path, dpi=dpi)
        plt.close(fig)
        logger.info(f"Saved chart: {path}")
    return fig


def _facet_axes(n_panels: int, ncols: int = 2, panel_size=(5, 4)):
    ncols = max(1, min(ncols, n_panels))
    nrows = math.ceil(n_panels / ncols)
    fig, axes = plt.subplots(
        nrows, ncols,
        figsize=(panel_size[0] * ncols, panel_size[1] * nrows),
        squeeze=False,
    )
    flat = axes.ravel()
    # hide unused panels
    for ax in flat[n_panels:]:
        ax.set_visible(False)
    return fig, flat[:n_panels]


def plot_top_words(
    counts: pd.DataFrame,
    by: str | None = "group",
    value: str = "n",
    term: str = "word",
    title: str = "Most common words",
    path=None,
    dpi: int = 150,
):
    """Horizontal bars of the highest `value` words, one panel per group."""
    groups = list(counts[by].unique()) if by else [None]
    fig, axes = _facet_axes(max(1, len(groups)))

    for i, (ax, group) in enumerate(zip(axes, groups)):
        panel = counts if group is None else counts[counts[by] == group]
        panel = panel.sort_values(value)
        ax.barh(panel[term], panel[value], color=GROUP_COLORS[i % len(GROUP_COLORS)])
        ax.set_xlabel(value)
        if group is not None:
            ax.set_title(str(group))

    fig.suptitle(title)
    return _finish(fig, path, dpi)


def plot_log_ratio(
    ratios: pd.DataFrame,
    group_a: str,
    group_b: str,
    term: str = "word",
    base: float = 2,
    path=None,
    dpi: int = 150,
):
    """Diverging bars: right of zero leans to group_a, left to group_b."""
    ordered = ratios.sort_values("log_ratio")
    colors = np.where(ordered["log_ratio"] >= 0, GROUP_COLORS[0], GROUP_COLORS[1])

    fig, ax = plt.subplots(figsize=(7, max(4, 0.25 * len(ordered))))
    ax.barh(ordered[term], ordered["log_ratio"], color=colors)
    ax.axvline(0, color="black", linewidth=0.8)
    ax.set_xlabel(f"{group_a} / {group_b} log{base:g} ratio")
    ax.set_title(f"Words most characteristic of {group_a} vs {group_b}")
    return _finish(fig, path, dpi)


def plot_tf_idf(
    weighted: pd.DataFrame,
    document: str = "group",
    term: str = "word",
    path=None,
    dpi: int = 150,
):
    """Highest tf-idf terms, one panel per document."""
    return plot_top_words(
        weighted, by=document, value="tf_idf", term=term,
        title="Highest tf-idf words", path=path, dpi=dpi,
    )


def plot_sentiment_ratios(
    comparison: pd.DataFrame,
    group_a: str,
    group_b: str,
    path=None,
    dpi: int = 150,
):
    """Rate ratio per sentiment with confidence intervals, on a log axis."""
    data = comparison.replace([np.inf, -np.inf], np.nan).dropna(subset=["estimate"])
    data = data[data["estimate"] > 0].sort_values("estimate")

    lower = (data["estimate"] - data["conf_low"]).clip(lower=0)
    upper = (data["conf_high"] - data["estimate"]).fillna(0)
    y = np.arange(len(data))

    fig, ax = plt.subplots(figsize=(7, max(3, 0.45 * len(data))))
    ax.errorbar(data["estimate"], y, xerr=[lower, upper], fmt="o", color=GROUP_COLORS[2], capsize=3)
    ax.axvline(1, color="black", linestyle="--", linewidth=0.8)
    if len(data):
        ax.set_xscale("log")
    ax.set_yticks(y)
    ax.set_yticklabels(data["sentiment"])
    ax.set_xlabel(f"Relative rate of sentiment words ({group_a} / {group_b})")
    ax.set_title("Sentiment comparison")
    return _finish(fig, path, dpi)


def plot_sentiment_words(
    word_ratios: pd.DataFrame,
    n: int = 10,
    path=None,
    dpi: int = 150,
):
    """Per sentiment category, the words with the largest absolute log ratio."""
    sentiments = sorted(word_ratios["sentiment"].unique())
    fig, axes = _facet_axes(max(1, len(sentiments)), ncols=3, panel_size=(4, 3.5))

    for ax, sentiment in zip(axes, sentiments):
        panel = word_ratios[word_ratios["sentiment"] == sentiment]
        panel = panel.loc[panel["log_ratio"].abs().sort_values(ascending=False).index[:n]]
        panel = panel.sort_values("log_ratio")
        colors = np.where(panel["log_ratio"] >= 0, GROUP_COLORS[0], GROUP_COLORS[1])
        ax.barh(panel["word"], panel["log_ratio"], color=colors)
        ax.axvline(0, color="black", linewidth=0.8)
        ax.set_title(sentiment)

    fig.suptitle("Words driving each sentiment difference")
    return _finish(fig, path, dpi)


def plot_hour_of_day(hours: pd.DataFrame, path=None, dpi: int = 150):
    """Share of documents posted per hour, one line per group."""
    fig, ax = plt.subplots(figsize=(8, 4))
    for i, (group, panel) in enumerate(hours.groupby("group")):
        panel = panel.set_index("hour")["share"].reindex(range(24), fill_value=0)
        ax.plot(panel.index, panel.to_numpy() * 100, label=str(group), color=GROUP_COLORS[i % len(GROUP_COLORS)])
    ax.set_xticks(range(0, 24, 2))
    ax.set_xlabel("Hour of day")
    ax.set_ylabel("% of tweets")
    ax.legend()
    return _finish(fig, path, dpi)


def plot_pca_biplot(
    result,
    n_terms: int = 8,
    x: str = "PC1",
    y: str = "PC2",
    path=None,
    dpi: int = 150,
):
    """
    Document scores coloured by label, with the strongest term loadings
    drawn as arrows scaled to the score range.
    """
    scores = result.document_scores
    if y not in scores.columns:
        # single component: plot against zero
        scores = scores.assign(**{y: 0.0})
    loadings = result.term_loadings.reindex(columns=[x, y], fill_value=0.0)

    fig, ax = plt.subplots(figsize=(7, 6))
    labels = result.labels if result.labels is not None else pd.Series("document", index=scores.index)
    for i, label in enumerate(pd.unique(labels)):
        mask = (labels == label).to_numpy()
        ax.scatter(scores.loc[mask, x], scores.loc[mask, y], label=str(label),
                   color=GROUP_COLORS[i % len(GROUP_COLORS)], alpha=0.8)

    strength = np.hypot(loadings[x], loadings[y])
    top = strength.sort_values(ascending=False).index[:n_terms]
    span = max(np.abs(scores[[x, y]].to_numpy()).max(), 1e-9)
    scale = span / max(strength.max(), 1e-9)
    for term in top:
        lx, ly = loadings.at[term, x] * scale, loadings.at[term, y] * scale
        ax.annotate("", xy=(lx, ly), xytext=(0, 0), arrowprops=dict(arrowstyle="->", color="grey"))
        ax.annotate(term, (lx, ly), xytext=(lx * 1.05, ly * 1.05), color="dimgrey")

    ax.axhline(0, color="black", linewidth=0.5)
    ax.axvline(0, color="black", linewidth=0.5)
    ax.set_xlabel(x)
    ax.set_ylabel(y)
    ax.set_title("Latent semantic analysis")
    ax.legend()
    return _finish(fig, path, dpi)


def plot_wordcloud(
    counts: pd.DataFrame,
    term: str = "word",
    value: str = "n",
    max_words: int = 100,
    path=None,
    dpi: int = 150,
):
    """
    Word cloud of counts.

    Raises:
        ValueError: If there are no positive counts.
    """
    frequencies = counts.groupby(term)[value].sum()
    frequencies = frequencies[frequencies > 0]
    if frequencies.empty:
        raise ValueError("No words to draw")

    cloud = WordCloud(width=800, height=500, background_color="white", max_words=max_words)
    cloud.generate_from_frequencies(frequencies.to_dict())

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.imshow(cloud, interpolation="bilinear")
    ax.axis("off")
    return _finish(fig, path, dpi)
