"""
Main Orchestration Script for textlab.

This script runs the analysis sections in order:
1. Corpus: bundled CSV, saved archive, or a fresh twscrape fetch
2. Tokenize: clean text and split into word tokens
3. Sections: word frequency, log ratio, tf-idf, sentiment,
   time of day, word cloud, latent semantic analysis
4. Report: write report.html / report.txt with the charts

SETUP REQUIRED:
1. Copy config.yaml.example to config.yaml and set the corpus source
2. To fetch tweets, add Twitter accounts to twscrape:
   - twscrape add_accounts accounts.txt username:password:email:email_password
   - twscrape login_accounts
"""

import asyncio
import logging
import sys
from pathlib import Path

import pandas as pd

from .archive import TweetArchive
from .config import Config, config
from .corpus import filter_corpus, hour_of_day_share, load_corpus_csv, source_summary, tweets_to_frame
from .frequency import count_words, log_ratio, top_log_ratio, top_words
from .lsa import bundled_document_term_matrix, latent_semantic_analysis, load_document_term_matrix
from .plots import (
    plot_hour_of_day,
    plot_log_ratio,
    plot_pca_biplot,
    plot_sentiment_ratios,
    plot_sentiment_words,
    plot_tf_idf,
    plot_top_words,
    plot_wordcloud,
)
from .reporter import ReportSection, ReportWriter
from .scraper import ScrapedTweet, TwitterScraper
from .sentiment import Lexicon, compare_sentiment, document_sentiment, sentiment_word_ratios
from .tfidf import bind_tf_idf, top_tf_idf
from .tokenizer import build_stop_words, unnest_tokens

logger = logging.getLogger("textlab.main")

TWEET_SECTIONS = {"frequency", "log_ratio", "tf_idf", "sentiment", "time_of_day", "wordcloud"}


async def fetch_tweets(cfg: Config) -> list[ScrapedTweet]:
    """
    Fetch the configured timelines and searches with twscrape.

    Returns:
        All fetched tweets; empty if no accounts are configured.
    """
    scraper = TwitterScraper(db_path=cfg.twitter.db_path)
    # Reset locks left behind by an interrupted run
    await scraper.fix_locks()

    stats = await scraper.get_account_stats()
    total = stats.get("total", 0)
    active = stats.get("active", 0)
    if total == 0:
        logger.error("No Twitter accounts configured. Run 'twscrape accounts' to check.")
        return []
    if active == 0:
        logger.warning(f"All {total} Twitter accounts are rate-limited; twscrape will wait for a reset")
    else:
        logger.info(f"Twitter accounts: {active}/{total} active")

    tweets: list[ScrapedTweet] = []
    if cfg.corpus.screen_names:
        timelines = await scraper.get_timelines(cfg.corpus.screen_names, limit_per_user=cfg.corpus.tweet_limit)
        for timeline in timelines.values():
            tweets.extend(timeline)
    for query in cfg.corpus.queries:
        tweets.extend(await scraper.search_tweets(query, limit=cfg.corpus.tweet_limit, lang=cfg.corpus.lang))
    return tweets


async def load_corpus(cfg: Config) -> pd.DataFrame:
    """
    Build the corpus frame.

    A configured CSV wins; otherwise the tweet archive is used when it has
    tweets, and only an empty archive triggers a fetch.
    """
    if cfg.corpus.csv_path:
        logger.info(f"Loading corpus from CSV: {cfg.corpus.csv_path}")
        frame = load_corpus_csv(cfg.corpus.csv_path, cfg.corpus.source_groups)
    else:
        archive = TweetArchive(cfg.corpus.archive_path)
        tweets = archive.load()
        if not tweets:
            logger.info("Archive empty - fetching tweets")
            fetched = await fetch_tweets(cfg)
            tweets = archive.merge(fetched) if fetched else []
        frame = tweets_to_frame(tweets, cfg.corpus.source_groups)

    return filter_corpus(
        frame,
        drop_retweets=cfg.corpus.drop_retweets,
        drop_quoted=cfg.corpus.drop_quoted,
    )


def pick_groups(tokens: pd.DataFrame, configured: list[str]) -> tuple[str, str] | None:
    """
    The configured comparison groups, or the two with the most tokens.

    Returns None when there is no pair to compare, including a configured
    group that has no tokens in this corpus.
    """
    if configured:
        present = set(tokens["group"].unique())
        missing = [g for g in configured[:2] if g not in present]
        if missing:
            logger.warning(f"Configured compare_groups not in corpus: {', '.join(map(str, missing))}")
            return None
        return configured[0], configured[1]
    sizes = tokens["group"].value_counts()
    if len(sizes) < 2:
        return None
    return sizes.index[0], sizes.index[1]


def frequency_section(tokens: pd.DataFrame, cfg: Config, out: Path) -> ReportSection:
    counts = count_words(tokens, by="group")
    top = top_words(counts, n=cfg.analysis.top_n, by="group")
    chart = out / "top_words.png"
    plot_top_words(top, by="group", path=chart, dpi=cfg.output.dpi)
    return ReportSection("Word frequency", tables={"top words": top}, charts=[chart])


def log_ratio_section(tokens: pd.DataFrame, groups: tuple[str, str], cfg: Config, out: Path) -> ReportSection:
    group_a, group_b = groups
    ratios = log_ratio(
        tokens, group_a, group_b,
        min_count=cfg.analysis.min_count,
        base=cfg.analysis.log_base,
    )
    top = top_log_ratio(ratios, n=cfg.analysis.top_n // 2 or 1)
    chart = out / "log_ratio.png"
    plot_log_ratio(top, group_a, group_b, base=cfg.analysis.log_base, path=chart, dpi=cfg.output.dpi)
    return ReportSection(
        f"Log ratio: {group_a} vs {group_b}",
        tables={"most characteristic words": top},
        charts=[chart],
        notes=f"Positive values lean towards {group_a}, negative towards {group_b}.",
    )


def tf_idf_section(tokens: pd.DataFrame, cfg: Config, out: Path) -> ReportSection:
    weighted = bind_tf_idf(count_words(tokens, by="group"), term="word", document="group")
    top = top_tf_idf(weighted, n=cfg.analysis.top_n // 2 or 1, document="group")
    chart = out / "tf_idf.png"
    plot_tf_idf(top, document="group", path=chart, dpi=cfg.output.dpi)
    return ReportSection("tf-idf by group", tables={"highest tf-idf": top}, charts=[chart])


def sentiment_section(
    tokens: pd.DataFrame,
    groups: tuple[str, str],
    lexicon: Lexicon,
    cfg: Config,
    out: Path,
) -> ReportSection:
    group_a, group_b = groups
    comparison = compare_sentiment(tokens, lexicon, group_a, group_b, conf_level=cfg.analysis.confidence_level)
    word_ratios = sentiment_word_ratios(tokens, lexicon, group_a, group_b, base=cfg.analysis.log_base)
    per_document = document_sentiment(tokens, lexicon)
    by_group = per_document.groupby("group")["sentiment"].describe().reset_index()

    ratio_chart = out / "sentiment_ratios.png"
    words_chart = out / "sentiment_words.png"
    plot_sentiment_ratios(comparison, group_a, group_b, path=ratio_chart, dpi=cfg.output.dpi)
    charts = [ratio_chart]
    if not word_ratios.empty:
        plot_sentiment_words(word_ratios, path=words_chart, dpi=cfg.output.dpi)
        charts.append(words_chart)

    return ReportSection(
        f"Sentiment: {group_a} vs {group_b}",
        tables={"rate ratios": comparison, "document scores by group": by_group},
        charts=charts,
        notes=f"Estimate > 1 means {group_a} uses the category's words more often per word written.",
    )


def time_of_day_section(frame: pd.DataFrame, cfg: Config, out: Path) -> ReportSection | None:
    hours = hour_of_day_share(frame)
    if hours.empty:
        logger.warning("Skipping time_of_day: corpus has no timestamps")
        return None
    chart = out / "hour_of_day.png"
    plot_hour_of_day(hours, path=chart, dpi=cfg.output.dpi)
    return ReportSection("Posting patterns", tables={"by group": source_summary(frame)}, charts=[chart])


def wordcloud_section(tokens: pd.DataFrame, cfg: Config, out: Path) -> ReportSection:
    chart = out / "wordcloud.png"
    plot_wordcloud(count_words(tokens, by=None), path=chart, dpi=cfg.output.dpi)
    return ReportSection("Word cloud", charts=[chart])


def lsa_section(cfg: Config, out: Path) -> ReportSection:
    if cfg.analysis.dtm_path:
        dtm = load_document_term_matrix(cfg.analysis.dtm_path, cfg.analysis.dtm_label_column)
    else:
        dtm = bundled_document_term_matrix()

    result = latent_semantic_analysis(dtm, n_components=cfg.analysis.n_components, normalize=cfg.analysis.lsa_normalize)
    chart = out / "lsa_biplot.png"
    plot_pca_biplot(result, path=chart, dpi=cfg.output.dpi)

    variance = pd.DataFrame({
        "component": result.components,
        "explained_variance_ratio": result.explained_variance_ratio,
    })
    tables = {"explained variance": variance}
    for component in result.components[:2]:
        tables[f"{component} loadings"] = result.top_loadings(component, n=cfg.analysis.top_n // 2 or 1)

    return ReportSection(
        f"Latent semantic analysis ({dtm.n_documents} documents x {dtm.n_terms} terms)",
        tables=tables,
        charts=[chart],
    )


async def run_analysis(cfg: Config = config) -> bool:
    """
    Run every configured section and write the report.

    Returns:
        True if the analysis completed successfully.
    """
    log = cfg.setup_logging()
    log.info("=" * 60)
    log.info("textlab analysis run")
    log.info("=" * 60)

    errors = cfg.validate()
    if errors:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        return False

    out = Path(cfg.output.output_dir)
    sections = list(cfg.output.sections)
    report: list[ReportSection] = []
    document_count = 0

    try:
        if TWEET_SECTIONS.intersection(sections):
            logger.info("\n[STEP 1] Building corpus...")
            frame = await load_corpus(cfg)
            if frame.empty:
                logger.error("Corpus is empty - nothing to analyze")
                return False
            document_count = len(frame)

            logger.info("\n[STEP 2] Tokenizing...")
            tokens = unnest_tokens(frame, build_stop_words(cfg.analysis.extra_stop_words))
            if tokens.empty:
                logger.error("No tokens left after cleaning")
                return False

            groups = pick_groups(tokens, cfg.analysis.compare_groups)
            lexicon = None

            logger.info("\n[STEP 3] Running sections...")
            for section in sections:
                if section == "frequency":
                    report.append(frequency_section(tokens, cfg, out))
                elif section == "log_ratio" or section == "sentiment":
                    if groups is None:
                        logger.warning(f"Skipping {section}: needs at least two groups")
                        continue
                    if section == "log_ratio":
                        report.append(log_ratio_section(tokens, groups, cfg, out))
                    else:
                        if lexicon is None:
                            lexicon = (
                                Lexicon.load(cfg.analysis.lexicon_path)
                                if cfg.analysis.lexicon_path else Lexicon.bundled()
                            )
                        report.append(sentiment_section(tokens, groups, lexicon, cfg, out))
                elif section == "tf_idf":
                    report.append(tf_idf_section(tokens, cfg, out))
                elif section == "time_of_day":
                    posting = time_of_day_section(frame, cfg, out)
                    if posting is not None:
                        report.append(posting)
                elif section == "wordcloud":
                    report.append(wordcloud_section(tokens, cfg, out))

        if "lsa" in sections:
            logger.info("\n[STEP 4] Latent semantic analysis...")
            report.append(lsa_section(cfg, out))

        logger.info("\n[STEP 5] Writing report...")
        writer = ReportWriter(out, title=cfg.output.report_title)
        html_path, _ = writer.write(report, document_count=document_count)

        logger.info("\n" + "=" * 60)
        logger.info(f"Analysis complete: {html_path}")
        logger.info("=" * 60)
        return True

    except Exception as e:
        logger.exception(f"Analysis failed: {e}")
        return False


def main():
    """Entry point for the application."""
    print("""
    ==============================================================
    |     textlab                                                |
    |     Exploratory Text Analysis of Tweet Archives            |
    ==============================================================
    """)

    try:
        success = asyncio.run(run_analysis())
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        sys.exit(130)
    except Exception as e:
        print(f"\nFatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
