"""
Configuration module for textlab.

Loads analysis settings from config.yaml. The file is looked up in the working
directory unless TEXTLAB_CONFIG (environment or .env) points elsewhere.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _config_path() -> Path:
    """config.yaml in the working directory, or the file named by TEXTLAB_CONFIG."""
    override = os.getenv("TEXTLAB_CONFIG")
    if override:
        return Path(override).expanduser()
    return Path.cwd() / "config.yaml"


CONFIG_FILE = _config_path()

# Analysis sections main.run_analysis knows how to run, in run order
KNOWN_SECTIONS = [
    "frequency",
    "log_ratio",
    "tf_idf",
    "sentiment",
    "time_of_day",
    "wordcloud",
    "lsa",
]


def _load_yaml_config() -> dict:
    """Load configuration from YAML file."""
    if CONFIG_FILE.exists():
        with open(CONFIG_FILE) as f:
            return yaml.safe_load(f) or {}
    return {}


# Load YAML config once at module import
_yaml_config = _load_yaml_config()


def _get_yaml(section: str, key: str, default=None):
    """Get a value from the YAML config."""
    return _yaml_config.get(section, {}).get(key, default)


@dataclass
class TwitterConfig:
    """twscrape settings. Accounts live in the twscrape database, not here."""
    db_path: str = field(default_factory=lambda: _get_yaml("twitter", "db_path", "accounts.db"))


def _get_source_groups() -> dict[str, str]:
    """Client label -> group name mapping, defaulting to the Android/iPhone split."""
    groups = _get_yaml("corpus", "source_groups")
    if groups:
        return dict(groups)
    return {
        "Twitter for Android": "android",
        "Twitter for iPhone": "iphone",
    }


@dataclass
class CorpusConfig:
    """Where the tweets under analysis come from."""
    screen_names: list[str] = field(
        default_factory=lambda: _get_yaml("corpus", "screen_names", []) or []
    )
    queries: list[str] = field(
        default_factory=lambda: _get_yaml("corpus", "queries", []) or []
    )
    tweet_limit: int = field(
        default_factory=lambda: _get_yaml("corpus", "tweet_limit", 3200)
    )
    lang: str = field(
        default_factory=lambda: _get_yaml("corpus", "lang", "en")
    )
    # JSON cache of fetched tweets; reused on the next run when present
    archive_path: str = field(
        default_factory=lambda: _get_yaml("corpus", "archive_path", ".data/tweets.json")
    )
    # Optional bundled tweet dataset, used instead of fetching
    csv_path: str | None = field(
        default_factory=lambda: _get_yaml("corpus", "csv_path", None)
    )
    source_groups: dict[str, str] = field(default_factory=_get_source_groups)
    drop_retweets: bool = field(
        default_factory=lambda: _get_yaml("corpus", "drop_retweets", True)
    )
    drop_quoted: bool = field(
        default_factory=lambda: _get_yaml("corpus", "drop_quoted", True)
    )


@dataclass
class AnalysisConfig:
    """Parameters of the statistical sections."""
    extra_stop_words: list[str] = field(
        default_factory=lambda: _get_yaml("analysis", "extra_stop_words", []) or []
    )
    top_n: int = field(
        default_factory=lambda: _get_yaml("analysis", "top_n", 20)
    )
    # Words rarer than this across both groups are left out of log ratios
    min_count: int = field(
        default_factory=lambda: _get_yaml("analysis", "min_count", 5)
    )
    log_base: float = field(
        default_factory=lambda: _get_yaml("analysis", "log_base", 2)
    )
    confidence_level: float = field(
        default_factory=lambda: _get_yaml("analysis", "confidence_level", 0.95)
    )
    # None = the lexicon bundled with the package
    lexicon_path: str | None = field(
        default_factory=lambda: _get_yaml("analysis", "lexicon_path", None)
    )
    # None = the NYTimes sample bundled with the package
    dtm_path: str | None = field(
        default_factory=lambda: _get_yaml("analysis", "dtm_path", None)
    )
    dtm_label_column: str = field(
        default_factory=lambda: _get_yaml("analysis", "dtm_label_column", "class.labels")
    )
    n_components: int = field(
        default_factory=lambda: _get_yaml("analysis", "n_components", 2)
    )
    # "tfidf", "l2" or None
    lsa_normalize: str | None = field(
        default_factory=lambda: _get_yaml("analysis", "lsa_normalize", "tfidf")
    )
    # The two groups compared by log_ratio and sentiment; None = first two found
    compare_groups: list[str] = field(
        default_factory=lambda: _get_yaml("analysis", "compare_groups", []) or []
    )


@dataclass
class OutputConfig:
    """Where charts and the report are written."""
    output_dir: str = field(
        default_factory=lambda: _get_yaml("output", "output_dir", "output")
    )
    dpi: int = field(
        default_factory=lambda: _get_yaml("output", "dpi", 150)
    )
    report_title: str = field(
        default_factory=lambda: _get_yaml("output", "report_title", "Text Analysis Report")
    )
    sections: list[str] = field(
        default_factory=lambda: _get_yaml("output", "sections", None) or list(KNOWN_SECTIONS)
    )


@dataclass
class AppConfig:
    """Application settings from YAML."""
    log_level: str = field(
        default_factory=lambda: _get_yaml("logging", "level", "INFO")
    )


@dataclass
class Config:
    """Main configuration container."""
    twitter: TwitterConfig = field(default_factory=TwitterConfig)
    corpus: CorpusConfig = field(default_factory=CorpusConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    app: AppConfig = field(default_factory=AppConfig)

    def setup_logging(self) -> logging.Logger:
        """Configure and return the application logger."""
        # Reset existing handlers to ensure clean configuration
        root = logging.getLogger()
        if root.handlers:
            for handler in list(root.handlers):
                root.removeHandler(handler)

        logging.basicConfig(
            level=getattr(logging, self.app.log_level.upper()),
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        # matplotlib and PIL are chatty at DEBUG
        logging.getLogger("matplotlib").setLevel(logging.WARNING)
        logging.getLogger("PIL").setLevel(logging.WARNING)

        return logging.getLogger("textlab")

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of missing/invalid settings.

        Returns:
            List of validation error messages, empty if all valid.
        """
        errors = []

        if not CONFIG_FILE.exists():
            errors.append(f"Config file not found: {CONFIG_FILE} (copy config.yaml.example to config.yaml or set TEXTLAB_CONFIG)")

        has_archive = Path(self.corpus.archive_path).exists()
        has_csv = bool(self.corpus.csv_path)
        has_fetch = bool(self.corpus.screen_names or self.corpus.queries)
        tweet_sections = [s for s in self.output.sections if s != "lsa"]
        if tweet_sections and not (has_archive or has_csv or has_fetch):
            errors.append(
                "No corpus source: set corpus.screen_names, corpus.queries or corpus.csv_path"
            )

        unknown = [s for s in self.output.sections if s not in KNOWN_SECTIONS]
        if unknown:
            errors.append(f"Unknown output.sections: {', '.join(unknown)}")

        if not 0 < self.analysis.confidence_level < 1:
            errors.append("analysis.confidence_level must be between 0 and 1")

        if self.analysis.compare_groups and len(self.analysis.compare_groups) != 2:
            errors.append("analysis.compare_groups must name exactly two groups")

        if self.analysis.lsa_normalize not in (None, "tfidf", "l2"):
            errors.append("analysis.lsa_normalize must be one of: tfidf, l2, null")

        return errors


# Global configuration instance
config = Config()
