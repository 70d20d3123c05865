"""Episode processing: field derivation, chapters and the per-episode pipeline."""

from podsite.episode.chapters import collect_chapter_markers
from podsite.episode.derive import DERIVATION_RULES, DerivationRule, FieldDeriver
from podsite.episode.models import BuildContext, ChapterMarker, RenderedEpisode
from podsite.episode.pipeline import EpisodePipeline

__all__ = [
    "BuildContext",
    "ChapterMarker",
    "DERIVATION_RULES",
    "DerivationRule",
    "EpisodePipeline",
    "FieldDeriver",
    "RenderedEpisode",
    "collect_chapter_markers",
]
