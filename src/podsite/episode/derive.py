"""Derivation of well-known episode fields.

The deriver is an ordered table of rules. Each rule owns one key and a list of
resolvers in precedence order; a rule only runs when its key is blank after the
merge, and the first resolver returning a non-blank value wins. Later rules
see the values set by earlier ones (the link needs the title, the chapters type
needs the chapters URL, the category slots need the category list).

A resolver that fails leaves the field absent. Nothing here aborts an episode.
"""

import logging
import os
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import Any

from podsite.capabilities import Capabilities
from podsite.utils.datetime import format_hhmmss, format_timestamp
from podsite.utils.errors import CapabilityError
from podsite.utils.text import is_blank, normalize_categories, slugify, to_text

logger = logging.getLogger(__name__)

EPISODE_DIR_RE = re.compile(r"s(\d+)e(\d+)", re.IGNORECASE)

AUDIO_MIME_TYPES = {
    ".mp3": "audio/mpeg",
    ".m4a": "audio/mp4",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
}

CHAPTERS_MIME_TYPE = "application/json+chapters"
ZERO_DURATION = "00:00:00"
LEGACY_CATEGORY_SLOTS = 5


@dataclass
class DerivationContext:
    """Inputs available to resolvers for one episode.

    ``fields`` is the mapping being built, so resolvers read values set by
    earlier rules.
    """

    fields: dict[str, Any]
    document: Mapping[str, Any]
    episode_dir: Path
    audio_filename: str = "audio.mp3"
    capabilities: Capabilities = field(default_factory=Capabilities.none)

    @property
    def dir_name(self) -> str:
        return self.episode_dir.name

    @property
    def audio_path(self) -> Path:
        return self.episode_dir / self.audio_filename

    @property
    def base_link(self) -> str:
        link = self.fields.get("PODCAST_LINK")
        return "" if is_blank(link) else to_text(link).strip().rstrip("/")

    @cached_property
    def audio_stat(self) -> os.stat_result | None:
        try:
            return self.audio_path.stat()
        except OSError:
            return None

    def nested(self, *keys: str) -> Any:
        """Dig into nested mappings of the episode document."""
        value: Any = self.document
        for key in keys:
            if not isinstance(value, Mapping):
                return None
            value = value.get(key)
        return value


Resolver = Callable[[DerivationContext], Any]


@dataclass(frozen=True)
class DerivationRule:
    """One derived key and its resolvers in precedence order.

    Attributes:
        key: Target key
        resolvers: Tried in order; the first non-blank result wins
        overwrite: Run even when the key already has a value
        default: Factory for a value used when every resolver comes up blank
    """

    key: str
    resolvers: tuple[Resolver, ...]
    overwrite: bool = False
    default: Callable[[], Any] | None = None


# Resolver builders


def document_value(key: str) -> Resolver:
    """Top-level scalar of the episode document."""

    def resolve(ctx: DerivationContext) -> Any:
        value = ctx.document.get(key)
        return None if isinstance(value, Mapping) else value

    return resolve


def nested_value(*keys: str) -> Resolver:
    """Nested value of the episode document (``itunes.title`` and friends)."""

    def resolve(ctx: DerivationContext) -> Any:
        value = ctx.nested(*keys)
        return None if isinstance(value, Mapping) else value

    return resolve


def directory_number(group: int) -> Resolver:
    """Season (1) or episode (2) number from an ``s<N>e<M>`` directory name."""

    def resolve(ctx: DerivationContext) -> str | None:
        match = EPISODE_DIR_RE.fullmatch(ctx.dir_name)
        return match.group(group) if match else None

    return resolve


# Resolvers


def audio_path_value(ctx: DerivationContext) -> str:
    return f"{ctx.dir_name}/{ctx.audio_filename}"


def generated_link(ctx: DerivationContext) -> str | None:
    slug = slugify(ctx.fields.get("ITEM_TITLE"))
    if not ctx.base_link or not slug:
        return None
    return f"{ctx.base_link}/episodes/{slug}.html"


def guid_document_value(ctx: DerivationContext) -> Any:
    value = ctx.document.get("guid")
    return None if isinstance(value, Mapping) else value


def guid_permalink(ctx: DerivationContext) -> str | None:
    value = ctx.nested("guid", "isPermaLink")
    return None if value is None else to_text(value)


def audio_birth_date(ctx: DerivationContext) -> str | None:
    """Creation time of the audio file, where the platform records one."""
    stat = ctx.audio_stat
    if stat is None:
        return None

    birth = getattr(stat, "st_birthtime", None)
    if birth is None and os.name == "nt":
        birth = stat.st_ctime
    if birth is None:
        logger.debug(f"{ctx.audio_path}: creation time not available on this platform")
        return None

    return format_timestamp(birth)


def audio_size(ctx: DerivationContext) -> int | None:
    stat = ctx.audio_stat
    return None if stat is None else stat.st_size


def audio_extension_type(ctx: DerivationContext) -> str | None:
    stat = ctx.audio_stat
    if stat is None or stat.st_size == 0:
        return None
    return AUDIO_MIME_TYPES.get(ctx.audio_path.suffix.lower())


def sniffed_type(ctx: DerivationContext) -> str | None:
    stat = ctx.audio_stat
    sniffer = ctx.capabilities.mime_sniffer
    if stat is None or stat.st_size == 0 or sniffer is None:
        return None
    return sniffer.sniff(ctx.audio_path) or None


def empty_audio_duration(ctx: DerivationContext) -> str | None:
    stat = ctx.audio_stat
    if stat is not None and stat.st_size == 0:
        return ZERO_DURATION
    return None


def probed_duration(ctx: DerivationContext) -> str | None:
    probe = ctx.capabilities.duration_probe
    if ctx.audio_stat is None or probe is None:
        return None
    return format_hhmmss(probe.probe(ctx.audio_path))


def default_image(ctx: DerivationContext) -> str | None:
    return f"{ctx.base_link}/images/cover.jpg" if ctx.base_link else None


def default_chapters_url(ctx: DerivationContext) -> str | None:
    return f"{ctx.base_link}/chapters/{ctx.dir_name}.json" if ctx.base_link else None


def default_chapters_type(ctx: DerivationContext) -> str | None:
    if is_blank(ctx.fields.get("ITEM_PODCAST_CHAPTERS_URL")):
        return None
    return CHAPTERS_MIME_TYPE


def explicit_categories(ctx: DerivationContext) -> list[str]:
    return normalize_categories(ctx.fields.get("ITEM_CATEGORIES"))


def document_categories(ctx: DerivationContext) -> list[str]:
    for key in ("CATEGORIES", "categories", "Categories"):
        if key in ctx.document:
            return normalize_categories(ctx.document[key])
    return []


def category_slot(index: int) -> Resolver:
    def resolve(ctx: DerivationContext) -> str | None:
        categories = ctx.fields.get("ITEM_CATEGORIES") or []
        return categories[index] if index < len(categories) else None

    return resolve


DERIVATION_RULES: tuple[DerivationRule, ...] = (
    DerivationRule("ITEM_PATH", (audio_path_value,), overwrite=True),
    DerivationRule("ITEM_SEASON", (directory_number(1), nested_value("itunes", "season"))),
    DerivationRule("ITEM_EPISODE", (directory_number(2), nested_value("itunes", "episode"))),
    DerivationRule("ITEM_TITLE", (document_value("title"), nested_value("itunes", "title"))),
    DerivationRule("ITEM_SUBTITLE", (nested_value("itunes", "subtitle"),)),
    DerivationRule("ITEM_DESCRIPTION", (document_value("description"),)),
    DerivationRule("ITEM_LINK", (document_value("link"), generated_link)),
    DerivationRule("ITEM_GUID", (nested_value("guid", "value"), guid_document_value)),
    DerivationRule("ITEM_GUID_ISPERMALINK", (guid_permalink,)),
    DerivationRule("ITEM_PUBDATE", (document_value("pubDate"), audio_birth_date)),
    DerivationRule(
        "ITEM_CONTENT_ENCODED",
        (
            document_value("content_html"),
            document_value("content_encoded"),
            document_value("content"),
        ),
    ),
    DerivationRule("ITEM_ENCLOSURE_URL", (nested_value("enclosure", "url"),)),
    DerivationRule("ITEM_ENCLOSURE_LENGTH", (nested_value("enclosure", "length"), audio_size)),
    DerivationRule(
        "ITEM_ENCLOSURE_TYPE",
        (nested_value("enclosure", "type"), audio_extension_type, sniffed_type),
    ),
    DerivationRule(
        "ITEM_DURATION",
        (nested_value("itunes", "duration"), empty_audio_duration, probed_duration),
    ),
    DerivationRule(
        "ITEM_ITUNES_IMAGE_HREF",
        (
            nested_value("itunes", "image"),
            nested_value("itunes", "image_href"),
            default_image,
        ),
    ),
    DerivationRule(
        "ITEM_PODCAST_CHAPTERS_URL",
        (nested_value("podcast", "chapters", "url"), default_chapters_url),
    ),
    DerivationRule(
        "ITEM_PODCAST_CHAPTERS_TYPE",
        (nested_value("podcast", "chapters", "type"), default_chapters_type),
    ),
    DerivationRule(
        "ITEM_PODCAST_TRANSCRIPT_URL", (nested_value("podcast", "transcript", "url"),)
    ),
    DerivationRule(
        "ITEM_PODCAST_TRANSCRIPT_TYPE", (nested_value("podcast", "transcript", "type"),)
    ),
    DerivationRule(
        "ITEM_CATEGORIES",
        (explicit_categories, document_categories),
        overwrite=True,
        default=list,
    ),
    *(
        DerivationRule(f"ITEM_CATEGORY_{i + 1}", (category_slot(i),))
        for i in range(LEGACY_CATEGORY_SLOTS)
    ),
)


class FieldDeriver:
    """Fill in well-known episode fields that the metadata leaves blank."""

    def __init__(
        self,
        capabilities: Capabilities | None = None,
        audio_filename: str = "audio.mp3",
        rules: tuple[DerivationRule, ...] = DERIVATION_RULES,
    ):
        """Initialize the deriver.

        Args:
            capabilities: External tools (default: none available)
            audio_filename: Audio asset name inside each episode directory
            rules: Ordered rule table
        """
        self.capabilities = capabilities or Capabilities.none()
        self.audio_filename = audio_filename
        self.rules = rules

    def derive(
        self,
        mapping: Mapping[str, Any],
        episode_dir: Path,
        document: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Return a copy of ``mapping`` with blank well-known keys derived.

        Args:
            mapping: Merged global + episode mapping
            episode_dir: Episode directory
            document: Raw episode document, for nested lookups

        Returns:
            New mapping; the input is not modified
        """
        fields = dict(mapping)
        ctx = DerivationContext(
            fields=fields,
            document=document or {},
            episode_dir=episode_dir,
            audio_filename=self.audio_filename,
            capabilities=self.capabilities,
        )

        for rule in self.rules:
            if not rule.overwrite and not is_blank(fields.get(rule.key)):
                continue
            self._apply(rule, ctx)

        return fields

    def _apply(self, rule: DerivationRule, ctx: DerivationContext) -> None:
        for resolver in rule.resolvers:
            try:
                value = resolver(ctx)
            except (OSError, ValueError, CapabilityError) as e:
                logger.debug(f"{ctx.dir_name}: cannot derive {rule.key}: {e}")
                continue

            if not is_blank(value):
                ctx.fields[rule.key] = value
                return

        if rule.default is not None:
            ctx.fields[rule.key] = rule.default()
