"""Text normalization for duplicate matching.

Hey future me - this module turns noisy tag text into a canonical comparison form!
"The Beatles" should compare equal to "Beatles", "Song (feat. X)" to "Song",
"Abbey Road - Deluxe Edition" to "Abbey Road".

Five independent toggles (all on MatchingConfig):
    ignore_case             -> case-fold
    ignore_punctuation      -> keep only letters, digits and spaces
    ignore_artist_prefixes  -> drop leading "the" / "a" / "an" (artist-like fields only)
    ignore_featuring        -> drop "feat." / "ft." / "featuring" clauses
    ignore_album_editions   -> drop trailing "- Deluxe Edition" / "(Remastered)" suffixes

Which rules apply depends on the FIELD (an artist has no edition suffix, an album
has no featuring credit). See FIELD_RULES.

Rule order: case-fold, featuring clause, edition suffix, punctuation, article.
The featuring and edition rules are located by their delimiters (parentheses,
brackets, dash) so they run before punctuation stripping removes those
delimiters. Every rule is applied until it no longer changes the text, which
makes normalize() idempotent: normalizing an already-normalized string with the
same toggles returns it unchanged.

The Record is never touched - normalize() returns a new string.

Examples:
    >>> rules = NormalizationRules()
    >>> normalize("The Beatles", FieldKind.ARTIST, rules)
    'beatles'
    >>> normalize("Abbey Road (Remastered)", FieldKind.ALBUM, rules)
    'abbey road'
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from soundsift.domain.value_objects.matching_config import MatchingConfig


class FieldKind(Enum):
    """Kinds of textual fields, each with its own applicable rules."""

    TITLE = "title"
    ARTIST = "artist"
    ALBUM = "album"
    GENRE = "genre"


# =============================================================================
# PATTERNS
# All patterns are case-insensitive so they work with ignore_case off, too.
# =============================================================================

ARTICLE_PATTERN = re.compile(r"^(?:the|a|an)\s+(?=\S)", re.IGNORECASE)

# "(feat. X)" / "[ft. X]" anywhere in the field - removed up to the closing bracket
FEATURING_PAREN_PATTERN = re.compile(
    r"\s*[(\[]\s*(?:feat\.?|ft\.?|featuring)\s[^)\]]*[)\]]",
    re.IGNORECASE,
)

# "Song feat. X" / "Song ft X" - removed to the end of the field
FEATURING_TRAILING_PATTERN = re.compile(
    r"\s+(?:feat\.?|ft\.?|featuring)\s+.*$",
    re.IGNORECASE,
)

# Words that mark an edition/annotation suffix. "live", "acoustic" and "demo" are
# deliberately absent: those are different recordings, not duplicates.
_EDITION_WORDS = (
    r"deluxe|remaster(?:ed)?|special|limited|extended|expanded|anniversary"
    r"|collector'?s?|bonus(?:\s+tracks?)?|reissue|mono|stereo|explicit|clean"
)

# "- Deluxe Edition" / "- 2011 Remaster" at the end of the field
EDITION_DASH_PATTERN = re.compile(
    r"\s*[-\u2013\u2014]\s*(?:\d{4}\s+|\d+(?:st|nd|rd|th)\s+)?(?:" + _EDITION_WORDS + r")\b.*$",
    re.IGNORECASE,
)

# "(Remastered)" / "[25th Anniversary Edition]" at the end of the field
EDITION_PAREN_PATTERN = re.compile(
    r"\s*[(\[]\s*(?:\d{4}\s+|\d+(?:st|nd|rd|th)\s+)?(?:" + _EDITION_WORDS + r")\b[^)\]]*[)\]]\s*$",
    re.IGNORECASE,
)

# Apostrophes join their word ("don't" -> "dont") instead of splitting it
APOSTROPHE_PATTERN = re.compile(r"['\u2019`]")

# Anything else that is not a letter/digit/whitespace (underscore counts as punctuation)
PUNCTUATION_PATTERN = re.compile(r"[^\w\s]|_")

WHITESPACE_PATTERN = re.compile(r"\s+")


@dataclass(frozen=True)
class NormalizationRules:
    """The five normalization toggles, detached from the rest of the config."""

    ignore_case: bool = True
    ignore_punctuation: bool = True
    ignore_artist_prefixes: bool = True
    ignore_featuring: bool = False
    ignore_album_editions: bool = True

    @classmethod
    def from_config(cls, config: "MatchingConfig") -> "NormalizationRules":
        """Extract the toggles from a MatchingConfig."""
        return cls(
            ignore_case=config.ignore_case,
            ignore_punctuation=config.ignore_punctuation,
            ignore_artist_prefixes=config.ignore_artist_prefixes,
            ignore_featuring=config.ignore_featuring,
            ignore_album_editions=config.ignore_album_editions,
        )


@dataclass(frozen=True)
class FieldRules:
    """Which structural rules can apply to a field kind."""

    article: bool = False
    featuring: bool = False
    edition: bool = False


FIELD_RULES: dict[FieldKind, FieldRules] = {
    FieldKind.TITLE: FieldRules(featuring=True, edition=True),
    FieldKind.ARTIST: FieldRules(article=True, featuring=True),
    FieldKind.ALBUM: FieldRules(edition=True),
    FieldKind.GENRE: FieldRules(),
}


def _collapse(text: str) -> str:
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def _strip_until_stable(text: str, *patterns: re.Pattern[str]) -> str:
    """Apply the patterns repeatedly until none of them changes the text."""
    previous = None
    while previous != text:
        previous = text
        for pattern in patterns:
            text = _collapse(pattern.sub("", text))
    return text


def strip_featuring(text: str) -> str:
    """Remove featuring clauses ("(feat. X)", "ft. X", "featuring X")."""
    return _strip_until_stable(text, FEATURING_PAREN_PATTERN, FEATURING_TRAILING_PATTERN)


def strip_edition_suffix(text: str) -> str:
    """Remove trailing edition/annotation suffixes ("- Deluxe Edition", "(Remastered)")."""
    stripped = _strip_until_stable(text, EDITION_PAREN_PATTERN, EDITION_DASH_PATTERN)
    # Never strip a field down to nothing: "(Deluxe)" alone stays as it is
    return stripped if stripped else text


def strip_punctuation(text: str) -> str:
    """Keep letters, digits and spaces only.

    Apostrophes are dropped, any other punctuation becomes a word break
    ("AC/DC" -> "ac dc", "Don't" -> "Dont").
    """
    return _collapse(PUNCTUATION_PATTERN.sub(" ", APOSTROPHE_PATTERN.sub("", text)))


def strip_article(text: str) -> str:
    """Remove leading articles, always leaving at least one word.

    "The The" -> "the", "A Tribe Called Quest" -> "tribe called quest".
    """
    return _strip_until_stable(text, ARTICLE_PATTERN)


def normalize(value: str | None, kind: FieldKind, rules: NormalizationRules) -> str:
    """Normalize a raw field value for comparison.

    Args:
        value: Raw tag text (None and blank normalize to "")
        kind: Field kind, decides which structural rules may apply
        rules: Active toggles

    Returns:
        Canonical comparison string (whitespace always collapsed)
    """
    if not value:
        return ""

    applicable = FIELD_RULES[kind]
    normalized = _collapse(value)

    # A later rule can expose work for an earlier one ("song-feat. x" only reads as a
    # featuring clause once the dash is gone), so run full passes until stable.
    # Every pass after the first only removes characters, so this terminates.
    previous = None
    while previous != normalized:
        previous = normalized
        normalized = _apply_rules(normalized, applicable, rules)

    return normalized


def _apply_rules(text: str, applicable: FieldRules, rules: NormalizationRules) -> str:
    """One pass over the enabled rules in their fixed order."""
    if rules.ignore_case:
        text = text.casefold()
    if rules.ignore_featuring and applicable.featuring:
        text = strip_featuring(text)
    if rules.ignore_album_editions and applicable.edition:
        text = strip_edition_suffix(text)
    if rules.ignore_punctuation:
        text = strip_punctuation(text)
    if rules.ignore_artist_prefixes and applicable.article:
        text = strip_article(text)
    return text


__all__ = [
    "FIELD_RULES",
    "FieldKind",
    "FieldRules",
    "NormalizationRules",
    "normalize",
    "strip_article",
    "strip_edition_suffix",
    "strip_featuring",
    "strip_punctuation",
]
