# File: workshop/naming.py
"""
Workshop - Naming Conventions
==============================
Pure string transformations that turn one canonical name (``"Post"``,
``"TimeRange"``, ``"TestingTestModule"``) into every lexical form the stub
templates need: singular / plural, lower, studly, snake, camel and the
lowercase-concatenated package form.

Conventions:
- Caller-supplied names are assumed to be **singular**.  Pluralisation uses
  an explicit exception dictionary first and suffix rules second, and only
  ever touches the last word (``SalesPerson`` -> ``SalesPeople``).
- Every helper is wrapped in ``functools.lru_cache``; the planner asks for
  the same forms many times per module.
- ``derive()`` is the single entry point used by the planner and validators.
"""

from __future__ import annotations

import functools
import logging
import re
from dataclasses import dataclass
from typing import Callable, Dict, FrozenSet, List, Optional, Tuple

from workshop.exceptions import InvalidNameError

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("workshop.naming")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns
# ---------------------------------------------------------------------------

_NON_ALPHANUM_RE: re.Pattern[str] = re.compile(r"[^a-zA-Z0-9]")
_SPLIT_WORDS_RE: re.Pattern[str] = re.compile(
    r"[A-Z]?[a-z]+|[A-Z]+(?=[A-Z][a-z]|\d|\b)|[A-Z]|\d+"
)
_ALPHA_RE: re.Pattern[str] = re.compile(r"[A-Za-z]")

# ---------------------------------------------------------------------------
# Pluralisation tables
# ---------------------------------------------------------------------------

_IRREGULAR_PLURALS: Dict[str, str] = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "goose": "geese",
    "tooth": "teeth",
    "foot": "feet",
    "ox": "oxen",
    "datum": "data",
    "medium": "media",
    "criterion": "criteria",
    "index": "indices",
    "matrix": "matrices",
    "vertex": "vertices",
    "axis": "axes",
    "crisis": "crises",
    "analysis": "analyses",
    "thesis": "theses",
    "quiz": "quizzes",
    "leaf": "leaves",
    "life": "lives",
    "knife": "knives",
    "wife": "wives",
    "half": "halves",
    "proof": "proofs",
    "roof": "roofs",
    "chief": "chiefs",
    "belief": "beliefs",
    "photo": "photos",
    "piano": "pianos",
    "memo": "memos",
    "logo": "logos",
    "zero": "zeros",
}

_IRREGULAR_SINGULARS: Dict[str, str] = {
    plural: singular for singular, plural in _IRREGULAR_PLURALS.items()
}

_UNCOUNTABLE: FrozenSet[str] = frozenset({
    "equipment", "information", "rice", "money", "species", "series",
    "fish", "sheep", "deer", "news", "feedback", "metadata", "software",
    "hardware", "staff", "furniture", "luggage", "advice", "media",
})

_VOWELS: str = "aeiou"


# ---------------------------------------------------------------------------
# Word splitting & case conversions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def split_words(name: str) -> Tuple[str, ...]:
    """
    Split any casing style into its words, preserving their casing.

    Examples:
        >>> split_words("TimeRange")
        ('Time', 'Range')
        >>> split_words("time_range")
        ('time', 'range')
        >>> split_words("HTTPClient")
        ('HTTP', 'Client')
    """
    cleaned: str = _NON_ALPHANUM_RE.sub(" ", name)
    return tuple(w for w in _SPLIT_WORDS_RE.findall(cleaned) if w)


@functools.lru_cache(maxsize=None)
def to_studly_case(name: str) -> str:
    """
    Convert to StudlyCase: split on word boundaries, capitalise each word.

    Words already carrying inner capitals keep them, so an existing studly
    name survives unchanged:

        >>> to_studly_case("time_range")
        'TimeRange'
        >>> to_studly_case("TestingTestModule")
        'TestingTestModule'
    """
    return "".join(w[0].upper() + w[1:] for w in split_words(name))


@functools.lru_cache(maxsize=None)
def to_snake_case(name: str) -> str:
    """
    Convert to snake_case.

        >>> to_snake_case("TimeRange")
        'time_range'
    """
    return "_".join(w.lower() for w in split_words(name))


@functools.lru_cache(maxsize=None)
def to_camel_case(name: str) -> str:
    """Convert to camelCase (``TimeRange`` -> ``timeRange``)."""
    studly: str = to_studly_case(name)
    if not studly:
        return ""
    return studly[0].lower() + studly[1:]


@functools.lru_cache(maxsize=None)
def to_lower_concat(name: str) -> str:
    """Strip separators and lowercase (``Testing-Test Module`` -> ``testingtestmodule``)."""
    return "".join(w.lower() for w in split_words(name))


# ---------------------------------------------------------------------------
# Singular / plural
# ---------------------------------------------------------------------------


def _match_case(source: str, replacement: str) -> str:
    """Re-apply the casing of *source*'s first letter to *replacement*."""
    if source.isupper() and len(source) > 1:
        return replacement.upper()
    if source[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement


@functools.lru_cache(maxsize=None)
def _pluralise_word(word: str) -> str:
    lower: str = word.lower()

    if lower in _UNCOUNTABLE:
        return word
    if lower in _IRREGULAR_PLURALS:
        return _match_case(word, _IRREGULAR_PLURALS[lower])

    if lower.endswith(("s", "sh", "ch", "x", "z")):
        return word + "es"
    if lower.endswith("y") and len(lower) > 1 and lower[-2] not in _VOWELS:
        return word[:-1] + "ies"
    if lower.endswith("fe"):
        return word[:-2] + "ves"
    if lower.endswith("f") and not lower.endswith("ff"):
        return word[:-1] + "ves"
    if lower.endswith("o") and len(lower) > 1 and lower[-2] not in _VOWELS:
        return word + "es"
    return word + "s"


@functools.lru_cache(maxsize=None)
def _singularise_word(word: str) -> str:
    lower: str = word.lower()

    if lower in _UNCOUNTABLE:
        return word
    if lower in _IRREGULAR_SINGULARS:
        return _match_case(word, _IRREGULAR_SINGULARS[lower])
    if lower in _IRREGULAR_PLURALS:
        return word

    if lower.endswith("ies") and len(lower) > 3:
        return word[:-3] + "y"
    if lower.endswith("ves") and len(lower) > 3:
        return word[:-3] + "f"
    if lower.endswith(("sses", "shes", "ches", "xes", "zes", "oes")):
        return word[:-2]
    if lower.endswith("ss") or lower.endswith("us") or lower.endswith("is"):
        return word
    if lower.endswith("s") and len(lower) > 1:
        return word[:-1]
    return word


def _apply_to_last_word(name: str, transform: Callable[[str], str]) -> str:
    words: Tuple[str, ...] = split_words(name)
    if not words:
        return name
    last: str = words[-1]
    idx: int = name.rfind(last)
    return name[:idx] + transform(last) + name[idx + len(last):]


@functools.lru_cache(maxsize=None)
def to_plural(name: str) -> str:
    """
    Pluralise *name*, which is assumed to be singular.

        >>> to_plural("Category")
        'Categories'
        >>> to_plural("SalesPerson")
        'SalesPeople'
        >>> to_plural("address")
        'addresses'
    """
    if not name:
        return ""
    return _apply_to_last_word(name, _pluralise_word)


@functools.lru_cache(maxsize=None)
def to_singular(name: str) -> str:
    """Best-effort reverse of :func:`to_plural`; only used to flag plural-looking names."""
    if not name:
        return ""
    return _apply_to_last_word(name, _singularise_word)


# ---------------------------------------------------------------------------
# Derived name set
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DerivedNameSet:
    """Every lexical form of one entity, value-object or module name."""

    original: str
    singular: str
    plural: str
    lower_singular: str
    lower_plural: str
    studly_singular: str
    studly_plural: str
    snake_singular: str
    snake_plural: str
    camel_singular: str
    camel_plural: str
    translation_entity: str
    package_identifier: Optional[str] = None


def package_name(vendor: str, module_name: str) -> str:
    """Composer package name: ``lower(vendor)/lower(module)``."""
    return f"{vendor.strip().lower()}/{module_name.strip().lower()}"


@functools.lru_cache(maxsize=None)
def derive(name: str, vendor: Optional[str] = None) -> DerivedNameSet:
    """
    Compute the :class:`DerivedNameSet` for *name*.

    Raises:
        InvalidNameError: for empty input, input without any letter, or
            input whose studly form would start with a digit.
    """
    if name is None or not name.strip():
        raise InvalidNameError(str(name), "name is empty")
    if not _ALPHA_RE.search(name):
        raise InvalidNameError(name, "name contains no alphabetic character")

    singular: str = name.strip()
    studly: str = to_studly_case(singular)
    if not studly or studly[0].isdigit():
        raise InvalidNameError(name, "name must start with a letter")

    plural: str = to_plural(singular)
    studly_plural: str = to_studly_case(plural)

    names: DerivedNameSet = DerivedNameSet(
        original=name,
        singular=singular,
        plural=plural,
        lower_singular=to_lower_concat(singular),
        lower_plural=to_lower_concat(plural),
        studly_singular=studly,
        studly_plural=studly_plural,
        snake_singular=to_snake_case(singular),
        snake_plural=to_snake_case(plural),
        camel_singular=to_camel_case(singular),
        camel_plural=to_camel_case(plural),
        translation_entity=f"{studly}Translation",
        package_identifier=package_name(vendor, singular) if vendor else None,
    )
    logger.debug("Derived names for %r: %s", name, names)
    return names


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DerivedNameSet",
    "derive",
    "package_name",
    "split_words",
    "to_camel_case",
    "to_lower_concat",
    "to_plural",
    "to_singular",
    "to_snake_case",
    "to_studly_case",
]
