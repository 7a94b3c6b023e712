import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def fold(value: str) -> str:
    """Lowercase and strip diacritics ("Híbrido" -> "hibrido")."""
    decomposed = unicodedata.normalize("NFD", value.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def slugify(value: str) -> str:
    """
    Derive a URL-safe slug.

    Diacritics are stripped, every run of non-alphanumeric characters becomes a
    single hyphen and leading/trailing hyphens are trimmed. May return an empty
    string when the input has no alphanumeric characters.
    """
    return _NON_ALNUM.sub("-", fold(value)).strip("-")


def with_suffix(slug: str, n: int) -> str:
    """Collision variant of a slug: with_suffix("acme", 2) -> "acme-2"."""
    return f"{slug}-{n}"
