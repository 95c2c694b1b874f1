"""Text helpers shared by search and import code."""

import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")


def strip_accents(value: str) -> str:
    """Remove combining diacritics ("Élève" -> "Eleve")."""
    decomposed = unicodedata.normalize("NFD", value)
    return "".join(char for char in decomposed if not unicodedata.combining(char))


def normalize_for_search(value: str | None) -> str:
    """Lower-case, accent-free, alphanumeric-and-space form used for matching."""
    if not value:
        return ""
    return _NON_ALNUM.sub("", strip_accents(value).lower())


def title_case(value: str) -> str:
    """Capitalize each word, keeping hyphenated parts capitalized ("jean-luc" -> "Jean-Luc")."""
    return "-".join(
        " ".join(word[:1].upper() + word[1:].lower() for word in part.split(" "))
        for part in value.split("-")
    )


def initials_for(first_name: str | None, last_name: str | None) -> str:
    """Initials from first and last name, e.g. ("Sophie", "Martin") -> "SM"."""
    return f"{(first_name or '')[:1]}{(last_name or '')[:1]}".upper()
