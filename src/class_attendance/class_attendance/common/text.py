from __future__ import annotations

import unicodedata


def name_sort_key(name: str) -> str:
    """Accent- and case-insensitive key ("Élodie" sorts with "elodie")."""

    decomposed = unicodedata.normalize("NFKD", name or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold().strip()
