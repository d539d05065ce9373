"""Slug derivation for category names."""

from slugify import slugify

SLUG_SEPARATOR = "-"

# Characters whose transliteration depends on the language
LOCALE_REPLACEMENTS: dict[str, list[list[str]]] = {
    "tr": [
        ["İ", "i"],
        ["I", "ı"],
        ["ı", "i"],
    ],
    "de": [
        ["Ä", "AE"],
        ["ä", "ae"],
        ["Ö", "OE"],
        ["ö", "oe"],
        ["Ü", "UE"],
        ["ü", "ue"],
        ["ß", "ss"],
    ],
}


def slugify_name(name: str, locale: str | None = None) -> str:
    """Derive a URL-safe slug from a display name.

    The name is lowercased under the locale's casing rules, transliterated
    to ASCII, every run of whitespace or punctuation becomes a single
    separator and leading/trailing separators are trimmed.

    Args:
        name: Display name.
        locale: Language code such as "tr" or "de-DE". Unknown locales
            use the plain transliteration.

    Returns:
        Slug string (may be empty if the name has no letters or digits).
    """
    language = (locale or "").split("-")[0].split("_")[0].lower()
    return slugify(
        name,
        separator=SLUG_SEPARATOR,
        lowercase=True,
        replacements=LOCALE_REPLACEMENTS.get(language, []),
    )
