"""Tests for slug derivation."""

import pytest

from storecatalog.domain.slug import slugify_name


class TestSlugifyName:
    """Tests for slugify_name."""

    def test_lowercases_simple_name(self) -> None:
        """A single word is lowercased."""
        assert slugify_name("Elektronik", "tr") == "elektronik"

    def test_spaces_become_separators(self) -> None:
        """Whitespace runs collapse to a single hyphen."""
        assert slugify_name("Ev   ve  Bahçe", "tr") == "ev-ve-bahce"

    def test_punctuation_is_dropped(self) -> None:
        """Punctuation becomes a separator and is trimmed at the ends."""
        assert slugify_name("  Kitap, Film & Müzik!  ", "tr") == "kitap-film-muzik"

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("İç Giyim", "ic-giyim"),
            ("Çocuk Oyuncakları", "cocuk-oyuncaklari"),
            ("Şık Ayakkabı", "sik-ayakkabi"),
            ("Güzellik Ürünleri", "guzellik-urunleri"),
        ],
    )
    def test_turkish_letters_are_transliterated(self, name: str, expected: str) -> None:
        """Turkish letters map to their ASCII counterparts."""
        assert slugify_name(name, "tr") == expected

    def test_german_locale_expands_umlauts(self) -> None:
        """German umlauts expand to two letters under the German locale."""
        assert slugify_name("Küche", "de") == "kueche"
        assert slugify_name("Straße", "de-DE") == "strasse"

    def test_unknown_locale_uses_plain_transliteration(self) -> None:
        """Unknown locales fall back to plain transliteration."""
        assert slugify_name("Küche", "xx") == "kuche"
        assert slugify_name("Küche") == "kuche"

    def test_deterministic(self) -> None:
        """The same name always yields the same slug."""
        assert slugify_name("Ev Aletleri", "tr") == slugify_name("Ev Aletleri", "tr")

    def test_name_without_letters_gives_empty_slug(self) -> None:
        """Names with nothing usable produce an empty slug."""
        assert slugify_name("!!!", "tr") == ""
