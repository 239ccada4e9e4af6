"""
Tests pour la réinsertion des traductions (modes remplacement et bilingue).
"""

import pytest

from epub_llm_translator.config import TranslationMode
from epub_llm_translator.htmlpage import (
    TRANSLATION_MARKER_CLASS,
    HtmlPage,
    Placement,
    TranslationApplier,
    apply_translation,
    placement_for,
    sanitize_translation,
)
from epub_llm_translator.htmlpage.bilingual import build_translation_markup
from epub_llm_translator.segment import chunk_blocks
from epub_llm_translator.translation.result import TranslationResult

from conftest import xhtml


def translate_page(page: HtmlPage, translations: list[str], mode: TranslationMode):
    """Applique les traductions données au premier (unique) chunk de la page."""
    (chunk,) = chunk_blocks(page.extract_blocks())
    result = TranslationResult(tuple(translations), expected_count=len(chunk))
    apply_translation(chunk, result, mode)
    return chunk


def marked(page: HtmlPage):
    return page.soup.find_all(class_=TRANSLATION_MARKER_CLASS)


class TestSanitizeTranslation:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("  Bonjour  ", "Bonjour"),
            ("<p>Bonjour</p>", "Bonjour"),
            ("<p>Un</p><p>Deux</p>", "Un Deux"),
            ("<div><h2>Titre</h2></div>", "Titre"),
            ("Le <em>monde</em>", "Le <em>monde</em>"),
            ("Tom & Jerry", "Tom &amp; Jerry"),
            ("", ""),
        ],
    )
    def test_block_markup_is_unwrapped(self, raw, expected):
        assert sanitize_translation(raw) == expected

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Appuyez sur <Entrée> pour continuer", "Appuyez sur &lt;Entrée&gt; pour continuer"),
            ("3 < 5 et 5 > 3", "3 &lt; 5 et 5 &gt; 3"),
            ("<Ctrl>+<C> puis <em>vite</em>", "&lt;Ctrl&gt;+&lt;C&gt; puis <em>vite</em>"),
        ],
    )
    def test_unknown_tags_stay_text(self, raw, expected):
        """Un mot entre chevrons n'est pas une balise."""
        assert sanitize_translation(raw) == expected

    def test_angle_brackets_survive_replacement(self):
        page = HtmlPage("c.xhtml", xhtml("<p>Press Enter</p>"))

        translate_page(page, ["Appuyez sur <Entrée>"], TranslationMode.REPLACE)

        assert page.body_html() == "<p>Appuyez sur &lt;Entrée&gt;</p>"
        assert page.extract_blocks()[0].text == "Appuyez sur <Entrée>"


class TestReplaceMode:
    """Le contenu de chaque bloc est remplacé par sa traduction."""

    @pytest.mark.parametrize(
        "body, tag",
        [
            ("<p>Hello</p>", "p"),
            ("<div>Hello</div>", "div"),
            ("<h3>Hello</h3>", "h3"),
            ("<ul><li>Hello</li></ul>", "li"),
            ("<dl><dt>Hello</dt></dl>", "dt"),
            ("<blockquote>Hello</blockquote>", "blockquote"),
        ],
    )
    def test_round_trip_for_every_kind(self, body, tag):
        """Le texte rendu vaut exactement la traduction, une seule fois."""
        page = HtmlPage("c.xhtml", xhtml(body))

        translate_page(page, ["  <p>Bonjour</p>  "], TranslationMode.REPLACE)

        reparsed = HtmlPage("c.xhtml", page.serialize())
        node = reparsed.soup.find(tag)
        assert node.get_text() == "Bonjour"
        assert reparsed.soup.get_text().count("Bonjour") == 1
        assert not marked(reparsed)

    def test_inline_markup_replaced(self):
        page = HtmlPage("c.xhtml", xhtml("<p>Hello <b>big</b> world</p>"))

        translate_page(page, ["Bonjour le monde"], TranslationMode.REPLACE)

        assert page.body_html() == "<p>Bonjour le monde</p>"

    def test_short_result_empties_last_block(self):
        page = HtmlPage("c.xhtml", xhtml("<p>One</p><p>Two</p>"))

        translate_page(page, ["Un"], TranslationMode.REPLACE)

        # Le parser XML rend un élément vide sous forme auto-fermante
        assert page.body_html() == "<p>Un</p><p/>"

    def test_extra_entries_are_ignored(self):
        page = HtmlPage("c.xhtml", xhtml("<p>One</p>"))

        translate_page(page, ["Un", "Deux"], TranslationMode.REPLACE)

        assert page.body_html() == "<p>Un</p>"


class TestBilingualMode:
    """L'original est conservé, la traduction insérée à côté ou dedans."""

    def test_placement_policy(self):
        page = HtmlPage("c.xhtml", xhtml("<h1>H</h1><p>P</p><ul><li>L</li></ul><blockquote>Q</blockquote>"))

        placements = [placement_for(b.kind) for b in page.extract_blocks()]

        assert placements == [Placement.AFTER, Placement.AFTER, Placement.INSIDE, Placement.INSIDE]

    def test_list_item_translation_is_inside(self):
        page = HtmlPage("c.xhtml", xhtml("<ol><li>One</li></ol>"))

        translate_page(page, ["Un"], TranslationMode.BILINGUAL)

        li = page.soup.find("li")
        inserted = li.find("p")
        assert inserted is not None
        assert TRANSLATION_MARKER_CLASS in inserted["class"]
        assert inserted.get_text() == "Un"
        assert len(page.soup.find_all("li")) == 1

    def test_quotation_translation_is_inside(self):
        page = HtmlPage("c.xhtml", xhtml("<blockquote>Quote</blockquote>"))

        translate_page(page, ["Citation"], TranslationMode.BILINGUAL)

        quote = page.soup.find("blockquote")
        assert quote.find("p").get_text() == "Citation"

    def test_heading_translation_is_next_sibling(self):
        page = HtmlPage("c.xhtml", xhtml('<h2 class="title">Chapter</h2><p>Text</p>'))

        translate_page(page, ["Chapitre", "Texte"], TranslationMode.BILINGUAL)

        heading = page.soup.find("h2")
        sibling = heading.find_next_sibling()
        assert sibling.name == "h2"
        assert sibling.get_text() == "Chapitre"
        assert sibling["class"] == ["title", TRANSLATION_MARKER_CLASS]

    def test_paragraph_translation_keeps_tag(self):
        page = HtmlPage("c.xhtml", xhtml("<div>Block</div>"))

        translate_page(page, ["Bloc"], TranslationMode.BILINGUAL)

        divs = page.soup.find_all("div")
        assert [d.get_text() for d in divs] == ["Block", "Bloc"]

    def test_empty_translation_inserts_nothing(self):
        page = HtmlPage("c.xhtml", xhtml("<p>One</p><p>Two</p>"))

        translate_page(page, ["Un"], TranslationMode.BILINGUAL)

        assert len(marked(page)) == 1

    def test_reextraction_never_selects_inserted_nodes(self):
        """Après insertion, seuls les blocs d'origine sont extraits."""
        page = HtmlPage(
            "c.xhtml",
            xhtml("<h1>Title</h1><p>Para</p><ul><li>Item</li></ul><blockquote>Quote</blockquote>"),
        )
        original = [b.text for b in page.extract_blocks()]

        translate_page(page, ["Titre", "Paragraphe", "Élément", "Citation"], TranslationMode.BILINGUAL)

        reparsed = HtmlPage("c.xhtml", page.serialize())
        assert [b.text for b in reparsed.extract_blocks()] == original
        assert len(marked(reparsed)) == 4

    def test_build_translation_markup_escapes_classes(self):
        page = HtmlPage("c.xhtml", xhtml('<p class="a&quot;b">X</p>'))
        (block,) = page.extract_blocks()

        markup = build_translation_markup(block, "Y")

        assert markup == f'<p class="a&quot;b {TRANSLATION_MARKER_CLASS}">Y</p>'


class TestTranslationApplier:
    def test_applier_uses_mode(self):
        page = HtmlPage("c.xhtml", xhtml("<p>One</p>"))
        (chunk,) = chunk_blocks(page.extract_blocks())

        TranslationApplier(TranslationMode.REPLACE).apply(
            chunk, TranslationResult(("Un",), expected_count=1)
        )

        assert page.body_html() == "<p>Un</p>"
