"""
Tests pour la résolution de l'ordre de lecture (spine).
"""

import io
import zipfile

import pytest

from epub_llm_translator.archive import EpubArchive
from epub_llm_translator.exceptions import MalformedArchiveError
from epub_llm_translator.spine import find_package_document, resolve_href, resolve_spine

from conftest import xhtml


class TestResolveSpine:
    """Tests de resolve_spine sur des archives construites à la main."""

    def test_spine_order_not_manifest_order(self, make_epub):
        """L'ordre vient du spine, pas de l'ordre des entrées."""
        data = make_epub(
            {"a.xhtml": xhtml("<p>A</p>"), "b.xhtml": xhtml("<p>B</p>")},
            spine=["b.xhtml", "a.xhtml"],
        )

        spine = resolve_spine(EpubArchive.from_bytes(data))

        assert spine == ("OEBPS/b.xhtml", "OEBPS/a.xhtml")

    def test_paths_relative_to_package_directory(self, make_epub):
        data = make_epub(
            {"Text/chap1.xhtml": xhtml("<p>A</p>")},
            opf_path="book/content/package.opf",
        )

        spine = resolve_spine(EpubArchive.from_bytes(data))

        assert spine == ("book/content/Text/chap1.xhtml",)

    def test_package_at_archive_root(self, make_epub):
        data = make_epub({"chap1.xhtml": xhtml("<p>A</p>")}, opf_path="content.opf")

        assert resolve_spine(EpubArchive.from_bytes(data)) == ("chap1.xhtml",)

    def test_missing_document_is_kept_in_spine(self, make_epub):
        """Un document référencé mais absent reste dans le spine (ignoré plus tard)."""
        data = make_epub({"a.xhtml": xhtml("<p>A</p>")}, spine=["a.xhtml", "ghost.xhtml"])

        spine = resolve_spine(EpubArchive.from_bytes(data))

        assert spine == ("OEBPS/a.xhtml", "OEBPS/ghost.xhtml")

    def test_unknown_idref_is_dropped(self):
        archive = EpubArchive(
            {
                "META-INF/container.xml": b'<container><rootfiles><rootfile full-path="content.opf"/></rootfiles></container>',
                "content.opf": (
                    b'<package><manifest><item id="c1" href="c1.xhtml"/></manifest>'
                    b'<spine><itemref idref="nope"/><itemref idref="c1"/></spine></package>'
                ),
            }
        )

        assert resolve_spine(archive) == ("c1.xhtml",)

    def test_prefixed_opf_elements(self):
        """Les éléments préfixés (opf:item) sont acceptés."""
        archive = EpubArchive(
            {
                "META-INF/container.xml": b'<container><rootfiles><rootfile full-path="OPS/book.opf"/></rootfiles></container>',
                "OPS/book.opf": (
                    b'<opf:package xmlns:opf="http://www.idpf.org/2007/opf">'
                    b'<opf:manifest><opf:item id="x" href="x.xhtml"/></opf:manifest>'
                    b'<opf:spine><opf:itemref idref="x"/></opf:spine></opf:package>'
                ),
            }
        )

        assert resolve_spine(archive) == ("OPS/x.xhtml",)

    def test_empty_spine_gives_empty_order(self):
        archive = EpubArchive(
            {
                "META-INF/container.xml": b'<container><rootfiles><rootfile full-path="c.opf"/></rootfiles></container>',
                "c.opf": b"<package><manifest/><spine/></package>",
            }
        )

        assert resolve_spine(archive) == ()

    @pytest.mark.parametrize(
        "opf",
        [
            b"\x00\x01 not xml at all {{{",
            b"<metadata><title>Pas de package</title></metadata>",
            b"<package><manifest/></package>",
            b"<package><spine/></package>",
        ],
    )
    def test_unusable_package_document_raises(self, opf):
        """Un OPF illisible ou sans manifest/spine est fatal."""
        archive = EpubArchive(
            {
                "META-INF/container.xml": b'<container><rootfiles><rootfile full-path="c.opf"/></rootfiles></container>',
                "c.opf": opf,
            }
        )

        with pytest.raises(MalformedArchiveError):
            resolve_spine(archive)

    def test_missing_container_raises(self):
        with pytest.raises(MalformedArchiveError):
            resolve_spine(EpubArchive({"mimetype": b"application/epub+zip"}))

    def test_missing_full_path_raises(self):
        archive = EpubArchive(
            {"META-INF/container.xml": b"<container><rootfiles><rootfile/></rootfiles></container>"}
        )
        with pytest.raises(MalformedArchiveError):
            find_package_document(archive)

    def test_missing_package_document_raises(self):
        archive = EpubArchive(
            {
                "META-INF/container.xml": b'<container><rootfiles><rootfile full-path="gone.opf"/></rootfiles></container>'
            }
        )
        with pytest.raises(MalformedArchiveError):
            resolve_spine(archive)

    def test_ebooklib_produced_epub(self, ebooklib_epub):
        """Un EPUB écrit par ebooklib est résolu dans l'ordre du spine."""
        spine = resolve_spine(EpubArchive.from_path(ebooklib_epub))

        assert spine[-2:] == ("EPUB/chap1.xhtml", "EPUB/chap2.xhtml")
        assert all(path.startswith("EPUB/") for path in spine)


class TestResolveHref:
    def test_percent_decoding_and_fragment(self):
        assert resolve_href("OEBPS", "Text/chap%201.xhtml#start") == "OEBPS/Text/chap 1.xhtml"

    def test_parent_segments_are_normalized(self):
        assert resolve_href("OEBPS/content", "../Text/a.xhtml") == "OEBPS/Text/a.xhtml"

    def test_empty_base_dir(self):
        assert resolve_href("", "a.xhtml") == "a.xhtml"
