"""
Tests unitaires pour EpubArchive.
"""

import io
import zipfile

import pytest

from epub_llm_translator.archive import EpubArchive
from epub_llm_translator.exceptions import MalformedArchiveError


class TestEpubArchive:
    """Tests de lecture, écriture et sérialisation."""

    def test_read_existing_and_missing_entry(self, two_chapter_epub):
        archive = EpubArchive.from_bytes(two_chapter_epub)

        assert archive.read("mimetype") == b"application/epub+zip"
        assert archive.read("OEBPS/absent.xhtml") is None
        assert "OEBPS/chap1.xhtml" in archive
        assert "OEBPS/absent.xhtml" not in archive

    def test_invalid_bytes_raise_malformed_archive(self):
        """Des octets qui ne sont pas un zip donnent MalformedArchiveError."""
        with pytest.raises(MalformedArchiveError):
            EpubArchive.from_bytes(b"ceci n'est pas un zip")

    def test_from_path(self, tmp_path, two_chapter_epub):
        path = tmp_path / "book.epub"
        path.write_bytes(two_chapter_epub)

        archive = EpubArchive.from_path(path)

        assert len(archive) == 5

    def test_mimetype_written_first_and_stored(self):
        """mimetype doit être la première entrée, non compressée (OCF)."""
        archive = EpubArchive(
            {
                "OEBPS/a.xhtml": b"<p>a</p>",
                "mimetype": b"application/epub+zip",
            }
        )

        data = archive.serialize()

        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            infos = zf.infolist()
            assert infos[0].filename == "mimetype"
            assert infos[0].compress_type == zipfile.ZIP_STORED
            assert infos[1].compress_type == zipfile.ZIP_DEFLATED

    def test_replaced_entry_keeps_position(self, two_chapter_epub):
        """Une entrée remplacée garde sa place, une nouvelle va à la fin."""
        archive = EpubArchive.from_bytes(two_chapter_epub)
        original_order = archive.names()

        archive.write("OEBPS/chap1.xhtml", b"<p>traduit</p>")
        archive.write("OEBPS/new.css", b"p {}")

        assert archive.names() == original_order + ["OEBPS/new.css"]

        reloaded = EpubArchive.from_bytes(archive.serialize())
        assert reloaded.names() == archive.names()
        assert reloaded.read("OEBPS/chap1.xhtml") == b"<p>traduit</p>"

    def test_serialize_is_repeatable(self, two_chapter_epub):
        """La sérialisation ne consomme pas l'archive (instantanés multiples)."""
        archive = EpubArchive.from_bytes(two_chapter_epub)

        first = EpubArchive.from_bytes(archive.serialize())
        second = EpubArchive.from_bytes(archive.serialize())

        assert first.names() == second.names()

    def test_save_creates_parent_directory(self, tmp_path, two_chapter_epub):
        archive = EpubArchive.from_bytes(two_chapter_epub)

        path = archive.save(tmp_path / "out" / "book.epub")

        assert path.exists()
        assert EpubArchive.from_path(path).names() == archive.names()
