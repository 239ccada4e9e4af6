"""
Configuration pytest pour les tests epub-llm-translator.

Ce fichier contient les fixtures communes à tous les tests :
- redirection des logs de session dans tmp_path
- construction d'EPUB minimaux en mémoire (zipfile)
- un EPUB produit par ebooklib, pour un cas « réel »
"""

import io
import zipfile
from typing import Iterable, Optional

import pytest

from epub_llm_translator.logger import LogSession

CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="{opf_path}" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

OPF_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="uid">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
    <dc:identifier id="uid">test-book</dc:identifier>
    <dc:title>Livre de test</dc:title>
    <dc:language>en</dc:language>
  </metadata>
  <manifest>
{items}
  </manifest>
  <spine>
{itemrefs}
  </spine>
</package>
"""


XHTML11_DOCTYPE = (
    '<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.1//EN" '
    '"http://www.w3.org/TR/xhtml11/DTD/xhtml11.dtd">'
)


def xhtml(body: str, title: str = "Chapitre", doctype: bool = False) -> str:
    """Document XHTML complet autour d'un contenu de <body>."""
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        + (XHTML11_DOCTYPE + "\n" if doctype else "")
        + '<html xmlns="http://www.w3.org/1999/xhtml">\n'
        f"<head><title>{title}</title></head>\n"
        f"<body>{body}</body>\n"
        "</html>\n"
    )


def build_epub(
    documents: dict[str, str],
    spine: Optional[Iterable[str]] = None,
    opf_path: str = "OEBPS/content.opf",
    extra_entries: Optional[dict[str, bytes]] = None,
) -> bytes:
    """
    Construit un EPUB minimal en mémoire.

    Args:
        documents: href (relatif au dossier de l'OPF) -> contenu XHTML
        spine: hrefs dans l'ordre de lecture (défaut : ordre de documents) ;
            un href absent de documents est déclaré dans le manifest sans
            entrée dans l'archive
        opf_path: Chemin du document OPF dans l'archive
        extra_entries: Entrées supplémentaires (images, CSS...)
    """
    spine = list(spine if spine is not None else documents)
    hrefs = list(dict.fromkeys([*documents, *spine]))
    ids = {href: f"item{position}" for position, href in enumerate(hrefs)}

    items = "\n".join(
        f'    <item id="{ids[href]}" href="{href}" media-type="application/xhtml+xml"/>'
        for href in hrefs
    )
    itemrefs = "\n".join(f'    <itemref idref="{ids[href]}"/>' for href in spine)

    opf_dir = opf_path.rsplit("/", 1)[0] + "/" if "/" in opf_path else ""

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("mimetype", "application/epub+zip", compress_type=zipfile.ZIP_STORED)
        zf.writestr("META-INF/container.xml", CONTAINER_XML.format(opf_path=opf_path))
        zf.writestr(opf_path, OPF_TEMPLATE.format(items=items, itemrefs=itemrefs))
        for href, content in documents.items():
            zf.writestr(opf_dir + href, content)
        for name, data in (extra_entries or {}).items():
            zf.writestr(name, data)
    return buffer.getvalue()


def read_entry(data: bytes, name: str) -> str:
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return zf.read(name).decode("utf-8")


@pytest.fixture(autouse=True)
def log_session(tmp_path):
    """Redirige les logs de la session dans un répertoire temporaire."""
    logs_dir = tmp_path / "logs"
    LogSession.reset(base_dir=logs_dir)
    yield logs_dir
    LogSession.reset()


@pytest.fixture
def make_epub():
    """Fabrique d'EPUB minimaux (voir build_epub)."""
    return build_epub


@pytest.fixture
def entry_reader():
    """Lecture d'une entrée texte dans des octets d'EPUB."""
    return read_entry


@pytest.fixture
def two_chapter_epub() -> bytes:
    """EPUB de deux chapitres, trois blocs au total."""
    return build_epub(
        {
            "chap1.xhtml": xhtml("<h1>Chapter One</h1><p>It was a dark night.</p>"),
            "chap2.xhtml": xhtml("<p>The end.</p>"),
        }
    )


@pytest.fixture
def ebooklib_epub(tmp_path):
    """EPUB écrit par ebooklib (structure EPUB/, nav, ncx)."""
    from ebooklib import epub

    book = epub.EpubBook()
    book.set_identifier("ebooklib-test")
    book.set_title("Livre ebooklib")
    book.set_language("en")

    chap1 = epub.EpubHtml(title="Chapter 1", file_name="chap1.xhtml", lang="en")
    chap1.content = "<h1>Chapter 1</h1><p>First paragraph.</p>"
    chap2 = epub.EpubHtml(title="Chapter 2", file_name="chap2.xhtml", lang="en")
    chap2.content = "<h1>Chapter 2</h1><p>Second paragraph.</p>"

    book.add_item(chap1)
    book.add_item(chap2)
    book.toc = (chap1, chap2)
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    book.spine = ["nav", chap1, chap2]

    path = tmp_path / "ebooklib.epub"
    epub.write_epub(str(path), book)
    return path
