"""
Classe principale HtmlPage pour parser un document de contenu EPUB et en
extraire les blocs traduisibles.
"""

import re
from html.entities import html5

from bs4 import BeautifulSoup

from ..logger import get_logger
from .block import Block
from .constants import (
    CONTENT_PARSER,
    NBSP_ENTITIES,
    TRANSLATABLE_TAGS,
    TRANSLATION_MARKER_CLASS,
    XML_PREDEFINED_ENTITIES,
)
from .node import MarkupNode, SoupNode

logger = get_logger(__name__)


def normalize_text(text: str) -> str:
    """
    Normalise le texte d'un bloc.

    - Les entités d'espace insécable restées littérales deviennent des espaces
    - Toutes les séquences d'espaces Unicode (dont U+00A0, U+2007, U+202F)
      sont réduites à un seul espace
    - Les espaces de début et de fin sont supprimés

    Example:
        >>> normalize_text("  Hello&#xa0;\\u00a0 world\\n ")
        'Hello world'
    """
    for entity in NBSP_ENTITIES:
        text = text.replace(entity, " ")
    return " ".join(text.split())


_NAMED_ENTITY = re.compile(r"&([A-Za-z][A-Za-z0-9]*);")
_NAMED_ENTITY_BYTES = re.compile(rb"&([A-Za-z][A-Za-z0-9]*);")


def _numeric_reference(name: str) -> str | None:
    if name in XML_PREDEFINED_ENTITIES:
        return None
    chars = html5.get(f"{name};")
    if chars is None:
        return None
    return "".join(f"&#{ord(char)};" for char in chars)


def numeric_entities(content: bytes | str) -> bytes | str:
    """
    Remplace les entités HTML nommées par des références numériques.

    Le parser XML ne charge pas la DTD XHTML : sans cette conversion,
    &nbsp;, &mdash;, &eacute;... disparaîtraient du document. Les entités
    XML prédéfinies et les noms inconnus sont laissés tels quels.

    Example:
        >>> numeric_entities("Keep&nbsp;me &mdash; &amp; co")
        'Keep&#160;me &#8212; &amp; co'
    """
    if isinstance(content, bytes):

        def replace_bytes(match: re.Match) -> bytes:
            reference = _numeric_reference(match.group(1).decode("ascii"))
            return match.group(0) if reference is None else reference.encode("ascii")

        return _NAMED_ENTITY_BYTES.sub(replace_bytes, content)

    def replace(match: re.Match) -> str:
        reference = _numeric_reference(match.group(1))
        return match.group(0) if reference is None else reference

    return _NAMED_ENTITY.sub(replace, content)


class HtmlPage:
    """
    Document de contenu (XHTML) d'un EPUB en cours de traduction.

    L'arbre n'existe que le temps de traiter le document : il est
    sérialisé puis réécrit dans l'archive avant de passer au suivant.

    Attributes:
        path: Chemin de l'entrée dans l'archive
        soup: L'arbre BeautifulSoup parsé
    """

    def __init__(self, path: str, content: bytes | str) -> None:
        self.path = path
        self.soup = BeautifulSoup(numeric_entities(content), CONTENT_PARSER)

    def root(self) -> MarkupNode:
        """Retourne le <body>, ou le document entier s'il n'y en a pas."""
        body = self.soup.find("body")
        return SoupNode(body if body is not None else self.soup)

    def extract_blocks(self) -> list[Block]:
        """
        Extrait les blocs feuilles traduisibles, dans l'ordre du document.

        Sélection en deux passes :
        1. tous les nœuds dont la balise est dans TRANSLATABLE_TAGS ;
        2. on ne garde que ceux sans descendant traduisible (hors traductions
           déjà insérées) et qui ne sont pas eux-mêmes une traduction insérée.

        Un conteneur (ex: <div> englobant des <p>) n'est donc jamais retenu,
        ce qui évite de traduire deux fois le même texte. Les blocs au texte
        normalisé vide sont écartés.

        Returns:
            Liste ordonnée des blocs

        Example:
            >>> page = HtmlPage("chap1.xhtml", "<body><div><p>A</p><p>B</p></div></body>")
            >>> [block.text for block in page.extract_blocks()]
            ['A', 'B']
        """
        blocks: list[Block] = []

        for node in self.root().descendants_matching(TRANSLATABLE_TAGS):
            if _is_translation_artifact(node):
                continue
            if _has_translatable_descendant(node):
                continue

            text = normalize_text(node.text(exclude_class=TRANSLATION_MARKER_CLASS))
            if not text:
                continue

            blocks.append(Block(len(blocks), node, text))

        logger.debug(f"{self.path} : {len(blocks)} bloc(s) extrait(s)")
        return blocks

    def serialize(self) -> bytes:
        """Sérialise le document modifié en UTF-8."""
        return self.soup.encode("utf-8")

    def body_html(self) -> str:
        """Contenu du <body> (aperçu de la progression)."""
        return self.root().inner_markup()

    def __str__(self) -> str:
        return self.path

    def __repr__(self) -> str:
        return f"HtmlPage({self.path})"


def _is_translation_artifact(node: MarkupNode) -> bool:
    return node.has_class(TRANSLATION_MARKER_CLASS) or node.has_ancestor_with_class(
        TRANSLATION_MARKER_CLASS
    )


def _has_translatable_descendant(node: MarkupNode) -> bool:
    return any(
        not _is_translation_artifact(descendant)
        for descendant in node.descendants_matching(TRANSLATABLE_TAGS)
    )
