"""
Réinsertion des traductions dans l'arbre du document.
"""

import re
from typing import TYPE_CHECKING

from ..config import TranslationMode
from ..logger import get_logger
from .bilingual import Placement, build_translation_markup, placement_for
from .block import Block
from .constants import BLOCK_LEVEL_TAGS, KNOWN_HTML_TAGS
from .node import parse_fragment

if TYPE_CHECKING:
    from ..segment import Chunk
    from ..translation.result import TranslationResult

logger = get_logger(__name__)

_TAG_OPENING = re.compile(r"<(/?)([^\s/<>]+)")


def _escape_unknown_tags(text: str) -> str:
    def replace(match: re.Match) -> str:
        if match.group(2).lower() in KNOWN_HTML_TAGS:
            return match.group(0)
        return "&lt;" + match.group(1) + match.group(2)

    return _TAG_OPENING.sub(replace, text)


def sanitize_translation(text: str) -> str:
    """
    Retire le balisage de niveau bloc d'une traduction.

    Le service doit renvoyer du texte brut, mais peut enfreindre la consigne
    (ex: "<p>Bonjour</p>"). Les balises de bloc sont déballées (un espace
    remplace la frontière), le balisage en ligne est conservé, le texte est
    échappé. Un "<" qui n'ouvre pas une balise HTML connue reste du texte.

    Example:
        >>> sanitize_translation("<p>Bonjour</p><p>le <em>monde</em></p>")
        'Bonjour le <em>monde</em>'
        >>> sanitize_translation("Tom & Jerry")
        'Tom &amp; Jerry'
        >>> sanitize_translation("Appuyez sur <Entrée>")
        'Appuyez sur &lt;Entrée&gt;'
    """
    fragment = parse_fragment(_escape_unknown_tags(text.strip()))
    for tag in fragment.find_all(list(BLOCK_LEVEL_TAGS)):
        tag.insert_after(" ")
        tag.unwrap()
    return re.sub(r" {2,}", " ", fragment.decode()).strip()


class TranslationApplier:
    """
    Écrit les traductions d'un chunk dans l'arbre selon le mode choisi.

    - REPLACE : le contenu de chaque bloc est remplacé par sa traduction ;
      une traduction absente vide le bloc.
    - BILINGUAL : l'original est conservé, la traduction est insérée dans un
      nouvel élément marqué, à l'intérieur du bloc (listes, citations) ou
      juste après (titres, paragraphes). Une traduction vide n'insère rien.

    Example:
        >>> applier = TranslationApplier(TranslationMode.BILINGUAL)
        >>> applier.apply(chunk, result)
    """

    def __init__(self, mode: TranslationMode) -> None:
        self.mode = mode

    def apply(self, chunk: "Chunk", result: "TranslationResult") -> None:
        """Applique result[i] au bloc i du chunk, pour chaque bloc."""
        for position, block in enumerate(chunk.blocks):
            translated = sanitize_translation(result.get(position))
            if self.mode is TranslationMode.REPLACE:
                self.replace_block(block, translated)
            else:
                self.insert_bilingual(block, translated)

    def replace_block(self, block: Block, translated: str) -> None:
        block.node.set_content(translated)

    def insert_bilingual(self, block: Block, translated: str) -> None:
        if not translated:
            logger.warning(
                f"⚠️ Traduction vide pour le bloc {block.index} ({block.node.name}), "
                f"aucune insertion"
            )
            return

        markup = build_translation_markup(block, translated)
        if placement_for(block.kind) is Placement.INSIDE:
            block.node.append_child(markup)
        else:
            block.node.insert_after(markup)


def apply_translation(
    chunk: "Chunk", result: "TranslationResult", mode: TranslationMode
) -> None:
    """Raccourci fonctionnel pour TranslationApplier(mode).apply(chunk, result)."""
    TranslationApplier(mode).apply(chunk, result)
