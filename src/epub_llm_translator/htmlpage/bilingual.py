"""
Placement des traductions en mode bilingue (original + traduction).
"""

from enum import Enum
from html import escape

from .block import Block, BlockKind
from .constants import TRANSLATION_MARKER_CLASS


class Placement(Enum):
    """
    Position de la traduction par rapport au bloc original.

    INSIDE: Ajoutée en dernier enfant du bloc. Préserve la numérotation
        et l'indentation des listes, et le style des citations.
    AFTER: Insérée comme frère juste après le bloc, avec la même balise.
    """

    INSIDE = "inside"
    AFTER = "after"


PLACEMENT_BY_KIND: dict[BlockKind, Placement] = {
    BlockKind.LIST_ITEM: Placement.INSIDE,
    BlockKind.QUOTATION: Placement.INSIDE,
    BlockKind.HEADING: Placement.AFTER,
    BlockKind.PARAGRAPH: Placement.AFTER,
}


def placement_for(kind: BlockKind) -> Placement:
    return PLACEMENT_BY_KIND[kind]


def build_translation_markup(block: Block, translated_markup: str) -> str:
    """
    Construit l'élément de traduction marqué à insérer pour un bloc.

    - INSIDE : un <p> portant la classe réservée
    - AFTER : une balise identique à l'original, classes d'origine conservées
      (pour hériter du style) plus la classe réservée

    Example:
        >>> build_translation_markup(heading_block, "Chapitre 1")
        '<h2 class="title translated-bilingual">Chapitre 1</h2>'
    """
    if placement_for(block.kind) is Placement.INSIDE:
        tag_name = "p"
        classes = [TRANSLATION_MARKER_CLASS]
    else:
        tag_name = block.node.name
        original_classes = (block.node.attribute("class") or "").split()
        classes = [c for c in original_classes if c != TRANSLATION_MARKER_CLASS]
        classes.append(TRANSLATION_MARKER_CLASS)

    class_attr = escape(" ".join(classes), quote=True)
    return f'<{tag_name} class="{class_attr}">{translated_markup}</{tag_name}>'


__all__ = [
    "Placement",
    "PLACEMENT_BY_KIND",
    "placement_for",
    "build_translation_markup",
]
