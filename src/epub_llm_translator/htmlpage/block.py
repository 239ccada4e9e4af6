"""
Bloc traduisible : référence vers un nœud feuille d'un document de contenu.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from .constants import HEADING_TAGS, LIST_ITEM_TAGS, QUOTATION_TAGS

if TYPE_CHECKING:
    from .node import MarkupNode


class BlockKind(Enum):
    """
    Classification d'un bloc selon sa balise.

    Elle détermine où la traduction est insérée en mode bilingue.
    """

    PARAGRAPH = "paragraph"
    HEADING = "heading"
    LIST_ITEM = "list_item"
    QUOTATION = "quotation"

    @classmethod
    def for_tag(cls, tag_name: str) -> BlockKind:
        if tag_name in HEADING_TAGS:
            return cls.HEADING
        if tag_name in LIST_ITEM_TAGS:
            return cls.LIST_ITEM
        if tag_name in QUOTATION_TAGS:
            return cls.QUOTATION
        return cls.PARAGRAPH


class Block:
    """
    Un nœud feuille traduisible et son texte normalisé.

    L'égalité et le hash reposent sur l'identité du nœud encapsulé, comme
    pour une clé de dictionnaire : deux blocs au texte identique restent
    distincts.

    Attributes:
        index: Position du bloc dans le document (ordre document, à partir de 0)
        node: Nœud de l'arbre
        kind: Classification de la balise
        text: Texte normalisé (non vide)
    """

    __slots__ = ("index", "node", "kind", "text")

    def __init__(self, index: int, node: MarkupNode, text: str) -> None:
        self.index = index
        self.node = node
        self.kind = BlockKind.for_tag(node.name)
        self.text = text

    @property
    def char_count(self) -> int:
        return len(self.text)

    def __hash__(self) -> int:
        return hash(self.node)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Block):
            return False
        return self.node == other.node

    def __repr__(self) -> str:
        preview = self.text if len(self.text) <= 30 else self.text[:30] + "..."
        return (
            f"Block(index={self.index}, tag={self.node.name}, "
            f"kind={self.kind.value}, text={preview!r})"
        )
