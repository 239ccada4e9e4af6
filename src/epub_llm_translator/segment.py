"""
Module de segmentation des blocs d'un document en chunks pour la traduction.

Les blocs d'un document sont regroupés, dans l'ordre, en chunks dont la
taille est bornée en caractères. Chaque chunk connaît le texte de ses
voisins (head/tail) pour que le service dispose du contexte sans le
retraduire.
"""

from dataclasses import dataclass, field
from typing import Iterable

from .config import DEFAULT_CHUNK_CHAR_BUDGET
from .htmlpage import BLOCK_SEPARATOR, Block
from .logger import get_logger

logger = get_logger(__name__)

# Coût d'un bloc en plus de son texte (séparateur "\n\n")
SEPARATOR_COST = len(BLOCK_SEPARATOR)


@dataclass
class Chunk:
    """
    Lot contigu de blocs envoyés ensemble au service de traduction.

    Le format envoyé est le texte des blocs joints par une ligne vide.
    head et tail ne sont que du contexte : ils ne sont jamais traduits.

    Attributes:
        index: Numéro du chunk dans le document (commence à 0)
        blocks: Blocs du chunk, dans l'ordre du document
        char_count: Σ (longueur du texte + 2) sur les blocs
        head: Texte du chunk précédent ("" pour le premier)
        tail: Texte du chunk suivant ("" pour le dernier)
    """

    index: int
    blocks: list[Block] = field(default_factory=list)
    char_count: int = 0
    head: str = ""
    tail: str = ""

    def add(self, block: Block) -> None:
        self.blocks.append(block)
        self.char_count += block_cost(block)

    @property
    def texts(self) -> list[str]:
        return [block.text for block in self.blocks]

    @property
    def text(self) -> str:
        """Texte du chunk tel qu'envoyé au service."""
        return BLOCK_SEPARATOR.join(self.texts)

    def __len__(self) -> int:
        return len(self.blocks)

    def __hash__(self) -> int:
        """Retourne le hash basé sur l'identité de l'objet."""
        return id(self)

    def __repr__(self) -> str:
        return (
            f"Chunk(index={self.index}, "
            f"blocks={len(self.blocks)}, "
            f"chars={self.char_count}, "
            f"head_chars={len(self.head)}, "
            f"tail_chars={len(self.tail)})"
        )


def block_cost(block: Block) -> int:
    """Nombre de caractères qu'un bloc ajoute à un chunk."""
    return block.char_count + SEPARATOR_COST


class Chunker:
    """
    Découpe une séquence ordonnée de blocs en chunks bornés.

    Remplissage glouton de gauche à droite, en une seule passe :
    - un bloc rejoint le chunk courant tant que le total reste <= char_budget
      et que max_blocks_per_chunk (si > 0) n'est pas atteint ;
    - sinon le chunk est fermé et un nouveau commence avec ce bloc ;
    - un chunk vide accepte toujours un bloc, même plus grand que le budget
      (chunk singleton surdimensionné).

    Pas de retour arrière ni de rééquilibrage : le découpage est
    déterministe, deux appels sur les mêmes blocs donnent les mêmes frontières.

    Attributes:
        char_budget: Budget de caractères par chunk
        max_blocks_per_chunk: Nombre maximum de blocs par chunk (0 = illimité)

    Example:
        >>> chunker = Chunker(char_budget=4096)
        >>> for chunk in chunker.split(page.extract_blocks()):
        ...     result = client.translate(chunk, chunk.head, chunk.tail)
    """

    def __init__(
        self,
        char_budget: int = DEFAULT_CHUNK_CHAR_BUDGET,
        max_blocks_per_chunk: int = 0,
    ) -> None:
        if char_budget <= 0:
            raise ValueError(f"char_budget doit être > 0, reçu {char_budget}")
        if max_blocks_per_chunk < 0:
            raise ValueError(
                f"max_blocks_per_chunk doit être >= 0, reçu {max_blocks_per_chunk}"
            )
        self.char_budget = char_budget
        self.max_blocks_per_chunk = max_blocks_per_chunk

    def split(self, blocks: Iterable[Block]) -> list[Chunk]:
        """
        Découpe les blocs en chunks et renseigne le contexte head/tail.

        Returns:
            Liste ordonnée des chunks (vide si aucun bloc)
        """
        chunks: list[Chunk] = []
        current = Chunk(index=0)

        for block in blocks:
            if current.blocks and not self._fits(current, block):
                chunks.append(current)
                current = Chunk(index=len(chunks))
            current.add(block)

            if block.char_count + SEPARATOR_COST > self.char_budget:
                logger.warning(
                    f"⚠️ Bloc {block.index} surdimensionné "
                    f"({block.char_count} caractères > budget {self.char_budget})"
                )

        if current.blocks:
            chunks.append(current)

        self._fill_context(chunks)
        return chunks

    def _fits(self, chunk: Chunk, block: Block) -> bool:
        if self.max_blocks_per_chunk and len(chunk) >= self.max_blocks_per_chunk:
            return False
        return chunk.char_count + block_cost(block) <= self.char_budget

    def _fill_context(self, chunks: list[Chunk]) -> None:
        """Chaque chunk reçoit le texte de son prédécesseur et de son successeur."""
        for position, chunk in enumerate(chunks):
            chunk.head = chunks[position - 1].text if position > 0 else ""
            chunk.tail = chunks[position + 1].text if position + 1 < len(chunks) else ""

    def __repr__(self) -> str:
        max_blocks = self.max_blocks_per_chunk or "∞"
        return f"Chunker(char_budget={self.char_budget}, max_blocks={max_blocks})"


def chunk_blocks(
    blocks: Iterable[Block],
    char_budget: int = DEFAULT_CHUNK_CHAR_BUDGET,
    max_blocks_per_chunk: int = 0,
) -> list[Chunk]:
    """Raccourci fonctionnel pour Chunker(...).split(blocks)."""
    return Chunker(char_budget, max_blocks_per_chunk).split(blocks)
