"""
Résultat d'une traduction de chunk et note de dégradation associée.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class TranslationResult:
    """
    Tableau ordonné des traductions renvoyées pour un chunk.

    La lecture est strictement positionnelle : paragraphs[i] correspond au
    bloc i du chunk. Une position au-delà du tableau vaut "".

    Attributes:
        paragraphs: Traductions dans l'ordre des blocs
        expected_count: Nombre de blocs du chunk
    """

    paragraphs: tuple[str, ...]
    expected_count: int

    def get(self, position: int) -> str:
        """Traduction du bloc à cette position ("" si absente)."""
        if 0 <= position < len(self.paragraphs):
            return self.paragraphs[position]
        return ""

    @property
    def received_count(self) -> int:
        return len(self.paragraphs)

    @property
    def is_count_mismatch(self) -> bool:
        return self.received_count != self.expected_count

    def __len__(self) -> int:
        return len(self.paragraphs)


@dataclass(frozen=True)
class ResultCountMismatch:
    """
    Note de dégradation : le service n'a pas renvoyé une entrée par bloc.

    Les positions manquantes ont été traitées comme des traductions vides,
    les entrées en trop ignorées. Ce n'est pas une erreur fatale, mais le
    résultat final du job la signale.
    """

    document_path: str
    chunk_index: int
    expected: int
    received: int

    def __str__(self) -> str:
        return (
            f"{self.document_path} chunk {self.chunk_index} : "
            f"{self.received} traduction(s) reçue(s) pour {self.expected} bloc(s)"
        )
