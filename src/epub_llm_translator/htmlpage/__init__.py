"""
Module pour parser et manipuler les documents de contenu (XHTML) des EPUB.

Ce module fournit des outils pour :
- Exposer l'arbre de balises via une interface typée (MarkupNode)
- Extraire les blocs feuilles traduisibles, dans l'ordre du document
- Réinsérer les traductions (remplacement ou bilingue)

Organisation du module :
- constants.py : Balises traduisibles, marqueur de traduction, séparateurs
- node.py : Protocole MarkupNode et implémentation BeautifulSoup (SoupNode)
- block.py : Bloc traduisible et sa classification (BlockKind)
- page.py : Classe HtmlPage (parsing, extraction, sérialisation)
- bilingual.py : Politique de placement du mode bilingue
- replacement.py : Application des traductions dans l'arbre

Exports publics :
    Classes :
        - HtmlPage : Document de contenu en cours de traduction
        - Block, BlockKind : Bloc traduisible et sa classification
        - MarkupNode, SoupNode : Interface de l'arbre
        - TranslationApplier : Réinsertion des traductions
        - Placement : Position de la traduction en mode bilingue

    Constantes :
        - TRANSLATABLE_TAGS : Balises candidates à l'extraction
        - TRANSLATION_MARKER_CLASS : Classe des traductions insérées
        - BLOCK_SEPARATOR : Séparateur des textes d'un chunk

    Fonctions :
        - normalize_text : Normalisation du texte d'un bloc
        - numeric_entities : Entités HTML nommées -> références numériques
        - apply_translation : Raccourci de TranslationApplier
        - sanitize_translation : Nettoyage du balisage de bloc
"""

# Constantes
from .constants import (
    BLOCK_SEPARATOR,
    IGNORED_TAGS,
    TRANSLATABLE_TAGS,
    TRANSLATION_MARKER_CLASS,
)

# Classes principales
from .node import MarkupNode, SoupNode
from .block import Block, BlockKind
from .page import HtmlPage, normalize_text, numeric_entities
from .bilingual import Placement, placement_for
from .replacement import TranslationApplier, apply_translation, sanitize_translation

__all__ = [
    # Constantes
    "BLOCK_SEPARATOR",
    "IGNORED_TAGS",
    "TRANSLATABLE_TAGS",
    "TRANSLATION_MARKER_CLASS",
    # Classes
    "MarkupNode",
    "SoupNode",
    "Block",
    "BlockKind",
    "HtmlPage",
    "Placement",
    "TranslationApplier",
    # Fonctions
    "normalize_text",
    "numeric_entities",
    "placement_for",
    "apply_translation",
    "sanitize_translation",
]
