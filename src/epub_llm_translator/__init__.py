"""
Traduction d'EPUB via un service de génération structurée (API compatible OpenAI).

Le processus de traduction :
1. Décompresse l'EPUB et résout l'ordre de lecture (spine) depuis le manifeste
2. Extrait les blocs de texte feuilles de chaque document XHTML
3. Regroupe les blocs en chunks bornés en caractères, avec le texte des
   chunks voisins comme contexte
4. Traduit chaque chunk (réponse JSON validée : un tableau de paragraphes)
5. Réinsère les traductions (remplacement ou bilingue) et réécrit le document
6. Émet une archive partielle après chaque document, puis l'archive finale

Fonctionnalités principales :
- Pause entre deux documents, reprise, annulation à tout moment
- Mode bilingue avec placement selon le type de bloc
- Logs détaillés de chaque requête dans logs/run_<date>/

Organisation du package :
- archive.py : Archive EPUB (entrées zip nommées)
- spine.py : Résolution de l'ordre des documents
- htmlpage/ : Extraction des blocs et réinsertion des traductions
- segment.py : Découpage des blocs en chunks
- llm.py : Client du service de traduction
- translation/ : Prompts, schéma de réponse, résultats
- job.py : Orchestration (JobController)
- cancellation.py : Jeton d'annulation et porte de pause

Usage minimal :
    >>> from epub_llm_translator import JobController, TranslationConfig, Language
    >>>
    >>> # Requiert API_KEY (ou OPENAI_API_KEY) dans l'environnement ou un .env
    >>> config = TranslationConfig(target_language_instruction=Language.FRENCH)
    >>> result = JobController().start("book.epub", config)
    >>> open("book_fr.epub", "wb").write(result.archive)

Usage avec progression et mode bilingue :
    >>> controller = JobController(
    ...     on_progress=lambda snap: print(snap.document_index, snap.total_documents),
    ...     on_status=print,
    ... )
    >>> config = TranslationConfig(
    ...     translation_mode="bilingual",
    ...     target_language_instruction="Translate this text into Japanese",
    ...     max_blocks_per_chunk=20,
    ... )
    >>> result = controller.start("book.epub", config)
"""

from .archive import EpubArchive
from .cancellation import CancellationToken, PauseGate
from .config import TranslationConfig, TranslationMode
from .exceptions import (
    GenerationContractViolation,
    MalformedArchiveError,
    MissingCredentialError,
    MissingDocumentError,
    TranslationCancelled,
    TranslatorError,
)
from .htmlpage import Block, BlockKind, HtmlPage, apply_translation
from .job import JobController, JobPhase, JobResult, ProgressSnapshot
from .llm import TranslationClient
from .segment import Chunk, Chunker, chunk_blocks
from .spine import resolve_spine
from .translation import Language, ResultCountMismatch, TranslationResult

__version__ = "0.1.0"

__all__ = [
    # Orchestration
    "JobController",
    "JobPhase",
    "JobResult",
    "ProgressSnapshot",
    "CancellationToken",
    "PauseGate",
    # Configuration
    "TranslationConfig",
    "TranslationMode",
    "Language",
    # Composants
    "EpubArchive",
    "resolve_spine",
    "HtmlPage",
    "Block",
    "BlockKind",
    "Chunk",
    "Chunker",
    "chunk_blocks",
    "TranslationClient",
    "TranslationResult",
    "ResultCountMismatch",
    "apply_translation",
    # Exceptions
    "TranslatorError",
    "MalformedArchiveError",
    "MissingDocumentError",
    "GenerationContractViolation",
    "TranslationCancelled",
    "MissingCredentialError",
]
