"""
Contrat d'échange avec le service de traduction.

Organisation du module :
- prompts.py : Rendu des templates Jinja2 (system, contexte, texte à traduire)
- parser.py : Schéma pydantic de la réponse et validation
- result.py : Résultat d'un chunk et note de dégradation
- language.py : Consignes de langue prédéfinies

Exports publics :
    Classes :
        - TemplateRenderer : Rendu des prompts
        - TranslationResponse : Schéma de la réponse structurée
        - TranslationResult : Traductions d'un chunk, lues par position
        - ResultCountMismatch : Note « nombre de traductions incorrect »
        - Language : Langues cibles prédéfinies

    Fonctions :
        - build_response_format : Paramètre response_format (JSON schema)
        - parse_translation_response : Validation d'une réponse brute

Usage :
    >>> from epub_llm_translator.translation import parse_translation_response
    >>> parse_translation_response('{"translation_paragraphs": ["Hola"]}')
    ['Hola']
"""

from .language import Language
from .parser import (
    RESPONSE_SCHEMA_NAME,
    TranslationResponse,
    build_response_format,
    parse_translation_response,
)
from .prompts import TemplateRenderer
from .result import ResultCountMismatch, TranslationResult

__all__ = [
    "RESPONSE_SCHEMA_NAME",
    "Language",
    "TemplateRenderer",
    "TranslationResponse",
    "TranslationResult",
    "ResultCountMismatch",
    "build_response_format",
    "parse_translation_response",
]
