"""
Schéma et validation des réponses structurées du service de traduction.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from ..exceptions import GenerationContractViolation

RESPONSE_SCHEMA_NAME = "translation_paragraphs"


class TranslationResponse(BaseModel):
    """Réponse attendue : un tableau ordonné de paragraphes traduits."""

    model_config = ConfigDict(extra="forbid")

    translation_paragraphs: list[str]


def build_response_format() -> dict[str, Any]:
    """
    Paramètre response_format de l'API chat completions (JSON schema strict).

    Example:
        >>> build_response_format()["json_schema"]["name"]
        'translation_paragraphs'
    """
    return {
        "type": "json_schema",
        "json_schema": {
            "name": RESPONSE_SCHEMA_NAME,
            "strict": True,
            "schema": TranslationResponse.model_json_schema(),
        },
    }


def parse_translation_response(
    content: Optional[str], refusal: Optional[str] = None
) -> list[str]:
    """
    Valide la réponse brute du service et retourne les paragraphes traduits.

    Aucune réparation n'est tentée : une réponse hors schéma est une
    violation de contrat.

    Args:
        content: Contenu JSON du message de réponse
        refusal: Message de refus renvoyé par le modèle, le cas échéant

    Returns:
        Liste ordonnée des paragraphes traduits

    Raises:
        GenerationContractViolation: Refus, réponse vide ou hors schéma

    Example:
        >>> parse_translation_response('{"translation_paragraphs": ["Bonjour"]}')
        ['Bonjour']
    """
    if refusal:
        raise GenerationContractViolation(
            f"❌ Le modèle a refusé la requête : {refusal}", raw_content=content
        )

    if content is None or not content.strip():
        raise GenerationContractViolation(
            "❌ Réponse vide du service de traduction.\n\n"
            "💡 Causes possibles:\n"
            "  • Le modèle ne supporte pas les sorties structurées (json_schema)\n"
            "  • La limite de tokens de sortie a été atteinte",
            raw_content=content,
        )

    try:
        response = TranslationResponse.model_validate_json(content)
    except ValidationError as e:
        preview = content[:300] + "..." if len(content) > 300 else content
        raise GenerationContractViolation(
            f"❌ Réponse non conforme au schéma {RESPONSE_SCHEMA_NAME}.\n\n"
            f"📝 Sortie reçue:\n{preview}\n\n"
            f"✅ Format attendu:\n"
            f'  {{"translation_paragraphs": ["...", "..."]}}\n\n'
            f"🔍 Détail:\n{e}",
            raw_content=content,
        ) from e

    return response.translation_paragraphs
