"""
Configuration du traducteur.

Deux niveaux de configuration coexistent :
- des singletons verrouillables (niveaux de log, noms de templates) lus
  par l'infrastructure ;
- une valeur explicite `TranslationConfig` passée au JobController au
  démarrage d'une traduction. Aucun réglage de traduction n'est lu depuis
  un état global.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ConfigBase:
    # Attribut de classe pour le singleton
    _instance = None
    _locked: bool = False

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def lock(self):
        self._locked = True

    def __setattr__(self, name, value):
        if getattr(self, "_locked", False):
            raise AttributeError("Configuration is locked")
        super().__setattr__(name, value)


class TemplateNames(ConfigBase):
    System_Template: str = "system.jinja"
    Context_Template: str = "context.jinja"
    Translate_Template: str = "translate.jinja"


class Logger_Level(ConfigBase):
    level: int = logging.DEBUG
    console_level: int = logging.ERROR
    file_level: int = logging.DEBUG


def lock_config():
    """Verrouille la configuration pour empêcher les modifications ultérieures."""
    Logger_Level().lock()
    TemplateNames().lock()


# ============================================================
# 🔹 Configuration d'une traduction
# ============================================================

# Budget de caractères par requête (non réglable par l'utilisateur)
DEFAULT_CHUNK_CHAR_BUDGET = 4096

DEFAULT_MODEL_ID = "gpt-4.1-nano"

DEFAULT_LANGUAGE_INSTRUCTION = "Translate this text into English"


class TranslationMode(Enum):
    """
    Mode de réinsertion des traductions.

    REPLACE: Remplace le contenu de chaque bloc par sa traduction
    BILINGUAL: Conserve l'original et insère la traduction à côté
    """

    REPLACE = "replace"
    BILINGUAL = "bilingual"


@dataclass(frozen=True)
class TranslationConfig:
    """
    Options reconnues pour une traduction.

    Attributes:
        translation_mode: REPLACE ou BILINGUAL (accepte aussi "replace"/"bilingual")
        target_language_instruction: Consigne libre de langue cible
            (accepte aussi un membre de `Language`)
        model_id: Identifiant du modèle côté service
        max_blocks_per_chunk: Nombre maximum de blocs par requête (0 = illimité)
        service_base_url: URL alternative du service (compatible OpenAI)
        credential: Clé API (None = lue depuis l'environnement / .env)
        request_timeout: Timeout HTTP d'une requête en secondes (None = défaut SDK)
        chunk_char_budget: Budget de caractères par chunk
    """

    translation_mode: TranslationMode = TranslationMode.REPLACE
    target_language_instruction: str = DEFAULT_LANGUAGE_INSTRUCTION
    model_id: str = DEFAULT_MODEL_ID
    max_blocks_per_chunk: int = 0
    service_base_url: Optional[str] = None
    credential: Optional[str] = None
    request_timeout: Optional[float] = None
    chunk_char_budget: int = DEFAULT_CHUNK_CHAR_BUDGET

    def __post_init__(self) -> None:
        if not isinstance(self.translation_mode, TranslationMode):
            object.__setattr__(
                self, "translation_mode", TranslationMode(self.translation_mode)
            )

        # Membre de Language : on récupère sa consigne
        instruction = getattr(
            self.target_language_instruction,
            "instruction",
            self.target_language_instruction,
        )
        object.__setattr__(self, "target_language_instruction", instruction)

        if not self.target_language_instruction.strip():
            raise ValueError("target_language_instruction ne peut pas être vide")
        if not self.model_id.strip():
            raise ValueError("model_id ne peut pas être vide")
        if self.max_blocks_per_chunk < 0:
            raise ValueError(
                f"max_blocks_per_chunk doit être >= 0, reçu {self.max_blocks_per_chunk}"
            )
        if self.chunk_char_budget <= 0:
            raise ValueError(
                f"chunk_char_budget doit être > 0, reçu {self.chunk_char_budget}"
            )
        # Une URL vide équivaut à l'URL par défaut
        if self.service_base_url is not None and not self.service_base_url.strip():
            object.__setattr__(self, "service_base_url", None)
