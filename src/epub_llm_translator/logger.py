"""
Module de configuration du logging pour epub-llm-translator.

Ce module fournit une fonction centralisée pour configurer le système de logging
avec sortie console et fichier. Tous les modules de l'application l'utilisent
pour obtenir un logger configuré de manière cohérente.

Fonctionnalités :
- Regroupement des logs par session d'exécution dans <base>/run_YYYYMMDD_HHMMSS/
- Création différée des fichiers ET du répertoire de session (rien n'est créé
  tant qu'aucun message n'est émis)
- Nommage contextuel des fichiers (llm_chunk_003.log, translation.log, etc.)

Le répertoire de base vaut "logs" par défaut ; il peut être changé via la
variable d'environnement EPUB_TRANSLATOR_LOG_DIR ou `LogSession.reset(base_dir=...)`.
"""

import logging
import os
import sys
from pathlib import Path
from datetime import datetime
from typing import Optional

from tqdm import tqdm

from .config import Logger_Level

LOG_DIR_ENV = "EPUB_TRANSLATOR_LOG_DIR"


# ============================================================
# 🔹 Gestionnaire de session de logs
# ============================================================


class LogSession:
    """
    Gestionnaire singleton pour regrouper tous les logs d'une exécution.

    Le répertoire <base>/run_YYYYMMDD_HHMMSS/ n'est calculé et créé qu'au
    premier besoin (premier message écrit dans un fichier).
    """

    _base_dir: Optional[Path] = None
    _session_dir: Optional[Path] = None

    @classmethod
    def get_base_dir(cls) -> Path:
        """Retourne le répertoire racine des sessions."""
        if cls._base_dir is None:
            cls._base_dir = Path(os.getenv(LOG_DIR_ENV, "logs"))
        return cls._base_dir

    @classmethod
    def get_session_dir(cls) -> Path:
        """Retourne (et crée si besoin) le répertoire de la session en cours."""
        if cls._session_dir is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            cls._session_dir = cls.get_base_dir() / f"run_{timestamp}"
        cls._session_dir.mkdir(parents=True, exist_ok=True)
        return cls._session_dir

    @classmethod
    def reset(cls, base_dir: str | Path | None = None):
        """
        Termine la session courante.

        Args:
            base_dir: Nouveau répertoire racine (None = retour au défaut)
        """
        cls._base_dir = Path(base_dir) if base_dir is not None else None
        cls._session_dir = None


# ============================================================
# 🔹 Handlers de logging
# ============================================================


class TqdmLoggingHandler(logging.Handler):
    """
    Handler de logging compatible avec tqdm.

    Utilise tqdm.write() pour afficher les logs sans perturber
    les barres de progression.
    """

    def emit(self, record):
        try:
            msg = self.format(record)
            tqdm.write(msg, file=sys.stderr)
        except Exception:
            self.handleError(record)


class LazyFileHandler(logging.Handler):
    """
    Handler qui crée le fichier de log seulement au premier message.

    Le chemin est résolu dans le répertoire de la session active au moment
    du premier message, pas à la création du handler. Un `LogSession.reset()`
    ultérieur redirige les messages vers la nouvelle session.
    """

    def __init__(
        self,
        filename: str,
        mode: str = "a",
        encoding: str = "utf-8",
        level: int = logging.NOTSET,
    ):
        super().__init__(level)
        self.filename = filename
        self.mode = mode
        self.encoding = encoding
        self._handler: Optional[logging.FileHandler] = None
        self._session_dir: Optional[Path] = None

    def _ensure_handler(self) -> logging.FileHandler:
        """Crée (ou recrée après changement de session) le FileHandler sous-jacent."""
        session_dir = LogSession.get_session_dir()
        if self._handler is None or self._session_dir != session_dir:
            if self._handler is not None:
                self._handler.close()
            self._handler = logging.FileHandler(
                session_dir / self.filename,
                mode=self.mode,
                encoding=self.encoding,
            )
            if self.formatter:
                self._handler.setFormatter(self.formatter)
            self._session_dir = session_dir
        return self._handler

    @property
    def path(self) -> Optional[Path]:
        """Chemin du fichier courant (None tant que rien n'a été écrit)."""
        if self._session_dir is None:
            return None
        return self._session_dir / self.filename

    def emit(self, record):
        try:
            self._ensure_handler().emit(record)
        except Exception:
            self.handleError(record)

    def close(self):
        if self._handler:
            self._handler.close()
        super().close()


# ============================================================
# 🔹 Configuration des loggers
# ============================================================


def setup_logger(
    name: str,
    level: int = Logger_Level.level,
    console_level: int = Logger_Level.console_level,
    file_level: int = Logger_Level.file_level,
    log_filename: str = "translation.log",
) -> logging.Logger:
    """
    Configure un logger avec sortie console et fichier.

    Args:
        name: Nom du logger (généralement __name__ du module)
        level: Niveau de logging global du logger
        console_level: Niveau de logging pour la sortie console
        file_level: Niveau de logging pour le fichier
        log_filename: Nom du fichier de log dans la session

    Returns:
        Logger configuré avec handlers console et fichier

    Example:
        >>> logger = setup_logger(__name__)
        >>> logger.info("Traduction démarrée")
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Éviter d'ajouter des handlers multiples si déjà configuré
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    file_handler = LazyFileHandler(log_filename)
    file_handler.setLevel(file_level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger


def get_logger(name: str, log_filename: Optional[str] = None) -> logging.Logger:
    """
    Récupère un logger existant ou en crée un nouveau avec la configuration par défaut.

    Args:
        name: Nom du logger (généralement __name__ du module)
        log_filename: Nom optionnel du fichier de log (None = "translation.log")

    Example:
        >>> logger = get_logger(__name__, "job.log")
        >>> logger.info("Job démarré")
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        return setup_logger(name, log_filename=log_filename or "translation.log")
    return logger


def get_session_log_path(filename: str) -> Path:
    """
    Retourne le chemin complet d'un fichier de log dans le répertoire de session.

    Example:
        >>> get_session_log_path("llm_chunk_001.log")
        PosixPath('logs/run_20251023_143022/llm_chunk_001.log')
    """
    return LogSession.get_session_dir() / filename
