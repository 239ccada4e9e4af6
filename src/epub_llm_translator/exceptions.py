"""
Exceptions du traducteur.

Hiérarchie :
    TranslatorError
    ├── MalformedArchiveError       (fatal, avant tout document)
    ├── MissingDocumentError        (récupérable, document ignoré)
    ├── GenerationContractViolation (fatal, réponse hors schéma)
    ├── TranslationCancelled        (arrêt demandé, pas une erreur)
    └── MissingCredentialError      (configuration)

Les erreurs de transport du SDK openai ne sont pas encapsulées : elles
remontent telles quelles jusqu'à l'appelant.
"""

from typing import Optional


class TranslatorError(Exception):
    """Classe de base de toutes les erreurs du traducteur."""


class MalformedArchiveError(TranslatorError):
    """
    L'archive est illisible ou son manifeste est incomplet.

    Levée quand container.xml, l'attribut full-path ou le document OPF
    est absent ou non parsable.
    """


class MissingDocumentError(TranslatorError):
    """
    Un document référencé par le spine est absent ou illisible.

    Attributes:
        path: Chemin du document dans l'archive
    """

    def __init__(self, path: str, reason: str = "absent de l'archive"):
        self.path = path
        self.reason = reason
        super().__init__(f"Document {path} {reason}")


class GenerationContractViolation(TranslatorError):
    """
    La réponse du service ne respecte pas le schéma attendu.

    Le JobController complète document_path et chunk_index avant de
    propager l'exception.

    Attributes:
        raw_content: Contenu brut renvoyé par le service (peut être None)
        document_path: Document en cours au moment de l'erreur
        chunk_index: Index du chunk fautif dans ce document
    """

    def __init__(
        self,
        message: str,
        raw_content: Optional[str] = None,
        document_path: Optional[str] = None,
        chunk_index: Optional[int] = None,
    ):
        self.raw_content = raw_content
        self.document_path = document_path
        self.chunk_index = chunk_index
        super().__init__(message)

    def __str__(self) -> str:
        message = super().__str__()
        if self.document_path is not None:
            location = f"{self.document_path}, chunk {self.chunk_index}"
            return f"{message} ({location})"
        return message


class TranslationCancelled(TranslatorError):
    """
    La traduction a été arrêtée à la demande de l'appelant.

    Attributes:
        partial_archive: Octets de la dernière archive partielle émise
            (None si aucun document n'a été terminé)
    """

    def __init__(
        self,
        message: str = "Traduction annulée",
        partial_archive: Optional[bytes] = None,
    ):
        self.partial_archive = partial_archive
        super().__init__(message)


class MissingCredentialError(TranslatorError):
    """Aucune clé API n'a été fournie ni trouvée dans l'environnement."""
