"""
Orchestration d'un job de traduction d'EPUB.

Le JobController enchaîne, document par document dans l'ordre du spine :
lecture -> extraction des blocs -> découpage en chunks -> traduction et
réinsertion chunk par chunk -> réécriture dans l'archive -> instantané de
progression. Il expose la pause (entre deux documents), l'annulation
(à tout point d'attente) et la progression incrémentale.
"""

import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Protocol

from .archive import EpubArchive
from .cancellation import CancellationToken, PauseGate
from .config import TranslationConfig
from .exceptions import (
    GenerationContractViolation,
    MissingDocumentError,
    TranslationCancelled,
)
from .htmlpage import HtmlPage, TranslationApplier
from .llm import TranslationClient
from .logger import get_logger
from .segment import Chunk, Chunker
from .spine import resolve_spine
from .translation.result import ResultCountMismatch, TranslationResult

logger = get_logger(__name__)


class JobPhase(Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    UNPACKING = "unpacking"
    PROCESSING_DOCUMENT = "processing_document"
    CHUNK_TRANSLATING = "chunk_translating"
    APPLYING = "applying"
    REWRITING = "rewriting"
    PAUSED = "paused"
    REPACKING = "repacking"
    COMPLETE = "complete"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class ProgressSnapshot:
    """
    État émis après chaque document terminé.

    Attributes:
        document_path: Document qui vient d'être réécrit
        document_index: Position du document dans le spine (commence à 1)
        total_documents: Nombre de documents du spine
        status_text: Ligne de statut ("Traité : ...")
        partial_archive: Archive complète sérialisée à cet instant
        html_preview: Contenu du <body> du document, pour un aperçu
    """

    document_path: str
    document_index: int
    total_documents: int
    status_text: str
    partial_archive: bytes
    html_preview: str


@dataclass(frozen=True)
class JobResult:
    archive: bytes
    status_text: str
    documents_translated: int
    documents_skipped: int
    notes: tuple[ResultCountMismatch, ...] = ()

    @property
    def degraded(self) -> bool:
        """Vrai si au moins un chunk a reçu un nombre de traductions incorrect."""
        return bool(self.notes)


class Translator(Protocol):
    def translate(
        self,
        chunk: Chunk,
        preceding_text: Optional[str] = None,
        following_text: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
        language_instruction: Optional[str] = None,
        model_id: Optional[str] = None,
        log_context: Optional[str] = None,
    ) -> TranslationResult: ...


ProgressCallback = Callable[[ProgressSnapshot], None]
StatusCallback = Callable[[str], None]


class JobController:
    """
    Pilote une traduction complète et ses signaux de contrôle.

    `start()` s'exécute dans le thread appelant et bloque jusqu'à la fin du
    job. `request_pause()`, `resume()` et `request_cancel()` sont appelés
    depuis d'autres threads (interface, CLI).

    Un seul job à la fois par contrôleur. Une pause ou une annulation
    demandée avant `start()` s'applique au job qui démarre ; les signaux
    sont remis à zéro à la fin de chaque job.

    Example:
        >>> controller = JobController(on_progress=lambda s: print(s.status_text))
        >>> result = controller.start("book.epub", TranslationConfig())
        >>> Path("book_en.epub").write_bytes(result.archive)
    """

    def __init__(
        self,
        on_progress: Optional[ProgressCallback] = None,
        on_status: Optional[StatusCallback] = None,
        translator: Optional[Translator] = None,
    ) -> None:
        self.on_progress = on_progress
        self.on_status = on_status
        self.translator = translator

        self._run_lock = threading.Lock()
        self._token = CancellationToken()
        self._gate = PauseGate()
        self._phase = JobPhase.IDLE
        self._status_text = ""
        self._archive: Optional[EpubArchive] = None
        self._latest_snapshot: Optional[ProgressSnapshot] = None
        self._notes: list[ResultCountMismatch] = []
        self._document_index = 0

    # -----------------------------------
    # 🔹 Surface de contrôle
    # -----------------------------------
    @property
    def phase(self) -> JobPhase:
        return self._phase

    @property
    def is_paused(self) -> bool:
        return self._phase is JobPhase.PAUSED

    @property
    def status_text(self) -> str:
        return self._status_text

    @property
    def document_index(self) -> int:
        """Position (1-based) du document en cours ou du dernier traité."""
        return self._document_index

    @property
    def latest_snapshot(self) -> Optional[ProgressSnapshot]:
        return self._latest_snapshot

    @property
    def partial_archive(self) -> Optional[bytes]:
        """Octets du dernier instantané, ou None si aucun document n'est terminé."""
        if self._latest_snapshot is None:
            return None
        return self._latest_snapshot.partial_archive

    def request_cancel(self) -> None:
        logger.info("🛑 Annulation demandée")
        self._token.cancel()

    def request_pause(self) -> None:
        """La pause prend effet à la prochaine frontière de document."""
        logger.info("⏸️ Pause demandée")
        self._gate.close()

    def resume(self) -> None:
        logger.info("▶️ Reprise demandée")
        self._gate.open()

    # -----------------------------------
    # 🔹 Exécution
    # -----------------------------------
    def start(
        self,
        source: bytes | str | Path | EpubArchive,
        config: TranslationConfig,
    ) -> JobResult:
        """
        Traduit l'archive et retourne l'archive finale sérialisée.

        Args:
            source: Octets de l'EPUB, chemin du fichier ou archive déjà chargée
            config: Options de la traduction

        Returns:
            JobResult (archive traduite, statut final, compteurs, notes)

        Raises:
            RuntimeError: Si un job est déjà en cours sur ce contrôleur
            MalformedArchiveError: Archive ou manifeste illisible
            GenerationContractViolation: Réponse hors schéma (document_path et
                chunk_index renseignés)
            TranslationCancelled: Annulation demandée (partial_archive renseigné)
            openai.OpenAIError: Erreur de transport, propagée telle quelle
        """
        if not self._run_lock.acquire(blocking=False):
            raise RuntimeError("❌ Un job de traduction est déjà en cours")
        try:
            self._reset()
            return self._run(source, config)
        finally:
            # Les signaux reçus pendant ce job ne valent pas pour le suivant
            self._token = CancellationToken()
            self._gate = PauseGate()
            self._run_lock.release()

    def _reset(self) -> None:
        self._archive = None
        self._latest_snapshot = None
        self._notes = []
        self._document_index = 0

    def _run(
        self, source: bytes | str | Path | EpubArchive, config: TranslationConfig
    ) -> JobResult:
        self._set_phase(JobPhase.INITIALIZING)
        self._emit_status("Initialisation...")

        translator = self.translator
        owned_client = None
        try:
            # Annulation demandée avant le démarrage
            self._token.raise_if_cancelled()

            if translator is None:
                owned_client = TranslationClient.from_config(config)
                translator = owned_client

            self._set_phase(JobPhase.UNPACKING)
            self._emit_status("Décompression de l'EPUB...")
            archive = self._load_archive(source)
            self._archive = archive
            spine = resolve_spine(archive)
            logger.info(f"📑 {len(spine)} document(s) dans le spine")

            chunker = Chunker(config.chunk_char_budget, config.max_blocks_per_chunk)
            applier = TranslationApplier(config.translation_mode)
            translated = 0
            skipped = 0

            for document_index, path in enumerate(spine, start=1):
                self._token.raise_if_cancelled()
                self._document_index = document_index

                if self._process_document(
                    archive, path, document_index, len(spine),
                    translator, chunker, applier, config,
                ):
                    translated += 1
                else:
                    skipped += 1

            self._token.raise_if_cancelled()
            self._set_phase(JobPhase.REPACKING)
            data = archive.serialize()

            status = "Traduction terminée !"
            if self._notes:
                status += f" ({len(self._notes)} chunk(s) avec un nombre de traductions incorrect)"
            self._set_phase(JobPhase.COMPLETE)
            self._emit_status(status)
            logger.info(
                f"✅ {translated} document(s) traduit(s), {skipped} ignoré(s)"
            )
            return JobResult(
                archive=data,
                status_text=status,
                documents_translated=translated,
                documents_skipped=skipped,
                notes=tuple(self._notes),
            )

        except TranslationCancelled as e:
            self._set_phase(JobPhase.CANCELLED)
            self._emit_status("Traduction annulée")
            e.partial_archive = self.partial_archive
            raise

        except Exception:
            self._set_phase(JobPhase.FAILED)
            logger.exception("❌ Échec du job de traduction")
            raise

        finally:
            if owned_client is not None:
                owned_client.close()

    def _process_document(
        self,
        archive: EpubArchive,
        path: str,
        document_index: int,
        total_documents: int,
        translator: Translator,
        chunker: Chunker,
        applier: TranslationApplier,
        config: TranslationConfig,
    ) -> bool:
        """
        Traduit un document et le réécrit dans l'archive.

        Returns:
            False si le document a été ignoré (absent, illisible ou sans bloc)
        """
        self._set_phase(JobPhase.PROCESSING_DOCUMENT)
        self._emit_status(f"Traitement : {path}")

        try:
            page = self._load_document(archive, path)
        except MissingDocumentError as e:
            logger.warning(f"⚠️ {e} : document ignoré")
            return False

        blocks = page.extract_blocks()
        if not blocks:
            logger.info(f"⏭️ {path} : aucun bloc traduisible, document ignoré")
            return False

        chunks = chunker.split(blocks)
        logger.info(f"📄 {path} : {len(blocks)} bloc(s), {len(chunks)} chunk(s)")

        for chunk in chunks:
            self._token.raise_if_cancelled()
            self._set_phase(JobPhase.CHUNK_TRANSLATING)
            self._emit_status(
                f"Traduction du chunk {chunk.index + 1}/{len(chunks)} de {path}..."
            )

            try:
                result = translator.translate(
                    chunk,
                    preceding_text=chunk.head or None,
                    following_text=chunk.tail or None,
                    cancel_token=self._token,
                    language_instruction=config.target_language_instruction,
                    model_id=config.model_id,
                    log_context=f"{Path(path).stem}_chunk_{chunk.index:03d}",
                )
            except GenerationContractViolation as e:
                e.document_path = path
                e.chunk_index = chunk.index
                raise

            # Une réponse arrivée après l'annulation est ignorée
            self._token.raise_if_cancelled()

            if result.is_count_mismatch:
                note = ResultCountMismatch(
                    document_path=path,
                    chunk_index=chunk.index,
                    expected=result.expected_count,
                    received=result.received_count,
                )
                self._notes.append(note)
                logger.warning(f"⚠️ {note}")

            self._set_phase(JobPhase.APPLYING)
            applier.apply(chunk, result)

        self._set_phase(JobPhase.REWRITING)
        archive.write(path, page.serialize())

        status = f"Traité : {path}"
        snapshot = ProgressSnapshot(
            document_path=path,
            document_index=document_index,
            total_documents=total_documents,
            status_text=status,
            partial_archive=archive.serialize(),
            html_preview=page.body_html(),
        )
        self._latest_snapshot = snapshot
        self._emit_status(status)
        if self.on_progress is not None:
            self.on_progress(snapshot)

        self._pause_point()
        return True

    def _pause_point(self) -> None:
        """Bloque entre deux documents tant que la pause est active."""
        if not self._gate.is_closed:
            return
        previous = self._phase
        self._set_phase(JobPhase.PAUSED)
        self._emit_status("En pause")
        self._gate.wait(self._token)
        self._set_phase(previous)

    @staticmethod
    def _load_archive(source: bytes | str | Path | EpubArchive) -> EpubArchive:
        match source:
            case EpubArchive():
                return source
            case bytes() | bytearray():
                return EpubArchive.from_bytes(bytes(source))
            case _:
                return EpubArchive.from_path(source)

    @staticmethod
    def _load_document(archive: EpubArchive, path: str) -> HtmlPage:
        data = archive.read(path)
        if data is None:
            raise MissingDocumentError(path)
        try:
            return HtmlPage(path, data)
        except (UnicodeDecodeError, ValueError) as e:
            raise MissingDocumentError(path, f"illisible ({e})") from e

    # -----------------------------------
    # 🔹 Notifications
    # -----------------------------------
    def _set_phase(self, phase: JobPhase) -> None:
        if phase is not self._phase:
            logger.debug(f"Phase : {self._phase.name} -> {phase.name}")
        self._phase = phase

    def _emit_status(self, text: str) -> None:
        self._status_text = text
        logger.info(text)
        if self.on_status is not None:
            self.on_status(text)

    def __repr__(self) -> str:
        return f"JobController(phase={self._phase.name}, document={self._document_index})"
