import os
import datetime
import threading
from concurrent.futures import Future, TimeoutError as FutureTimeout
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Optional

from dotenv import load_dotenv
from openai import OpenAI
from openai.types.chat import ChatCompletionMessage, ChatCompletionMessageParam

from .cancellation import DEFAULT_POLL_INTERVAL, CancellationToken
from .config import DEFAULT_LANGUAGE_INSTRUCTION, DEFAULT_MODEL_ID
from .exceptions import (
    GenerationContractViolation,
    MissingCredentialError,
    TranslationCancelled,
)
from .logger import get_logger, get_session_log_path
from .translation.parser import build_response_format, parse_translation_response
from .translation.prompts import TemplateRenderer
from .translation.result import TranslationResult

if TYPE_CHECKING:
    from .config import TranslationConfig
    from .segment import Chunk

logger = get_logger(__name__)


def get_api_key(credential: Optional[str] = None) -> str:
    """
    Retourne la clé API : celle fournie, sinon API_KEY ou OPENAI_API_KEY
    (environnement ou fichier .env).

    Raises:
        MissingCredentialError: Si aucune clé n'est disponible
    """
    if credential:
        return credential

    # Charger les variables d'environnement depuis .env
    load_dotenv()

    api_key = os.getenv("API_KEY") or os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise MissingCredentialError(
            "❌ Aucune clé API définie.\n\n"
            "Pour configurer :\n"
            "  1. Passez credential=... dans TranslationConfig, ou\n"
            "  2. Ajoutez API_KEY=sk-votre-cle (ou OPENAI_API_KEY) dans un fichier .env"
        )
    return api_key


class TranslationClient:
    """
    Client du service de génération structurée (API compatible OpenAI).

    Une requête = un chunk :
      - prompts rendus depuis des templates Jinja2,
      - réponse contrainte par un JSON schema et validée par pydantic,
      - aucune nouvelle tentative (ni ici, ni dans le SDK : max_retries=0),
      - annulation coopérative : la requête tourne sur un thread démon et
        ses connexions sont fermées dès que le jeton est annulé,
      - un fichier de log par requête dans la session de logs.
    """

    def __init__(
        self,
        model_id: str = DEFAULT_MODEL_ID,
        language_instruction: str = DEFAULT_LANGUAGE_INSTRUCTION,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        temperature: Optional[float] = None,
        client: Optional[OpenAI] = None,
        prompt_dir: str | Path | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        log_requests: bool = True,
    ):
        self.model_id = model_id
        self.language_instruction = language_instruction
        self.temperature = temperature
        self.poll_interval = poll_interval
        self.log_requests = log_requests

        # Paramètres du client construit ici (None si le client est fourni)
        self._client_kwargs: Optional[dict[str, Any]] = None
        if client is None:
            client_kwargs: dict[str, Any] = {
                "api_key": get_api_key(api_key),
                "base_url": base_url,
                "max_retries": 0,
            }
            if timeout is not None:
                client_kwargs["timeout"] = timeout
            client = OpenAI(**client_kwargs)
            self._client_kwargs = client_kwargs
        self.client = client

        self.renderer = TemplateRenderer(prompt_dir)

        # Compteur pour nommage unique des logs
        self._log_counter = 0

    @classmethod
    def from_config(cls, config: "TranslationConfig") -> "TranslationClient":
        return cls(
            model_id=config.model_id,
            language_instruction=config.target_language_instruction,
            api_key=config.credential,
            base_url=config.service_base_url,
            timeout=config.request_timeout,
        )

    # -----------------------------------
    # 🔹 Construction de la requête
    # -----------------------------------
    def build_messages(
        self,
        chunk: "Chunk",
        preceding_text: Optional[str] = None,
        following_text: Optional[str] = None,
        language_instruction: Optional[str] = None,
    ) -> list[ChatCompletionMessageParam]:
        """
        Construit les messages d'une requête.

        system -> [user : contexte non traduisible] -> user : texte à traduire
        """
        messages: list[ChatCompletionMessageParam] = [
            {"role": "system", "content": self.renderer.render_system()},
        ]

        context = self.renderer.render_context(preceding_text, following_text)
        if context is not None:
            messages.append({"role": "user", "content": context})

        messages.append(
            {
                "role": "user",
                "content": self.renderer.render_translate(
                    content=chunk.text,
                    count=len(chunk),
                    language_instruction=language_instruction
                    or self.language_instruction,
                ),
            }
        )
        return messages

    # -----------------------------------
    # 🔹 Traduction d'un chunk
    # -----------------------------------
    def translate(
        self,
        chunk: "Chunk",
        preceding_text: Optional[str] = None,
        following_text: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
        language_instruction: Optional[str] = None,
        model_id: Optional[str] = None,
        log_context: Optional[str] = None,
    ) -> TranslationResult:
        """
        Traduit un chunk et retourne le tableau ordonné des traductions.

        Args:
            chunk: Chunk à traduire
            preceding_text: Texte du chunk précédent (contexte seulement)
            following_text: Texte du chunk suivant (contexte seulement)
            cancel_token: Jeton observé pendant la requête
            language_instruction: Consigne de langue (défaut : celle du client)
            model_id: Modèle (défaut : celui du client)
            log_context: Nom du fichier de log de la requête (ex: "chap1_chunk_000")

        Returns:
            TranslationResult, éventuellement de longueur différente du chunk
            (l'appelant décide quoi faire du décalage)

        Raises:
            GenerationContractViolation: Réponse hors schéma
            TranslationCancelled: Jeton annulé avant ou pendant la requête
            openai.OpenAIError: Erreurs de transport, propagées telles quelles
        """
        model = model_id or self.model_id
        messages = self.build_messages(
            chunk, preceding_text, following_text, language_instruction
        )

        log_path = self._create_log(model, messages, log_context or f"chunk_{chunk.index:03d}")

        try:
            message = self._run_cancellable(
                lambda: self._request(model, messages), cancel_token
            )
        except TranslationCancelled:
            self._append_response(log_path, "[ANNULÉ]")
            raise
        except Exception as e:
            self._append_response(log_path, f"[ERREUR: {type(e).__name__}: {e}]")
            raise

        self._append_response(log_path, message.content or "")
        paragraphs = parse_translation_response(
            message.content, getattr(message, "refusal", None)
        )

        result = TranslationResult(tuple(paragraphs), expected_count=len(chunk))
        if result.is_count_mismatch:
            logger.warning(
                f"⚠️ Chunk {chunk.index} : {result.received_count} traduction(s) "
                f"pour {result.expected_count} bloc(s)"
            )
        else:
            logger.info(
                f"✅ Chunk {chunk.index} traduit ({len(chunk)} blocs, {chunk.char_count} chars)"
            )
        return result

    def _request(
        self, model: str, messages: list[ChatCompletionMessageParam]
    ) -> ChatCompletionMessage:
        kwargs: dict[str, Any] = {}
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature

        completion = self.client.chat.completions.create(
            model=model,
            messages=messages,
            response_format=build_response_format(),
            **kwargs,
        )
        if not completion.choices:
            raise GenerationContractViolation("❌ Réponse sans aucun choix")
        return completion.choices[0].message

    def _run_cancellable(
        self, request: Callable[[], ChatCompletionMessage], token: Optional[CancellationToken]
    ) -> ChatCompletionMessage:
        """
        Exécute la requête en surveillant le jeton d'annulation.

        Sans jeton, la requête s'exécute directement dans le thread appelant.
        Sinon elle tourne sur un thread démon : à l'annulation, les connexions
        du client sont fermées pour interrompre la requête, et le thread ne
        retient jamais la fin du processus.
        """
        if token is None:
            return request()

        token.raise_if_cancelled()
        future: Future = Future()

        def run() -> None:
            future.set_running_or_notify_cancel()
            try:
                future.set_result(request())
            except BaseException as e:
                future.set_exception(e)

        threading.Thread(target=run, name="llm-request", daemon=True).start()
        while True:
            try:
                return future.result(timeout=self.poll_interval)
            except FutureTimeout:
                if token.cancelled:
                    self._abort_request()
                    logger.warning("🛑 Requête en cours interrompue (annulation)")
                    raise TranslationCancelled()

    def _abort_request(self) -> None:
        """
        Ferme le client HTTP pour couper la requête en cours, puis en
        construit un neuf pour les appels suivants.

        Un client fourni par l'appelant n'est pas fermé : la requête est
        seulement abandonnée.
        """
        if self._client_kwargs is None:
            return
        self.client.close()
        self.client = OpenAI(**self._client_kwargs)

    def close(self) -> None:
        """Ferme les connexions du client construit par TranslationClient."""
        if self._client_kwargs is not None:
            self.client.close()

    def __enter__(self) -> "TranslationClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -----------------------------------
    # 🔹 Gestion du log
    # -----------------------------------
    def _create_log(
        self,
        model: str,
        messages: list[ChatCompletionMessageParam],
        context: str,
    ) -> Optional[Path]:
        """
        Écrit l'en-tête du log de la requête et retourne son chemin.

        Format du nom : llm_<context>_<counter>_<timestamp>.log
        """
        if not self.log_requests:
            return None

        timestamp = datetime.datetime.now().isoformat().replace(":", "-")
        self._log_counter += 1
        filename = f"llm_{context}_{self._log_counter:04d}_{timestamp}.log"
        log_path = get_session_log_path(filename)

        sections = "\n\n".join(
            f"--- {str(message['role']).upper()} ---\n{message.get('content', '')}"
            for message in messages
        )
        header = (
            f"=== LLM REQUEST LOG ===\n"
            f"Timestamp : {timestamp}\n"
            f"Model     : {model}\n"
            f"{'-'*40}\n\n"
            f"{sections}\n\n"
            f"--- RESPONSE ---\n"
        )
        with open(log_path, "w", encoding="utf-8") as f:
            f.write(header)
        return log_path

    def _append_response(self, log_path: Optional[Path], response: str):
        """Ajoute la réponse à la fin du log existant."""
        if log_path is None:
            return
        with open(log_path, "a", encoding="utf-8") as f:
            f.write(response.strip() + "\n")
