"""
Point d'entrée en ligne de commande du traducteur d'EPUB.

    python -m epub_llm_translator livre.epub -l French -o livre_fr.epub

La clé API est lue depuis --api-key, sinon API_KEY / OPENAI_API_KEY
(environnement ou fichier .env). Ctrl-C annule la traduction et enregistre
l'archive partielle à côté du fichier de sortie (*.partial.epub).
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from openai import OpenAIError
from tqdm import tqdm

from .config import (
    DEFAULT_LANGUAGE_INSTRUCTION,
    DEFAULT_MODEL_ID,
    TranslationConfig,
    TranslationMode,
)
from .exceptions import TranslationCancelled, TranslatorError
from .job import JobController, ProgressSnapshot
from .logger import LogSession, get_logger
from .translation.language import Language

logger = get_logger(__name__)


def parse_arguments(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="epub-llm-translator",
        description="Traduit un EPUB via une API compatible OpenAI",
    )

    parser.add_argument("input_file", type=Path, help="Chemin de l'EPUB source")

    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=None,
        help="EPUB de sortie (défaut : <source>_translated.epub)",
    )

    language = parser.add_mutually_exclusive_group()
    language.add_argument(
        "-l", "--language",
        choices=[lang.name.lower() for lang in Language],
        default=None,
        help="Langue cible prédéfinie (ex: french, japanese)",
    )
    language.add_argument(
        "-i", "--instruction",
        default=None,
        help=f'Consigne de langue libre (défaut : "{DEFAULT_LANGUAGE_INSTRUCTION}")',
    )

    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in TranslationMode],
        default=TranslationMode.REPLACE.value,
        help="replace : remplace l'original ; bilingual : conserve l'original (défaut : replace)",
    )

    parser.add_argument(
        "-m", "--model",
        default=DEFAULT_MODEL_ID,
        help=f"Identifiant du modèle (défaut : {DEFAULT_MODEL_ID})",
    )

    parser.add_argument(
        "--max-blocks",
        type=int,
        default=0,
        help="Nombre maximum de blocs par requête (défaut : 0 = illimité)",
    )

    parser.add_argument(
        "--base-url",
        default=None,
        help="URL d'une API compatible OpenAI (défaut : celle du SDK)",
    )

    parser.add_argument(
        "-k", "--api-key",
        default=None,
        help="Clé API (défaut : API_KEY / OPENAI_API_KEY)",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Timeout d'une requête en secondes",
    )

    parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Dossier racine des logs (défaut : logs/ ou EPUB_TRANSLATOR_LOG_DIR)",
    )

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> TranslationConfig:
    if args.language:
        instruction = Language[args.language.upper()].instruction
    else:
        instruction = args.instruction or DEFAULT_LANGUAGE_INSTRUCTION

    return TranslationConfig(
        translation_mode=TranslationMode(args.mode),
        target_language_instruction=instruction,
        model_id=args.model,
        max_blocks_per_chunk=args.max_blocks,
        service_base_url=args.base_url,
        credential=args.api_key,
        request_timeout=args.timeout,
    )


def default_output_path(input_file: Path) -> Path:
    return input_file.with_name(f"{input_file.stem}_translated.epub")


def partial_output_path(output: Path) -> Path:
    return output.with_name(f"{output.stem}.partial.epub")


def _save_partial(data: Optional[bytes], output: Path) -> None:
    if data is None:
        tqdm.write("⚠️ Aucun document terminé : pas d'archive partielle")
        return
    partial = partial_output_path(output)
    partial.write_bytes(data)
    tqdm.write(f"💾 Archive partielle enregistrée sous : {partial}")


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_arguments(argv)

    if args.log_dir is not None:
        LogSession.reset(base_dir=args.log_dir)

    if not args.input_file.exists():
        print(f"❌ Le fichier EPUB source n'existe pas : {args.input_file}", file=sys.stderr)
        return 1

    output: Path = args.output or default_output_path(args.input_file)
    try:
        config = build_config(args)
    except ValueError as e:
        print(f"❌ Option invalide : {e}", file=sys.stderr)
        return 2

    with tqdm(desc="Traduction des documents", unit="doc", ncols=100) as pbar:

        def on_progress(snapshot: ProgressSnapshot) -> None:
            pbar.total = snapshot.total_documents
            pbar.n = snapshot.document_index
            pbar.refresh()

        def on_status(text: str) -> None:
            pbar.set_postfix_str(text[:60])

        controller = JobController(on_progress=on_progress, on_status=on_status)

        try:
            result = controller.start(args.input_file, config)
        except KeyboardInterrupt:
            controller.request_cancel()
            pbar.write("\n❌ Traduction interrompue par l'utilisateur")
            _save_partial(controller.partial_archive, output)
            return 130
        except TranslationCancelled as e:
            _save_partial(e.partial_archive, output)
            return 130
        except (TranslatorError, OpenAIError) as e:
            logger.error(f"Échec de la traduction : {e}")
            pbar.write(f"\n❌ {type(e).__name__}: {e}")
            _save_partial(controller.partial_archive, output)
            return 1

    if not output.parent.exists():
        print("📂 Attention : le dossier de sortie n'existe pas, création en cours...")
        output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(result.archive)

    print(f"✅ {result.status_text}")
    print(
        f"📊 {result.documents_translated} document(s) traduit(s), "
        f"{result.documents_skipped} ignoré(s)"
    )
    for note in result.notes:
        print(f"   ⚠️ {note}")
    print(f"💾 EPUB traduit enregistré sous : {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
