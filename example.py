"""
Script de configuration pour la traduction d'un EPUB.

Ce script est un exemple de configuration personnalisée, alternative à la
ligne de commande (python -m epub_llm_translator). Modifiez les paramètres :
- Fichier EPUB source et destination
- Langue cible
- Mode de réinsertion (remplacement ou bilingue)
- Modèle et URL du service

Pour utiliser :
1. Copiez ce fichier : cp example.py my_translation.py
2. Modifiez les paramètres dans my_translation.py
3. Exécutez : python my_translation.py

Pendant la traduction, Entrée met en pause / reprend et Ctrl-C annule en
conservant l'archive partielle.
"""

import threading
from pathlib import Path

from epub_llm_translator import (
    JobController,
    Language,
    ProgressSnapshot,
    TranslationCancelled,
    TranslationConfig,
    TranslationMode,
)


def main() -> None:
    # ============================================================
    # CONFIGURATION - Modifiez ces valeurs selon vos besoins
    # ============================================================

    # Fichiers EPUB
    source_epub = Path("books/my_book.epub")
    output_epub = Path(f"books/out/[FR] {source_epub.name}")

    config = TranslationConfig(
        # Langue cible : un membre de Language ou une consigne libre
        target_language_instruction=Language.FRENCH,
        # - TranslationMode.REPLACE : remplace complètement l'original
        # - TranslationMode.BILINGUAL : original + traduction marquée
        translation_mode=TranslationMode.BILINGUAL,
        # Modèle (API compatible OpenAI) ; clé lue depuis .env si None
        model_id="gpt-4.1-nano",
        service_base_url=None,
        credential=None,
        # Limite le nombre de paragraphes par requête (0 = illimité)
        max_blocks_per_chunk=30,
    )

    # ============================================================
    # SUIVI DE LA PROGRESSION
    # ============================================================
    def on_progress(snapshot: ProgressSnapshot) -> None:
        print(
            f"📄 [{snapshot.document_index}/{snapshot.total_documents}] "
            f"{snapshot.status_text}"
        )

    controller = JobController(on_progress=on_progress)

    def toggle_pause() -> None:
        while True:
            input()
            if controller.is_paused:
                controller.resume()
            else:
                controller.request_pause()
                print("⏸️ Pause à la fin du document en cours (Entrée pour reprendre)")

    threading.Thread(target=toggle_pause, daemon=True).start()

    # ============================================================
    # TRADUCTION
    # ============================================================
    print(f"\n📚 Source : {source_epub}")
    print(f"🎯 Consigne : {config.target_language_instruction}")
    print(f"💾 Sortie : {output_epub}")
    print(f"🤖 Modèle : {config.model_id}\n")

    output_epub.parent.mkdir(parents=True, exist_ok=True)
    try:
        result = controller.start(source_epub, config)
    except (KeyboardInterrupt, TranslationCancelled):
        controller.request_cancel()
        if controller.partial_archive is not None:
            partial = output_epub.with_name(f"{output_epub.stem}.partial.epub")
            partial.write_bytes(controller.partial_archive)
            print(f"💾 Archive partielle : {partial}")
        return

    output_epub.write_bytes(result.archive)
    print(f"✅ {result.status_text} -> {output_epub}")


if __name__ == "__main__":
    main()
