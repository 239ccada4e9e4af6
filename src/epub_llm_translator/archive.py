"""
Archive EPUB vue comme un magasin clé/valeur d'entrées nommées.

La compression est déléguée à zipfile ; le reste du traducteur ne manipule
que des chemins et des octets.
"""

import io
import zipfile
from pathlib import Path
from typing import Iterator, Optional

from .exceptions import MalformedArchiveError
from .logger import get_logger

logger = get_logger(__name__)

MIMETYPE_ENTRY = "mimetype"
CONTAINER_PATH = "META-INF/container.xml"


class EpubArchive:
    """
    Collection mutable et ordonnée d'entrées (chemin -> octets).

    L'ordre d'origine des entrées est conservé à la sérialisation : une
    entrée remplacée garde sa place, une nouvelle entrée est ajoutée à la
    fin. L'entrée "mimetype" est toujours écrite en premier et sans
    compression, comme l'exige le format OCF.

    Example:
        >>> archive = EpubArchive.from_path("book.epub")
        >>> html = archive.read("OEBPS/chap1.xhtml")
        >>> archive.write("OEBPS/chap1.xhtml", translated)
        >>> archive.save("book_fr.epub")
    """

    def __init__(self, entries: Optional[dict[str, bytes]] = None) -> None:
        self._entries: dict[str, bytes] = dict(entries or {})

    @classmethod
    def from_bytes(cls, data: bytes) -> "EpubArchive":
        """
        Charge une archive depuis ses octets.

        Raises:
            MalformedArchiveError: Si les octets ne forment pas un zip lisible
        """
        try:
            with zipfile.ZipFile(io.BytesIO(data)) as zf:
                entries = {
                    info.filename: zf.read(info)
                    for info in zf.infolist()
                    if not info.is_dir()
                }
        except (zipfile.BadZipFile, zipfile.LargeZipFile, EOFError) as e:
            raise MalformedArchiveError(f"Archive EPUB illisible : {e}") from e

        logger.debug(f"📦 Archive chargée : {len(entries)} entrées")
        return cls(entries)

    @classmethod
    def from_path(cls, path: str | Path) -> "EpubArchive":
        """Charge une archive depuis un fichier."""
        return cls.from_bytes(Path(path).read_bytes())

    def read(self, path: str) -> Optional[bytes]:
        """Retourne le contenu d'une entrée, ou None si elle n'existe pas."""
        return self._entries.get(path)

    def write(self, path: str, data: bytes) -> None:
        """Remplace (ou ajoute) une entrée."""
        self._entries[path] = data

    def names(self) -> list[str]:
        """Liste des entrées dans l'ordre de l'archive."""
        return list(self._entries)

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def serialize(self) -> bytes:
        """
        Produit les octets d'un zip EPUB à partir de l'état courant.

        Peut être appelé à tout moment (instantanés de progression).
        """
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as zf:
            mimetype = self._entries.get(MIMETYPE_ENTRY)
            if mimetype is not None:
                zf.writestr(MIMETYPE_ENTRY, mimetype, compress_type=zipfile.ZIP_STORED)

            for name, data in self._entries.items():
                if name == MIMETYPE_ENTRY:
                    continue
                zf.writestr(name, data, compress_type=zipfile.ZIP_DEFLATED)

        return buffer.getvalue()

    def save(self, path: str | Path) -> Path:
        """Sérialise l'archive dans un fichier (dossier parent créé si besoin)."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.serialize())
        return path

    def __repr__(self) -> str:
        return f"EpubArchive({len(self._entries)} entries)"
