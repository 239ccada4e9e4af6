"""
Résolution de l'ordre de lecture (spine) d'une archive EPUB.

container.xml -> document OPF -> manifest (id -> href) + spine (idref)
-> liste ordonnée des chemins de documents dans l'archive.
"""

import posixpath
from urllib.parse import unquote

from bs4 import BeautifulSoup, Tag

from .archive import CONTAINER_PATH, EpubArchive
from .exceptions import MalformedArchiveError
from .logger import get_logger

logger = get_logger(__name__)

# Ordre de lecture : immuable une fois résolu
SpineOrder = tuple[str, ...]


def resolve_spine(archive: EpubArchive) -> SpineOrder:
    """
    Calcule l'ordre de lecture des documents de l'archive.

    Les idref du spine sans item correspondant dans le manifest sont
    ignorés. L'existence des chemins dans l'archive n'est PAS vérifiée ici :
    le JobController ignore les documents absents.

    Args:
        archive: Archive EPUB chargée

    Returns:
        Tuple des chemins de documents, dans l'ordre du spine

    Raises:
        MalformedArchiveError: Si container.xml, l'attribut full-path
            ou le document OPF est absent, ou si le document OPF n'a pas
            de <package>, de <manifest> ou de <spine>

    Example:
        >>> resolve_spine(archive)
        ('OEBPS/cover.xhtml', 'OEBPS/chap1.xhtml', 'OEBPS/chap2.xhtml')
    """
    opf_path = find_package_document(archive)

    opf_content = archive.read(opf_path)
    if opf_content is None:
        raise MalformedArchiveError(f"Document OPF introuvable : {opf_path}")

    opf = BeautifulSoup(opf_content, "xml")
    opf_dir = posixpath.dirname(opf_path)

    if opf.find("package") is None:
        raise MalformedArchiveError(
            f"Document OPF illisible : {opf_path} (élément <package> introuvable)"
        )

    manifest_tag = opf.find("manifest")
    spine_tag = opf.find("spine")
    if manifest_tag is None or spine_tag is None:
        missing = "<manifest>" if manifest_tag is None else "<spine>"
        raise MalformedArchiveError(f"Document OPF incomplet : {missing} absent de {opf_path}")

    manifest = _read_manifest(manifest_tag, opf_dir)
    if not manifest:
        logger.warning(f"⚠️ Manifest vide dans {opf_path}")

    paths: list[str] = []
    for itemref in spine_tag.find_all("itemref"):
        idref = itemref.get("idref")
        path = manifest.get(idref or "")
        if path is None:
            logger.warning(f"⚠️ idref '{idref}' absent du manifest, ignoré")
            continue
        paths.append(path)

    logger.info(f"📑 Spine résolu : {len(paths)} document(s)")
    return tuple(paths)


def find_package_document(archive: EpubArchive) -> str:
    """
    Lit container.xml et retourne le chemin du document OPF.

    Raises:
        MalformedArchiveError: Si container.xml ou full-path est absent
    """
    container = archive.read(CONTAINER_PATH)
    if container is None:
        raise MalformedArchiveError(f"{CONTAINER_PATH} introuvable.")

    soup = BeautifulSoup(container, "xml")
    rootfile = soup.find("rootfile")
    full_path = rootfile.get("full-path") if rootfile is not None else None
    if not full_path:
        raise MalformedArchiveError(
            f"Chemin du fichier OPF introuvable dans {CONTAINER_PATH}."
        )
    return str(full_path).strip()


def _read_manifest(manifest_tag: Tag, opf_dir: str) -> dict[str, str]:
    """Construit le mapping id -> chemin complet depuis manifest > item."""
    manifest: dict[str, str] = {}
    for item in manifest_tag.find_all("item"):
        item_id = item.get("id")
        href = item.get("href")
        if item_id and href:
            manifest[str(item_id)] = resolve_href(opf_dir, str(href))
    return manifest


def resolve_href(base_dir: str, href: str) -> str:
    """
    Résout un href du manifest en chemin d'entrée de l'archive.

    Example:
        >>> resolve_href("OEBPS", "Text/chap%201.xhtml#start")
        'OEBPS/Text/chap 1.xhtml'
    """
    href = unquote(href.split("#", 1)[0])
    path = posixpath.join(base_dir, href) if base_dir else href
    return posixpath.normpath(path)
