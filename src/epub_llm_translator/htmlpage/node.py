"""
Interface typée sur l'arbre de balises d'un document de contenu.

Le reste du traducteur ne manipule l'arbre qu'à travers le protocole
`MarkupNode`. `SoupNode` en est l'implémentation BeautifulSoup.
"""

import warnings
from typing import Collection, Iterator, Optional, Protocol

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning
from bs4.element import NavigableString, PreformattedString, Tag

from .constants import IGNORED_TAGS

# Les traductions courtes ("chapter1.html", "http://...") ne sont pas des chemins
warnings.filterwarnings("ignore", category=MarkupResemblesLocatorWarning)


class MarkupNode(Protocol):
    """Capacités d'un nœud de l'arbre utilisées par l'extraction et l'application."""

    @property
    def name(self) -> str: ...

    def children(self) -> Iterator["MarkupNode"]: ...

    def descendants_matching(self, tag_set: Collection[str]) -> Iterator["MarkupNode"]: ...

    def matches(self, tag_set: Collection[str]) -> bool: ...

    def attribute(self, name: str) -> Optional[str]: ...

    def has_class(self, class_name: str) -> bool: ...

    def has_ancestor_with_class(self, class_name: str) -> bool: ...

    def text(self, exclude_class: Optional[str] = None) -> str: ...

    def inner_markup(self) -> str: ...

    def set_content(self, markup: str) -> None: ...

    def insert_after(self, markup: str) -> "MarkupNode": ...

    def append_child(self, markup: str) -> "MarkupNode": ...


def parse_fragment(markup: str) -> BeautifulSoup:
    """Parse un fragment HTML tolérant (sortie LLM, balises construites)."""
    return BeautifulSoup(markup, "html.parser")


def class_names(tag: Tag) -> list[str]:
    """
    Retourne les classes CSS d'une balise sous forme de liste.

    Le parser XML renvoie une chaîne, html.parser une liste.
    """
    classes = tag.get("class")
    if classes is None:
        return []
    if isinstance(classes, str):
        return classes.split()
    return list(classes)


class SoupNode:
    """
    Nœud MarkupNode adossé à une balise BeautifulSoup.

    Deux SoupNode sont égaux s'ils encapsulent le même objet Tag (identité,
    pas contenu) : deux paragraphes identiques restent deux nœuds distincts.
    """

    __slots__ = ("tag",)

    def __init__(self, tag: Tag) -> None:
        self.tag = tag

    @property
    def name(self) -> str:
        return self.tag.name

    def children(self) -> Iterator["SoupNode"]:
        for child in self.tag.children:
            if isinstance(child, Tag):
                yield SoupNode(child)

    def descendants_matching(self, tag_set: Collection[str]) -> Iterator["SoupNode"]:
        """Descendants (hors nœud courant) dont le nom est dans tag_set, ordre document."""
        for tag in self.tag.find_all(list(tag_set)):
            yield SoupNode(tag)

    def matches(self, tag_set: Collection[str]) -> bool:
        return self.tag.name in tag_set

    def attribute(self, name: str) -> Optional[str]:
        value = self.tag.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    def has_class(self, class_name: str) -> bool:
        return class_name in class_names(self.tag)

    def has_ancestor_with_class(self, class_name: str) -> bool:
        for parent in self.tag.parents:
            if isinstance(parent, Tag) and class_name in class_names(parent):
                return True
        return False

    def text(self, exclude_class: Optional[str] = None) -> str:
        """
        Texte brut du nœud.

        Les commentaires, le contenu de script/style et les sous-arbres
        portant exclude_class sont ignorés.
        """
        parts: list[str] = []
        self._collect_text(self.tag, parts, exclude_class)
        return "".join(parts)

    def _collect_text(
        self, tag: Tag, parts: list[str], exclude_class: Optional[str]
    ) -> None:
        for child in tag.children:
            if isinstance(child, Tag):
                if child.name in IGNORED_TAGS:
                    continue
                if exclude_class and exclude_class in class_names(child):
                    continue
                self._collect_text(child, parts, exclude_class)
            elif isinstance(child, NavigableString) and not isinstance(
                child, PreformattedString
            ):
                parts.append(str(child))

    def inner_markup(self) -> str:
        return self.tag.decode_contents()

    def set_content(self, markup: str) -> None:
        """Remplace tout le contenu du nœud par le fragment donné."""
        self.tag.clear()
        fragment = parse_fragment(markup)
        for node in list(fragment.contents):
            self.tag.append(node.extract())

    def insert_after(self, markup: str) -> "SoupNode":
        """Insère l'élément décrit par markup juste après ce nœud et le retourne."""
        new_tag = self._build_element(markup)
        self.tag.insert_after(new_tag)
        return SoupNode(new_tag)

    def append_child(self, markup: str) -> "SoupNode":
        """Ajoute l'élément décrit par markup en dernier enfant et le retourne."""
        new_tag = self._build_element(markup)
        self.tag.append(new_tag)
        return SoupNode(new_tag)

    @staticmethod
    def _build_element(markup: str) -> Tag:
        fragment = parse_fragment(markup)
        element = fragment.find(True)
        if element is None:
            raise ValueError(f"Le fragment ne contient aucun élément : {markup!r}")
        return element.extract()

    def __hash__(self) -> int:
        return id(self.tag)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SoupNode):
            return False
        return self.tag is other.tag

    def __repr__(self) -> str:
        return f"SoupNode(<{self.tag.name}>)"
