"""
Rendu des prompts Jinja2 envoyés au service de traduction.

Les templates sont livrés avec le package (dossier templates/) ; un autre
dossier peut être fourni pour les personnaliser, tant qu'il contient les
fichiers nommés dans TemplateNames.
"""

from pathlib import Path
from typing import Optional, TypedDict

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from ..config import TemplateNames

DEFAULT_PROMPT_DIR = Path(__file__).resolve().parent.parent / "templates"


class ContextParams(TypedDict):
    """
    Paramètres pour context.jinja (contexte non traduisible).

    Attributes:
        preceding: Texte du chunk précédent ("" si aucun)
        following: Texte du chunk suivant ("" si aucun)
    """

    preceding: str
    following: str


class TranslateParams(TypedDict):
    """
    Paramètres pour translate.jinja (texte à traduire).

    Attributes:
        content: Textes des blocs joints par une ligne vide
        count: Nombre de blocs, donc d'entrées attendues dans la réponse
        language_instruction: Consigne de langue cible (texte libre)
    """

    content: str
    count: int
    language_instruction: str


class TemplateRenderer:
    """
    Encapsule le rendu des templates avec des paramètres typés.

    Example:
        >>> renderer = TemplateRenderer()
        >>> renderer.render_translate(content="Hello", count=1,
        ...     language_instruction="Translate this text into French")
    """

    def __init__(self, prompt_dir: str | Path | None = None):
        self.env = Environment(
            loader=FileSystemLoader(str(prompt_dir or DEFAULT_PROMPT_DIR)),
            autoescape=select_autoescape(["html", "xml"]),
            undefined=StrictUndefined,
        )

    def render_prompt(self, template_name: str, **kwargs) -> str:
        """Rend un template Jinja2 avec les variables données."""
        template = self.env.get_template(template_name)
        return template.render(**kwargs).strip()

    def render_system(self) -> str:
        return self.render_prompt(TemplateNames.System_Template)

    def render_context(
        self, preceding: Optional[str] = None, following: Optional[str] = None
    ) -> Optional[str]:
        """Rend le tour de contexte, ou None s'il n'y a aucun voisin."""
        if not preceding and not following:
            return None
        params: ContextParams = {
            "preceding": preceding or "",
            "following": following or "",
        }
        return self.render_prompt(TemplateNames.Context_Template, **params)

    def render_translate(
        self, content: str, count: int, language_instruction: str
    ) -> str:
        params: TranslateParams = {
            "content": content,
            "count": count,
            "language_instruction": language_instruction,
        }
        return self.render_prompt(TemplateNames.Translate_Template, **params)
