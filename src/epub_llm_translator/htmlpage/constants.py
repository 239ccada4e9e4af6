"""
Constantes utilisées pour le parsing et la manipulation des pages XHTML.
"""

# Parser BeautifulSoup des documents de contenu (XHTML = XML, sensible à la casse)
CONTENT_PARSER = "xml"

# Classification des balises traduisibles
HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})
LIST_ITEM_TAGS = frozenset({"li", "dt", "dd"})
QUOTATION_TAGS = frozenset({"blockquote"})
PARAGRAPH_TAGS = frozenset({"p", "div"})

# Balises candidates à l'extraction (seules les feuilles sont retenues)
TRANSLATABLE_TAGS = HEADING_TAGS | LIST_ITEM_TAGS | QUOTATION_TAGS | PARAGRAPH_TAGS

# Balises dont le texte n'est jamais extrait
IGNORED_TAGS = frozenset({"script", "style"})

# Balises de niveau bloc retirées des traductions renvoyées par le service
BLOCK_LEVEL_TAGS = TRANSLATABLE_TAGS | frozenset(
    {
        "html",
        "head",
        "body",
        "section",
        "article",
        "aside",
        "header",
        "footer",
        "nav",
        "ul",
        "ol",
        "dl",
        "table",
        "thead",
        "tbody",
        "tr",
        "td",
        "th",
        "figure",
        "figcaption",
        "pre",
    }
)

# Classe CSS réservée marquant les traductions insérées (mode bilingue)
TRANSLATION_MARKER_CLASS = "translated-bilingual"

# Séparateur entre les textes des blocs d'un chunk
BLOCK_SEPARATOR = "\n\n"

# Entités d'espace insécable laissées littéralement dans certains textes
NBSP_ENTITIES = ("&#xa0;", "&#xA0;", "&#160;", "&nbsp;")

# Seules entités nommées connues du parser XML sans DTD
XML_PREDEFINED_ENTITIES = frozenset({"amp", "lt", "gt", "quot", "apos"})

# Balises en ligne acceptées telles quelles dans une traduction
INLINE_TAGS = frozenset(
    {
        "a", "abbr", "b", "bdi", "bdo", "br", "cite", "code", "del", "dfn",
        "em", "i", "img", "ins", "kbd", "mark", "q", "rp", "rt", "ruby",
        "s", "samp", "small", "span", "strong", "sub", "sup", "time", "u",
        "var", "wbr",
    }
)

# Tout autre "<nom" d'une traduction est du texte (ex: "<Entrée>")
KNOWN_HTML_TAGS = BLOCK_LEVEL_TAGS | INLINE_TAGS
