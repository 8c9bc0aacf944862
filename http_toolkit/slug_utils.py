import re
import unicodedata

from http_toolkit.errors import SlugError

NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def _lower(text: str) -> str:
    # str.lower() can expand a letter into a base plus combining marks ("İ" -> "i̇")
    return "".join(ch for ch in text.lower() if unicodedata.category(ch) != "Mn")


def slugify(text: str) -> str:
    if text == "":
        raise SlugError("empty string not permitted")

    slug = NON_SLUG_CHARS.sub("-", _lower(text)).strip("-")
    if not slug:
        raise SlugError("after removing characters, slug is zero length")
    return slug
