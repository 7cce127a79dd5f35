# app/core/slug.py
from slugify import slugify as _slugify


def slugify(name: str) -> str:
    """
    Derive a URL-safe slug from a display name (python-slugify).

    Lower-case ASCII letters and digits joined by single hyphens, no leading or
    trailing hyphen; accented letters are transliterated. Deterministic and
    idempotent: slugify(slugify(x)) == slugify(x).

        >>> slugify("Smartphone Galaxy S23")
        'smartphone-galaxy-s23'
    """
    return _slugify(name or "", lowercase=True)
