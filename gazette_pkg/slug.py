"""URL-safe slugs and their human readable counterparts."""

import re

from unidecode import unidecode

SLUG_INVALID_CHARS = re.compile(r'[^a-zA-Z0-9]+')


def slugify(text):
    """
    Convert text into a lowercase, dash separated, ASCII slug.

    Non-ASCII text is transliterated first, so letters from other scripts
    keep a readable form in the slug.

    >>> slugify("Hello World!")
    'hello-world'
    >>> slugify("Café à Paris")
    'cafe-a-paris'
    >>> slugify("__Æneid__北亰-worlD-__09___")
    'aeneid-bei-jing-world-09'

    Applying slugify to its own output returns it unchanged.
    """
    if text is None:
        return ''
    slug = SLUG_INVALID_CHARS.sub('-', unidecode(str(text)))
    return slug.strip('-').lower()


def titleize_slug(slug):
    """Turn 'my-first-post' into 'My First Post'."""
    return ' '.join(_titleize_word(word) for word in slug.split('-') if word)


def _titleize_word(word):
    return word[:1].upper() + word[1:].lower()
