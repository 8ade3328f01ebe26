"""
Exceptions raised while configuring and building a Gazette site.
"""

from typing import Optional


class GazetteError(Exception):
    """Base class for every error raised by Gazette."""


class ConfigurationError(GazetteError):
    """Raised for invalid site, collection, ignore or pagination settings."""

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


class ContentError(GazetteError):
    """Raised when a document's front matter cannot be resolved."""

    def __init__(self, message: str, source: Optional[str] = None):
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


class MissingFieldError(ContentError):
    """Raised when a required front matter field has no value after merging."""

    def __init__(self, field: str, source: Optional[str] = None):
        self.field = field
        super().__init__(f"front matter is missing required field '{field}'", source)


class InvalidPermalinkAliasError(ContentError):
    """Raised for a permalink that is neither a known alias nor an absolute template."""

    def __init__(self, permalink: str, source: Optional[str] = None):
        self.permalink = permalink
        super().__init__(
            f"unsupported permalink alias '{permalink}' (templates must start with '/')",
            source,
        )


class BlankTagError(ContentError):
    """Raised when a tag list contains an empty entry."""

    def __init__(self, source: Optional[str] = None):
        super().__init__("empty strings are not allowed in tags", source)


class InvalidDateError(ContentError):
    """Raised for an unparseable published date or filename date prefix."""

    def __init__(self, value, reason: Optional[str] = None, source: Optional[str] = None):
        self.value = value
        message = f"invalid date '{value}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, source)


class SourceReadError(GazetteError):
    """Raised when a source file cannot be read or an output cannot be written."""

    def __init__(self, path: str, error: Exception):
        self.path = path
        self.error = error
        super().__init__(f"Error accessing {path}: {error}")
