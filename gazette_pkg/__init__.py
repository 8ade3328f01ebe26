"""
Gazette - a static site compiler.

Gazette turns a tree of source files with YAML front matter into a rendered
site. Front matter is resolved through a cascade of site, collection, path
and document layers, URLs come from Jinja2 permalink templates, and index
pages can be paginated flat or by tags, categories or dates.
"""

__version__ = "0.1.0"

from .core import Gazette
from .settings import GazetteSettings, Config

__all__ = ['Gazette', 'GazetteSettings', 'Config', '__version__']
