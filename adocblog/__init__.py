"""
adocblog - A minimal static blog generator.

adocblog converts AsciiDoc documents from a content directory into HTML
pages and writes an index page listing posts by date, an about section
and a list of talks.
"""

__version__ = "1.0.0"

from .core import Blog, PageBuilder, PageMetadata

__all__ = ['Blog', 'PageBuilder', 'PageMetadata']
