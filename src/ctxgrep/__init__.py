"""ctxgrep - concurrent line search with context windows"""

from ctxgrep.__version__ import __version__

__all__ = ['__version__']
