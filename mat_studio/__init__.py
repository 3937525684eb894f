"""Mat Studio: playmat layout editor"""

__version__ = "0.1.0"
