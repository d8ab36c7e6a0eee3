"""Words of Healing: live scripture-puzzle event backend."""

__version__ = "1.0.0"
