"""Remote control of an Android device over its accessibility tree."""

__version__ = "0.1.0"
