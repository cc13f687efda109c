"""autotheme — dark/light theme switching at local sunrise and sunset."""

__version__ = "1.0.0"
