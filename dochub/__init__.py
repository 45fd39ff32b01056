"""DocHub: project documentation hub with exclusive editing locks."""

__version__ = "0.1.0"
