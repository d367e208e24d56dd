"""Find who follows whom inside a set of GitHub users."""

__version__ = "0.1.0"
