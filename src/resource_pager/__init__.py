"""Client library for paginated resource APIs."""

__version__ = "1.0.0"

__all__ = ["__version__"]
