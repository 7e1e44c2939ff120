"""Package version information."""

__version__ = "1.0.0"


def get_version() -> str:
    """Return the running application version."""
    return __version__
