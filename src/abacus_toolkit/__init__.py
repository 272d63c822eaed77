"""Top-level package for the abacus exercise generator.

Provides subpackages:
- abacus_toolkit.core – example models, errors and serialization
- abacus_toolkit.rules – the four techniques (simple, brothers, friends, mix)
- abacus_toolkit.generator – sequence generation, multi-digit composition, worksheets
"""

from importlib.metadata import PackageNotFoundError, version


def _get_version() -> str:
    """Installed distribution version; "0.0.0" when running from a source checkout."""
    try:
        return version("abacus_toolkit")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _get_version()
__all__: list[str] = ["__version__"]
