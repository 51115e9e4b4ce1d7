"""
vcrbpkg

A Python tool for preparing Ruby on Rails applications for Veracode Static
Analysis packaging.
"""

__version__ = "0.1.0"
__author__ = "vcrbpkg maintainers"


def get_full_name_with_version() -> str:
    """Tool name with version, e.g. "vcrbpkg v0.1.0"."""
    return f"vcrbpkg v{__version__}"


def main(argv=None):
    """Run the command line interface."""
    from .cli import main as cli_main
    return cli_main(argv)


__all__ = ['get_full_name_with_version', 'main']
