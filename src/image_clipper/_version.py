"""Minimal version helper for the image_clipper application."""

from importlib import metadata
from pathlib import Path

PACKAGE_NAME = "image_clipper"
DISTRIBUTION_NAME = "image-clipper"
FALLBACK_VERSION = "0.1.0"


def get_version() -> str:
    """
    Get version for application.

    :return: Version number.
    """
    try:  # installed
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:  # dev checkout without install
        import setuptools_scm  # type: ignore[import-untyped]

        root = Path(__file__).resolve().parents[2]
        return str(
            setuptools_scm.get_version(root=str(root), fallback_version=FALLBACK_VERSION)
        )


__all__ = ["get_version"]
