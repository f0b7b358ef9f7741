"""Resolve paths to files shipped alongside the source tree.

Typical usage:
    from flightcore.core.resource_path import get_config_path

    logging_config = get_config_path("logging.yaml")
"""

from pathlib import Path


def get_project_root() -> Path:
    """Get the project root directory.

    Walks up from ``src/flightcore/core`` to the checkout root, where the
    ``config`` directory lives.
    """
    return Path(__file__).parent.parent.parent.parent


def get_config_path(config_name: str = "") -> Path:
    """Get the path to a file in the ``config`` directory.

    Args:
        config_name: File name relative to ``config`` (e.g. ``"aircraft.yaml"``).

    Returns:
        Absolute path. The file is not required to exist.

    Examples:
        >>> get_config_path("logging.yaml").name
        'logging.yaml'
    """
    config_dir = get_project_root() / "config"
    if config_name:
        return config_dir / config_name
    return config_dir
