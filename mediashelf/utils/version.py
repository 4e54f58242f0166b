"""Version helpers."""

from pathlib import Path

import tomlkit

__all__ = ["get_pyproject_version"]


def get_pyproject_version() -> str:
    """Get MediaShelf's version from the project's pyproject.toml file.

    Returns:
        str: MediaShelf's version, or "unknown" when it cannot be determined
    """
    toml_file = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"

    if not toml_file.is_file():
        return "unknown"

    with toml_file.open("r", encoding="utf-8") as fh:
        toml_data = tomlkit.load(fh)

    project = toml_data.get("project", {})
    version = project.get("version") if project else None
    return str(version) if version else "unknown"
