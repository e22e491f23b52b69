"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path


class ConfigError(Exception):
    """Error in taskdag configuration."""


@dataclass(slots=True, frozen=True)
class TaskdagConfig:
    """Configuration loaded from the ``[tool.taskdag]`` section of pyproject.toml.

    All relative paths are resolved from the project root (directory containing pyproject.toml).
    """

    pipeline: Path | None = None
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            # Reached filesystem root
            return None
        current = parent


def load_config(pyproject_path: Path) -> TaskdagConfig:
    """Load and validate [tool.taskdag] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed TaskdagConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    section = data.get("tool", {}).get("taskdag", {})
    if not isinstance(section, dict):
        msg = "Invalid [tool.taskdag] configuration: expected a table"
        raise ConfigError(msg)

    pipeline_path: Path | None = None
    if "pipeline" in section:
        pipeline_value = section["pipeline"]
        if not isinstance(pipeline_value, str):
            msg = "Invalid [tool.taskdag].pipeline: expected string path"
            raise ConfigError(msg)
        pipeline_path = Path(pipeline_value)
        if not pipeline_path.is_absolute():
            pipeline_path = project_root / pipeline_path

    return TaskdagConfig(pipeline=pipeline_path, project_root=project_root)


def get_config() -> TaskdagConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        TaskdagConfig (may be empty if no pyproject.toml or no [tool.taskdag] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return TaskdagConfig()
    return load_config(pyproject_path)
