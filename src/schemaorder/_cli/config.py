"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path

from schemaorder._platform import PLATFORMS
from schemaorder._schema_diff import DependencyWeights


class ConfigError(Exception):
    """Error in schemaorder configuration."""


@dataclass(slots=True, frozen=True)
class SchemaOrderConfig:
    """Configuration loaded from pyproject.toml.

    All relative paths are resolved from the project root (directory containing pyproject.toml).
    """

    schema: Path | None = None
    output: Path | None = None
    platform: str | None = None
    weights: DependencyWeights = DependencyWeights()
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


def _parse_path(section: dict[str, object], key: str, project_root: Path) -> Path | None:
    if key not in section:
        return None
    value = section[key]
    if not isinstance(value, str):
        msg = f"Invalid [tool.schemaorder].{key}: expected string path"
        raise ConfigError(msg)
    path = Path(value)
    if not path.is_absolute():
        path = project_root / path
    return path


def _parse_weight(section: dict[str, object], key: str, default: int) -> int:
    value = section.get(key, default)
    # bool is an int subclass
    if not isinstance(value, int) or isinstance(value, bool):
        msg = f"Invalid [tool.schemaorder].{key}: expected integer"
        raise ConfigError(msg)
    return value


def load_config(pyproject_path: Path) -> SchemaOrderConfig:
    """Load and validate [tool.schemaorder] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed SchemaOrderConfig

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

    section = data.get("tool", {}).get("schemaorder", {})

    if not section:
        return SchemaOrderConfig(project_root=project_root)

    platform = section.get("platform")
    if platform is not None:
        if not isinstance(platform, str):
            msg = "Invalid [tool.schemaorder].platform: expected string"
            raise ConfigError(msg)
        if platform.lower() not in PLATFORMS:
            msg = f"Invalid [tool.schemaorder].platform: unknown platform '{platform}'"
            raise ConfigError(msg)

    defaults = DependencyWeights()
    weights = DependencyWeights(
        hard=_parse_weight(section, "hard_weight", defaults.hard),
        soft=_parse_weight(section, "soft_weight", defaults.soft),
    )
    if weights.soft > weights.hard:
        msg = "Invalid [tool.schemaorder]: soft_weight must not exceed hard_weight"
        raise ConfigError(msg)

    return SchemaOrderConfig(
        schema=_parse_path(section, "schema", project_root),
        output=_parse_path(section, "output", project_root),
        platform=platform,
        weights=weights,
        project_root=project_root,
    )


def get_config() -> SchemaOrderConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        SchemaOrderConfig (may be empty if no pyproject.toml or no [tool.schemaorder] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return SchemaOrderConfig()
    return load_config(pyproject_path)
