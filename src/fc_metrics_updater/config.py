"""Configuration loading and management for fc-metrics-updater.

Configuration sources are merged in priority order:
    1. Defaults (defined in UpdaterConfig)
    2. Global config (~/.fc-metrics-updater.toml)
    3. Project config (./fc-metrics-updater.toml)
    4. Explicit config file (--config)
    5. Environment variables (GOPATH, then FC_METRICS_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(workspace_root="/home/me/go", verbose=True)
    >>> config.verbosity
    'verbose'
    >>> config.build_command
    ['cargo', 'build']
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError

Verbosity = Literal["quiet", "normal", "verbose"]

CONFIG_FILE_NAME = "fc-metrics-updater.toml"
ENV_PREFIX = "FC_METRICS_"

# Destination of the generated bindings inside the Go workspace
KATA_FC_METRICS_PATH = (
    "src/github.com/kata-containers/kata-containers/src/runtime/virtcontainers/fc_metrics.go"
)


@dataclass(frozen=True)
class UpdaterConfig:
    """Configuration for one update run.

    Command templates are argv lists. Each argument may reference the
    placeholders below, which are filled in when the step runs:

        fetch_command:  {url}, {output}
        format_command: {target}

    Attributes:
        Generator project:
            project_dir: Directory of the generator crate; every step runs here
            generator_name: Binary name produced by the build step
            binary_dir: Build output directory, relative to project_dir

        Steps:
            build_command: Command that builds the generator
            fetch_command: Command that downloads metrics.rs
            format_command: Command that formats the generated file

        Files:
            download_path: Where metrics.rs is saved, relative to project_dir
            destination: Generated file, relative to workspace_root
            workspace_root: Go workspace root (GOPATH)

        Output control:
            verbosity: Logging verbosity level
    """

    # Generator project
    project_dir: str = "."
    generator_name: str = "fc-metrics-generator"
    binary_dir: str = "target/debug"

    # Steps
    build_command: list[str] = field(default_factory=lambda: ["cargo", "build"])
    fetch_command: list[str] = field(
        default_factory=lambda: ["curl", "-s", "{url}", "--output", "{output}"]
    )
    format_command: list[str] = field(default_factory=lambda: ["go", "fmt", "{target}"])

    # Files
    download_path: str = "target/metrics.rs"
    destination: str = KATA_FC_METRICS_PATH
    workspace_root: Optional[str] = None

    # Output control
    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.generator_name.strip():
            raise ValueError("generator_name must not be empty")
        if os.sep in self.generator_name or "/" in self.generator_name:
            raise ValueError("generator_name must be a bare binary name")

        for name in ("build_command", "fetch_command", "format_command"):
            command = getattr(self, name)
            if not isinstance(command, list) or not command:
                raise ValueError(f"{name} must be a non-empty list of arguments")
            if not all(isinstance(arg, str) for arg in command):
                raise ValueError(f"{name} arguments must be strings")

        if not any("{url}" in arg for arg in self.fetch_command):
            raise ValueError("fetch_command must reference {url}")
        if not any("{output}" in arg for arg in self.fetch_command):
            raise ValueError("fetch_command must reference {output}")
        if not any("{target}" in arg for arg in self.format_command):
            raise ValueError("format_command must reference {target}")

        if Path(self.download_path).is_absolute():
            raise ValueError("download_path must be relative to project_dir")
        if Path(self.destination).is_absolute():
            raise ValueError("destination must be relative to workspace_root")

        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError("verbosity must be one of quiet, normal, verbose")

    @property
    def project_path(self) -> Path:
        """Absolute path of the generator project."""
        return Path(self.project_dir).expanduser().resolve()

    @property
    def generator_binary(self) -> Path:
        """Path of the binary produced by the build step."""
        return self.project_path / self.binary_dir / self.generator_name

    @property
    def download_file(self) -> Path:
        """Absolute path metrics.rs is downloaded to."""
        return self.project_path / self.download_path


def load_config(config_file: Optional[Path] = None, **overrides) -> UpdaterConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags). ``None``
            values are ignored so unset CLI options never mask lower layers.

    Returns:
        Validated UpdaterConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing, or the
            merged values fail validation

    Example:
        >>> config = load_config(config_file=Path("custom.toml"))
    """
    merged: dict = {}

    # 1. Global config
    global_config = Path.home() / f".{CONFIG_FILE_NAME}"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid global config '{global_config}': {e}")

    # 2. Project config
    project_config = Path.cwd() / CONFIG_FILE_NAME
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid project config '{project_config}': {e}")

    # 3. Explicit config file (highest priority from files)
    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid config file '{config_file}': {e}")

    # 4. Environment variables
    merged.update(_load_env_vars())

    # 5. CLI overrides (highest priority)
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update(overrides)

    try:
        return UpdaterConfig(**merged)
    except TypeError as e:
        # Unknown field in config
        raise ConfigurationError(f"Invalid configuration: {e}")
    except ValueError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from the environment.

    GOPATH provides workspace_root. Any scalar field can also be set with an
    FC_METRICS_<FIELD> variable, which wins over GOPATH:

        FC_METRICS_PROJECT_DIR: str
        FC_METRICS_GENERATOR_NAME: str
        FC_METRICS_BINARY_DIR: str
        FC_METRICS_DOWNLOAD_PATH: str
        FC_METRICS_DESTINATION: str
        FC_METRICS_WORKSPACE_ROOT: str
        FC_METRICS_VERBOSITY: quiet/normal/verbose

    Returns:
        Dict of field_name -> parsed_value for any variables found.
    """
    type_hints = get_type_hints(UpdaterConfig)

    result: dict[str, Any] = {}

    gopath = os.environ.get("GOPATH")
    if gopath:
        result["workspace_root"] = gopath

    for field_name in UpdaterConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        parsed = _parse_env_value(env_value, type_hint)
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Map an environment variable string onto a config field's type.

    Args:
        value: Raw string from environment
        type_hint: Type annotation from dataclass

    Returns:
        Parsed value or None if the field can't be set from the environment
    """
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    # Command lists are too awkward to express in a single variable
    if origin is list or type_hint is list:
        return None

    # String (including Literal types like Verbosity)
    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Args:
        path: Path to TOML file

    Returns:
        Parsed TOML as dict

    Raises:
        ConfigurationError: If tomllib/tomli not available
        Exception: If TOML parsing fails
    """
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
