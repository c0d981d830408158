"""Configuration management for apiref.

Supports TOML configuration format with auto-discovery.
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

CONFIG_FILENAME = "apiref.toml"

DEFAULT_TIMEOUT = 1800.0


@dataclass(frozen=True)
class JsConfig:
    """JavaScript API reference configuration."""

    package_dir: Path = field(default_factory=lambda: Path("src/node-api-dotnet"))
    entry_point: str = "index.d.ts"
    tsconfig: str = "tsconfig.json"
    output_dir: Path = field(default_factory=lambda: Path("docs/reference/js"))
    package_name: str | None = None
    module_alias: str = "dotnet"
    default_framework: str = "net6.0"
    supported_frameworks: tuple[str, ...] = ("net472", "net6.0", "net8.0")
    typedoc_command: tuple[str, ...] = ("npx", "typedoc")

    @property
    def entry_point_path(self) -> Path:
        """Declaration entry point file."""
        return self.package_dir / self.entry_point

    @property
    def tsconfig_path(self) -> Path:
        """Type-resolution config, resolved beside the entry point."""
        return self.entry_point_path.parent / self.tsconfig


@dataclass(frozen=True)
class DotnetProject:
    """A .NET project to document, with the projects it references."""

    name: str
    references: tuple[str, ...] = ()


@dataclass(frozen=True)
class DotnetConfig:
    """.NET API reference configuration."""

    source_dir: Path = field(default_factory=lambda: Path("src"))
    bin_dir: Path = field(default_factory=lambda: Path("out/bin"))
    output_dir: Path = field(default_factory=lambda: Path("docs/reference/dotnet"))
    tool_project: Path = field(default_factory=lambda: Path("docs/tools"))
    assembly_prefix: str = "Microsoft.JavaScript."
    target_framework: str = "net6.0"
    configuration: str = "Release"
    source_url: str = "https://github.com/microsoft/node-api-dotnet/tree/main/src"
    reference_path: str = "/reference/dotnet/"
    index_title: str = ".NET API Reference"
    nav_file: str = "nav.mts"
    projects: tuple[DotnetProject, ...] = ()

    def assembly_name(self, project_name: str) -> str:
        """Assembly name for a project (prefix + project name)."""
        return self.assembly_prefix + project_name


@dataclass(frozen=True)
class ToolsConfig:
    """External tool invocation configuration."""

    timeout: float = DEFAULT_TIMEOUT


@dataclass(frozen=True)
class Config:
    """Application configuration."""

    js: JsConfig
    dotnet: DotnetConfig
    tools: ToolsConfig
    config_path: Path | None = None

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """Load configuration from file.

        If config_path is provided, loads from that file.
        Otherwise, searches for apiref.toml in current directory and parents.

        Args:
            config_path: Optional explicit path to config file

        Returns:
            Config instance with defaults for missing sections

        Raises:
            FileNotFoundError: If explicit config_path doesn't exist
            ValueError: If configuration is invalid
        """
        if config_path is not None:
            if not config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return cls._load_from_file(config_path)

        discovered_path = cls._discover_config()
        if discovered_path is None:
            return cls._default()

        return cls._load_from_file(discovered_path)

    @classmethod
    def _discover_config(cls) -> Path | None:
        """Search for config file in current directory and parents.

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        while True:
            candidate = current / CONFIG_FILENAME
            if candidate.exists():
                return candidate
            parent = current.parent
            if parent == current:
                return None
            current = parent

    @classmethod
    def _default(cls) -> Config:
        """Create config with all defaults."""
        return cls(js=JsConfig(), dotnet=DotnetConfig(), tools=ToolsConfig())

    @classmethod
    def _load_from_file(cls, path: Path) -> Config:
        """Load configuration from a specific file.

        Args:
            path: Path to TOML configuration file

        Returns:
            Config instance

        Raises:
            ValueError: If configuration is invalid
        """
        with path.open("rb") as f:
            data = tomllib.load(f)

        config_dir = path.parent

        return cls(
            js=cls._parse_js(data.get("js"), config_dir),
            dotnet=cls._parse_dotnet(data.get("dotnet"), config_dir),
            tools=cls._parse_tools(data.get("tools")),
            config_path=path,
        )

    @classmethod
    def _parse_js(cls, data: object, config_dir: Path) -> JsConfig:
        """Parse js configuration section.

        Args:
            data: Raw js section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            JsConfig instance
        """
        defaults = JsConfig()
        if data is None:
            data = {}

        if not isinstance(data, dict):
            raise ValueError("js section must be a dictionary")

        package_dir = _get_str(data, "js", "package_dir", str(defaults.package_dir))
        entry_point = _get_str(data, "js", "entry_point", defaults.entry_point)
        tsconfig = _get_str(data, "js", "tsconfig", defaults.tsconfig)
        output_dir = _get_str(data, "js", "output_dir", str(defaults.output_dir))
        module_alias = _get_str(data, "js", "module_alias", defaults.module_alias)
        default_framework = _get_str(
            data,
            "js",
            "default_framework",
            defaults.default_framework,
        )

        package_name = data.get("package_name")
        if package_name is not None and not isinstance(package_name, str):
            raise ValueError("js.package_name must be a string")

        supported_frameworks = _get_str_list(
            data,
            "js",
            "supported_frameworks",
            defaults.supported_frameworks,
        )
        typedoc_command = _get_str_list(
            data,
            "js",
            "typedoc_command",
            defaults.typedoc_command,
        )
        if not typedoc_command:
            raise ValueError("js.typedoc_command must not be empty")

        return JsConfig(
            package_dir=config_dir / package_dir,
            entry_point=entry_point,
            tsconfig=tsconfig,
            output_dir=config_dir / output_dir,
            package_name=package_name,
            module_alias=module_alias,
            default_framework=default_framework,
            supported_frameworks=supported_frameworks,
            typedoc_command=typedoc_command,
        )

    @classmethod
    def _parse_dotnet(cls, data: object, config_dir: Path) -> DotnetConfig:
        """Parse dotnet configuration section.

        Args:
            data: Raw dotnet section data
            config_dir: Directory containing config file (for relative paths)

        Returns:
            DotnetConfig instance
        """
        defaults = DotnetConfig()
        if data is None:
            data = {}

        if not isinstance(data, dict):
            raise ValueError("dotnet section must be a dictionary")

        paths = {
            key: config_dir / _get_str(data, "dotnet", key, str(getattr(defaults, key)))
            for key in ("source_dir", "bin_dir", "output_dir", "tool_project")
        }
        strings = {
            key: _get_str(data, "dotnet", key, getattr(defaults, key))
            for key in (
                "assembly_prefix",
                "target_framework",
                "configuration",
                "source_url",
                "reference_path",
                "index_title",
                "nav_file",
            )
        }

        return DotnetConfig(
            **paths,
            **strings,
            projects=cls._parse_projects(data.get("projects", [])),
        )

    @classmethod
    def _parse_projects(cls, data: object) -> tuple[DotnetProject, ...]:
        """Parse the ordered dotnet.projects list.

        A project may only reference projects listed before it, so the
        configured order is always a valid build order.
        """
        if not isinstance(data, list):
            raise ValueError("dotnet.projects must be a list")

        projects: list[DotnetProject] = []
        seen: set[str] = set()
        for item in data:
            if not isinstance(item, dict):
                raise ValueError("dotnet.projects items must be tables")

            name = item.get("name")
            if not isinstance(name, str) or not name:
                raise ValueError("dotnet.projects.name must be a non-empty string")
            if name in seen:
                raise ValueError(f"dotnet.projects: duplicate project {name!r}")

            references = _get_str_list(item, "dotnet.projects", "references", ())
            for reference in references:
                if reference not in seen:
                    raise ValueError(
                        f"dotnet.projects: {name!r} references {reference!r}, "
                        "which must be listed before it",
                    )

            projects.append(DotnetProject(name=name, references=references))
            seen.add(name)

        return tuple(projects)

    @classmethod
    def _parse_tools(cls, data: object) -> ToolsConfig:
        """Parse tools configuration section."""
        if data is None:
            return ToolsConfig()

        if not isinstance(data, dict):
            raise ValueError("tools section must be a dictionary")

        timeout = data.get("timeout", DEFAULT_TIMEOUT)
        if isinstance(timeout, bool) or not isinstance(timeout, int | float):
            raise ValueError("tools.timeout must be a number")
        if timeout <= 0:
            raise ValueError("tools.timeout must be positive")

        return ToolsConfig(timeout=float(timeout))

    def with_overrides(
        self,
        *,
        timeout: float | None = None,
        js_output_dir: Path | None = None,
        dotnet_output_dir: Path | None = None,
    ) -> Config:
        """Create a new Config with CLI overrides applied.

        Only non-None values override the existing config. The original
        Config is not modified.

        Args:
            timeout: Override tools.timeout
            js_output_dir: Override js.output_dir
            dotnet_output_dir: Override dotnet.output_dir

        Returns:
            New Config instance with overrides applied
        """
        tools = self.tools
        if timeout is not None:
            tools = replace(self.tools, timeout=timeout)

        js = self.js
        if js_output_dir is not None:
            js = replace(self.js, output_dir=js_output_dir)

        dotnet = self.dotnet
        if dotnet_output_dir is not None:
            dotnet = replace(self.dotnet, output_dir=dotnet_output_dir)

        return replace(self, js=js, dotnet=dotnet, tools=tools)


def _get_str(data: dict, section: str, key: str, default: str) -> str:
    value = data.get(key, default)
    if not isinstance(value, str):
        raise ValueError(f"{section}.{key} must be a string")
    return value


def _get_str_list(
    data: dict,
    section: str,
    key: str,
    default: tuple[str, ...],
) -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, list):
        raise ValueError(f"{section}.{key} must be a list")
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"{section}.{key} items must be strings")
    return tuple(value)
