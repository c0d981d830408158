"""Shared test fixtures."""

from collections.abc import Sequence
from pathlib import Path

import pytest
from apiref.config import DotnetConfig, DotnetProject, JsConfig

TEST_RID = "linux-x64"


@pytest.fixture
def js_settings(tmp_path: Path) -> JsConfig:
    """JS reference settings with a package directory under tmp_path."""
    package_dir = tmp_path / "src" / "node-api-dotnet"
    package_dir.mkdir(parents=True)

    return JsConfig(
        package_dir=package_dir,
        output_dir=tmp_path / "docs" / "reference" / "js",
        package_name="node-api-dotnet",
    )


@pytest.fixture
def dotnet_settings(tmp_path: Path) -> DotnetConfig:
    """.NET reference settings with projects A and B (B references A)."""
    return DotnetConfig(
        source_dir=tmp_path / "src",
        bin_dir=tmp_path / "out" / "bin",
        output_dir=tmp_path / "docs" / "reference" / "dotnet",
        tool_project=tmp_path / "docs" / "tools",
        assembly_prefix="Test.",
        projects=(
            DotnetProject(name="A"),
            DotnetProject(name="B", references=("A",)),
        ),
    )


class FakeDotnet:
    """Stands in for ``dotnet build`` and the XmlDocMarkdown converter.

    Records every command and writes the files the real tools would.
    """

    def __init__(self, settings: DotnetConfig, *, rid: str = TEST_RID) -> None:
        self.settings = settings
        self.rid = rid
        self.commands: list[list[str]] = []
        self.skip_xml_for: set[str] = set()

    def __call__(self, args: Sequence[object], **kwargs: object) -> str:
        argv = [str(arg) for arg in args]
        self.commands.append(argv)
        if argv[1] == "build":
            self._build(Path(argv[2]).name)
        elif argv[1] == "run":
            self._convert(Path(argv[argv.index("--") + 1]).stem)
        return ""

    def _build(self, project: str) -> None:
        s = self.settings
        bin_dir = s.bin_dir / s.configuration / project / s.target_framework / self.rid
        bin_dir.mkdir(parents=True, exist_ok=True)
        assembly = s.assembly_name(project)
        (bin_dir / f"{assembly}.dll").write_bytes(b"MZ")
        if project not in self.skip_xml_for:
            (bin_dir / f"{assembly}.xml").write_text("<doc />")

    def _convert(self, assembly: str) -> None:
        out = self.settings.output_dir
        namespace = assembly
        (out / f"{assembly}.md").write_text(
            f"# {assembly} assembly\n\n## {namespace} namespace\n\n"
            "| public type | description |\n"
            "| --- | --- |\n"
            "| [Widget](./Widget.md) | Maps {key; value} pairs. |\n",
        )
        ns_dir = out / namespace
        ns_dir.mkdir(parents=True, exist_ok=True)
        (ns_dir / "Widget.md").write_text("# Widget class\n\nA widget.\n")
        (ns_dir / "Widget").mkdir(exist_ok=True)
        (ns_dir / "Widget" / "Resize.md").write_text(
            "# Widget.Resize method (2 overloads)\n\n"
            "# Widget.Resize method (1 of 2)\n\n"
            "# Widget.Resize method (2 of 2)\n",
        )


@pytest.fixture
def fake_dotnet(dotnet_settings: DotnetConfig) -> FakeDotnet:
    """Fake dotnet tool runner bound to dotnet_settings."""
    return FakeDotnet(dotnet_settings)
