""".NET API reference from XML documentation.

For each configured project: build it with XML docs enabled, convert the
assembly to Markdown with XmlDocMarkdown, then merge the per-assembly
pages into one index, post-process every page and derive the sidebar.
Projects are processed in configured order; the first failure aborts.
"""

import logging
import platform
import re
import shutil
from collections.abc import Iterable
from pathlib import Path

from apiref.config import DotnetConfig, DotnetProject
from apiref.core.commands import run_command
from apiref.core.markdown import process_markdown_files
from apiref.core.navigation import build_navigation, write_navigation_module

logger = logging.getLogger(__name__)

INDEX_FILENAME = "index.md"

# The converter always runs as a Release build of the tool project
TOOL_CONFIGURATION = "Release"

_RID_PLATFORMS = {
    "windows": "win",
    "win32": "win",
    "darwin": "osx",
}

_RID_ARCHITECTURES = {
    "x86_64": "x64",
    "amd64": "x64",
    "x64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "x86",
    "i686": "x86",
    "x86": "x86",
    "armv7l": "arm",
    "armv6l": "arm",
    "arm": "arm",
}

LEVEL1_HEADER_RE = re.compile(r"^# .*$", re.MULTILINE)


def runtime_identifier(system: str | None = None, machine: str | None = None) -> str:
    """Return the .NET runtime identifier (e.g. ``linux-x64``) for a platform.

    Defaults to the current interpreter's platform.
    """
    system = (system if system is not None else platform.system()).lower()
    machine = (machine if machine is not None else platform.machine()).lower()
    return f"{_RID_PLATFORMS.get(system, system)}-{_RID_ARCHITECTURES.get(machine, machine)}"


def project_bin_dir(project: DotnetProject, settings: DotnetConfig, rid: str) -> Path:
    """Build output directory for a project."""
    return (
        settings.bin_dir
        / settings.configuration
        / project.name
        / settings.target_framework
        / rid
    )


def build_project_xmldocs(
    project: DotnetProject,
    settings: DotnetConfig,
    *,
    rid: str | None = None,
    timeout: float | None = None,
) -> Path:
    """Run ``dotnet build`` with options to produce XML doc files for a project.

    Args:
        project: Project to build
        settings: .NET reference configuration
        rid: Runtime identifier of the output directory (default: current platform)
        timeout: Seconds to allow the build to run

    Returns:
        Path of the built assembly

    Raises:
        CommandError: If the build fails
        FileNotFoundError: If the assembly or its XML doc file is missing
    """
    project_dir = settings.source_dir / project.name
    logger.info(f"Building project: {project_dir}")
    run_command(
        [
            "dotnet",
            "build",
            project_dir,
            "-c",
            settings.configuration,
            "-f",
            settings.target_framework,
            "-p:GenerateDocumentationFile=true",
            "-p:NoWarn=CS1591",
            "-t:Rebuild",
        ],
        timeout=timeout,
    )

    bin_dir = project_bin_dir(project, settings, rid or runtime_identifier())
    assembly_name = settings.assembly_name(project.name)

    assembly_path = bin_dir / f"{assembly_name}.dll"
    if not assembly_path.exists():
        raise FileNotFoundError(f"Assembly file was not found at {assembly_path}")

    xmldoc_path = bin_dir / f"{assembly_name}.xml"
    if not xmldoc_path.exists():
        raise FileNotFoundError(f"XML doc file was not found at {xmldoc_path}")

    return assembly_path


def build_project_markdown(
    project: DotnetProject,
    settings: DotnetConfig,
    *,
    rid: str | None = None,
    timeout: float | None = None,
) -> str:
    """Build a project and convert its XML docs to Markdown.

    Referenced projects are passed to the converter as external assemblies
    so cross-assembly type links resolve.

    Returns:
        Contents of the generated per-assembly Markdown page
    """
    assembly_path = build_project_xmldocs(project, settings, rid=rid, timeout=timeout)
    assembly_name = settings.assembly_name(project.name)

    logger.info(f"Generating markdown: {assembly_name}")
    external_args: list[str] = []
    for reference in project.references:
        external_args += ["--external", settings.assembly_name(reference)]

    # Ref structs are marked obsolete, so --obsolete is needed to include them
    run_command(
        [
            "dotnet",
            "run",
            "-c",
            TOOL_CONFIGURATION,
            "-f",
            settings.target_framework,
            "--project",
            settings.tool_project,
            "--",
            assembly_path,
            settings.output_dir,
            "--obsolete",
            "--source",
            f"{settings.source_url.rstrip('/')}/{project.name}",
            *external_args,
        ],
        timeout=timeout,
    )

    assembly_markdown_path = settings.output_dir / f"{assembly_name}.md"
    if not assembly_markdown_path.exists():
        raise FileNotFoundError(f"Markdown file was not found at {assembly_markdown_path}")
    return assembly_markdown_path.read_text(encoding="utf-8")


def merge_index(markdowns: Iterable[str], title: str) -> str:
    """Merge per-assembly pages into one index under a single title.

    The assembly title headers are removed and replaced by ``title``.
    """
    combined = "".join(markdowns)
    return f"# {title}\n" + LEVEL1_HEADER_RE.sub("", combined)


def build_dotnet_docs(
    settings: DotnetConfig,
    *,
    rid: str | None = None,
    timeout: float | None = None,
) -> list[Path]:
    """Generate the .NET API reference tree.

    The output directory is cleared first.

    Args:
        settings: .NET reference configuration
        rid: Runtime identifier of build outputs (default: current platform)
        timeout: Seconds to allow each external command to run

    Returns:
        Paths of the post-processed Markdown files

    Raises:
        ValueError: If no projects are configured
        CommandError: If a build or conversion fails
        FileNotFoundError: If an expected artifact is missing
    """
    if not settings.projects:
        raise ValueError("No .NET projects configured (add [[dotnet.projects]] to apiref.toml)")

    output_dir = settings.output_dir
    if output_dir.exists():
        shutil.rmtree(output_dir)
    output_dir.mkdir(parents=True)

    markdowns = [
        build_project_markdown(project, settings, rid=rid, timeout=timeout)
        for project in settings.projects
    ]

    index_path = output_dir / INDEX_FILENAME
    index_path.write_text(merge_index(markdowns, settings.index_title), encoding="utf-8")

    logger.info("Post-processing markdown files.")
    processed = process_markdown_files(output_dir)

    nav = build_navigation(
        output_dir,
        settings.reference_path,
        exclude=[index_path.stem],
    )
    nav_path = output_dir / settings.nav_file
    write_navigation_module(nav, nav_path)
    logger.info(f"Wrote navigation with {len(nav)} top-level items to {nav_path}")

    return processed
