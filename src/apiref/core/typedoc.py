"""JavaScript API reference from TypeScript declarations.

Runs the TypeDoc CLI to export the package's declaration file as a JSON
reflection tree, then renders the top-level variables and functions as a
single Markdown page.
"""

import json
import logging
import shutil
from pathlib import Path
from typing import Any

from apiref.config import JsConfig
from apiref.core.commands import run_command

logger = logging.getLogger(__name__)

# TypeDoc ReflectionKind values
KIND_VARIABLE = 32
KIND_FUNCTION = 64

API_JSON_FILENAME = "api.json"
INDEX_FILENAME = "index.md"

Reflection = dict[str, Any]


class ConversionError(RuntimeError):
    """TypeDoc did not produce a usable reflection tree."""


def type_to_markdown(type_: Reflection | None) -> str:
    """Render a TypeDoc type as TypeScript source text.

    Literals render as JSON, named types by name, and a function type with a
    single call signature as an arrow signature. Anything else is
    ``unknown``.
    """
    if type_ is None:
        return "unknown"
    if type_.get("type") == "literal":
        return json.dumps(type_.get("value"))
    if type_.get("name"):
        return type_["name"]

    signatures = (type_.get("declaration") or {}).get("signatures") or []
    if len(signatures) == 1:
        signature = signatures[0]
        parameters = ", ".join(_parameter_to_markdown(p) for p in _parameters(signature))
        return f"({parameters}) => {type_to_markdown(signature.get('type'))}"

    return "unknown"


def comment_to_markdown(parts: list[Reflection] | None) -> str:
    """Join the text of TypeDoc comment display parts."""
    return "".join(part.get("text", "") for part in parts or [])


def _parameters(signature: Reflection) -> list[Reflection]:
    return signature.get("parameters") or []


def _parameter_to_markdown(parameter: Reflection) -> str:
    return f"{parameter['name']}: {type_to_markdown(parameter.get('type'))}"


def _summary(reflection: Reflection) -> str:
    return comment_to_markdown((reflection.get("comment") or {}).get("summary"))


def _block_tag(signature: Reflection, tag: str) -> Reflection | None:
    block_tags = (signature.get("comment") or {}).get("blockTags") or []
    return next((t for t in block_tags if t.get("tag") == tag), None)


def render_property(item: Reflection, alias: str) -> str:
    """Render a top-level variable as a property section."""
    markdown = f"\n### {item['name']} property\n"
    markdown += "```TypeScript\n"
    markdown += f"const {alias}.{item['name']}: {type_to_markdown(item.get('type'))}\n"
    markdown += "```\n"
    markdown += _summary(item) + "\n"
    return markdown


def render_function(item: Reflection, alias: str) -> str:
    """Render a top-level function as a method section, one block per signature."""
    markdown = f"\n### {item['name']} method\n"
    for signature in item.get("signatures") or []:
        parameters = [_parameter_to_markdown(p) for p in _parameters(signature)]
        if len(parameters) > 1:
            parameters = [f"\n    {p}," for p in parameters]
            parameters[-1] += "\n"

        return_type = type_to_markdown(signature.get("type"))
        markdown += "```TypeScript\n"
        markdown += f"{alias}.{item['name']}({''.join(parameters)}): {return_type}\n"
        markdown += "```\n"
        markdown += _summary(signature) + "\n"

        for parameter in _parameters(signature):
            description = _summary(parameter)
            if description:
                markdown += f"- **{parameter['name']}**: {description}\n"

        returns_tag = _block_tag(signature, "@returns")
        if returns_tag:
            markdown += f"- Returns: {comment_to_markdown(returns_tag.get('content'))}\n"

        description_tag = _block_tag(signature, "@description")
        if description_tag:
            markdown += "\n" + comment_to_markdown(description_tag.get("content")) + "\n"
    return markdown


def _code_group(package: str, alias: str) -> str:
    return (
        "\n::: code-group\n"
        "```JavaScript [ES (TS or JS)]\n"
        f"import {alias} from '{package}';\n"
        "```\n"
        "```TypeScript [CommonJS (TS)]\n"
        f"import * as {alias} from '{package}';\n"
        "```\n"
        "```JavaScript [CommonJS (JS)]\n"
        f"const {alias} = require('{package}');\n"
        "```\n"
        ":::\n"
    )


def render_package(project: Reflection, settings: JsConfig) -> str:
    """Render the whole package reference page.

    Args:
        project: TypeDoc project reflection (parsed api.json)
        settings: JS reference configuration

    Returns:
        Markdown for the package index page
    """
    package = settings.package_name or project.get("name", "")
    alias = settings.module_alias
    frameworks = settings.supported_frameworks

    markdown = f"# {package} package\n"
    markdown += _code_group(package, alias)
    markdown += (
        "To load a specific version of .NET, append the target framework moniker to "
        "the package name:\n"
    )
    markdown += _code_group(f"{package}/{settings.default_framework}", alias)
    if frameworks:
        quoted = [f"`{f}`" for f in frameworks]
        listed = quoted[0] if len(quoted) == 1 else ", ".join(quoted[:-1]) + f", and {quoted[-1]}"
        markdown += f"Currently the supported target frameworks are {listed}."

    children = project.get("children") or []

    properties = [c for c in children if c.get("kind") == KIND_VARIABLE]
    if properties:
        markdown += "\n## Properties\n"
        for item in properties:
            markdown += render_property(item, alias)

    functions = [c for c in children if c.get("kind") == KIND_FUNCTION]
    if functions:
        markdown += "\n## Methods\n"
        for item in functions:
            markdown += render_function(item, alias)

    return markdown


def extract_declarations(settings: JsConfig, *, timeout: float | None = None) -> Reflection:
    """Export the declaration entry point to api.json via TypeDoc.

    Args:
        settings: JS reference configuration
        timeout: Seconds to allow TypeDoc to run

    Returns:
        Parsed TypeDoc project reflection

    Raises:
        FileNotFoundError: If the declaration entry point is missing
        CommandError: If TypeDoc fails
        ConversionError: If TypeDoc produced no usable output
    """
    entry_point = settings.entry_point_path
    if not entry_point.exists():
        raise FileNotFoundError(f"File not found: {entry_point}")

    json_file = (settings.output_dir / API_JSON_FILENAME).resolve()
    run_command(
        [
            *settings.typedoc_command,
            "--entryPoints",
            entry_point.resolve(),
            "--tsconfig",
            settings.tsconfig_path.resolve(),
            "--exclude",
            "**/node_modules/**",
            "--excludeExternals",
            "--excludePrivate",
            "--excludeProtected",
            "--excludeInternal",
            "--readme",
            "none",
            "--json",
            json_file,
        ],
        cwd=settings.package_dir,
        timeout=timeout,
    )

    if not json_file.is_file():
        raise ConversionError("Failed to convert TypeScript to documentation.")
    try:
        project = json.loads(json_file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConversionError("Failed to convert TypeScript to documentation.") from e
    if not isinstance(project, dict) or not project:
        raise ConversionError("Failed to convert TypeScript to documentation.")

    logger.debug(f"Loaded {len(project.get('children') or [])} reflections from {json_file}")
    return project


def build_js_docs(settings: JsConfig, *, timeout: float | None = None) -> Path:
    """Generate the JavaScript API reference page.

    The output directory is cleared first. Leaves api.json beside the page.

    Returns:
        Path of the written index page
    """
    output_dir = settings.output_dir
    if output_dir.exists():
        shutil.rmtree(output_dir)
    output_dir.mkdir(parents=True)

    logger.info(f"Exporting declarations: {settings.entry_point_path}")
    project = extract_declarations(settings, timeout=timeout)

    index_path = output_dir / INDEX_FILENAME
    index_path.write_text(render_package(project, settings), encoding="utf-8")
    logger.info(f"Wrote {index_path}")
    return index_path
