"""
Tier 1 context: active file, selection, diagnostics and tech stack.
"""

import json
import logging
import os
from typing import Dict, List, Optional

from ..interfaces import IWorkspaceHost
from .models import BasicContext, DiagnosticSeverity, DiagnosticSummary, TechStack

logger = logging.getLogger(__name__)

SELECTION_PREVIEW_LENGTH = 100

# package.json dependency -> framework label, in reporting order
NODE_FRAMEWORKS = (
    (("next",), "Next.js"),
    (("react",), "React"),
    (("vue",), "Vue"),
    (("svelte",), "Svelte"),
    (("angular",), "Angular"),
    (("express",), "Express"),
    (("fastify",), "Fastify"),
    (("nestjs", "@nestjs/core"), "NestJS"),
    (("hono",), "Hono"),
    (("electron",), "Electron"),
    (("tailwindcss",), "Tailwind CSS"),
)

NODE_TEST_RUNNERS = ("jest", "vitest", "mocha", "cypress")

PYTHON_FRAMEWORKS = (
    ("django", "Django"),
    ("flask", "Flask"),
    ("fastapi", "FastAPI"),
)


async def _read_package_json(host: IWorkspaceHost) -> Optional[Dict]:
    text = await host.read_file("package.json")
    if text is None:
        return None
    try:
        data = json.loads(text)
    except ValueError as e:
        logger.warning(f"Ignoring unparseable package.json: {e}")
        return None
    return data if isinstance(data, dict) else None


async def detect_tech_stack(host: IWorkspaceHost, files: List[str]) -> TechStack:
    """
    Detect languages, frameworks and package manager from manifest files.

    Args:
        host: Workspace host
        files: Workspace file listing, relative paths

    Returns:
        TechStack: Detected stack, empty when no manifest is present
    """
    top_level = {path for path in files if "/" not in path}
    languages: List[str] = []
    frameworks: List[str] = []
    has_typescript = False
    has_testing = False
    package_manager: Optional[str] = None

    package_json = await _read_package_json(host) if "package.json" in top_level else None
    if package_json is not None:
        deps = {}
        for section in ("dependencies", "devDependencies"):
            if isinstance(package_json.get(section), dict):
                deps.update(package_json[section])

        if "pnpm-lock.yaml" in top_level:
            package_manager = "pnpm"
        elif "yarn.lock" in top_level:
            package_manager = "yarn"
        elif "package-lock.json" in top_level:
            package_manager = "npm"

        if "typescript" in deps or "tsconfig.json" in top_level:
            has_typescript = True
            languages.append("TypeScript")
        else:
            languages.append("JavaScript")

        for names, label in NODE_FRAMEWORKS:
            if any(name in deps for name in names):
                frameworks.append(label)

        if any(runner in deps for runner in NODE_TEST_RUNNERS):
            has_testing = True

    if "requirements.txt" in top_level or "pyproject.toml" in top_level:
        languages.append("Python")
        package_manager = "pip"

        if "requirements.txt" in top_level:
            requirements = (await host.read_file("requirements.txt") or "").lower()
            for name, label in PYTHON_FRAMEWORKS:
                if name in requirements:
                    frameworks.append(label)
            if "pytest" in requirements:
                has_testing = True

    if "Cargo.toml" in top_level:
        languages.append("Rust")
        package_manager = "cargo"

    if "go.mod" in top_level:
        languages.append("Go")
        package_manager = "go"

    return TechStack(
        languages=tuple(languages),
        frameworks=tuple(frameworks),
        has_typescript=has_typescript,
        has_testing=has_testing,
        package_manager=package_manager
    )


async def detect_basic_context(host: IWorkspaceHost, files: List[str]) -> BasicContext:
    """Collect tier 1 context; a missing editor yields file fields of None"""
    root = host.workspace_root()
    tech_stack = await detect_tech_stack(host, files) if root else TechStack()

    document = host.active_document()
    if document is None:
        return BasicContext(tech_stack=tech_stack)

    # Editors may send absolute or workspace-relative paths
    if root and os.path.isabs(document.path):
        relative_path = os.path.relpath(document.path, root)
    else:
        relative_path = os.path.normpath(document.path)
    relative_path = relative_path.replace("\\", "/")

    diagnostics = None
    entries = host.diagnostics()
    if entries:
        errors = [d for d in entries if d.severity == DiagnosticSeverity.ERROR]
        warnings = [d for d in entries if d.severity == DiagnosticSeverity.WARNING]
        diagnostics = DiagnosticSummary(
            errors=len(errors),
            warnings=len(warnings),
            first_error=errors[0].message if errors else None
        )

    return BasicContext(
        tech_stack=tech_stack,
        file_path=document.path,
        file_name=os.path.basename(document.path),
        relative_path=relative_path,
        language=document.language_id,
        selection=document.selection or None,
        diagnostics=diagnostics
    )


def format_tier1(basic: Optional[BasicContext]) -> str:
    if basic is None:
        return ""

    lines = []
    if basic.relative_path:
        lines.append(f"Currently editing: {basic.relative_path}")

    tech = list(basic.tech_stack.languages) + list(basic.tech_stack.frameworks)
    if tech:
        lines.append(f"Tech stack: {', '.join(tech)}")

    if basic.selection:
        preview = basic.selection
        if len(preview) > SELECTION_PREVIEW_LENGTH:
            preview = preview[:SELECTION_PREVIEW_LENGTH] + "..."
        lines.append(f"Selected code: {preview}")

    if basic.diagnostics and basic.diagnostics.errors > 0:
        message = f"Errors: {basic.diagnostics.errors}"
        if basic.diagnostics.first_error:
            message += f" ({basic.diagnostics.first_error})"
        lines.append(message)

    return "\n".join(lines)
