"""
Tier 2 context: project shape derived from file paths only.
File contents are never read here.
"""

import re
from typing import Dict, List, Optional, Sequence

from .models import DirectoryRoles, ProjectStyle, StructuralContext

SOURCE_DIR = re.compile(r"^(src|lib|app)/", re.IGNORECASE)
TEST_DIR = re.compile(r"(^|/)(tests?|__tests__|spec)/", re.IGNORECASE)
COMPONENTS_DIR = re.compile(r"(^|/)components?/", re.IGNORECASE)
PAGES_DIR = re.compile(r"(^|/)(pages|routes|views)/", re.IGNORECASE)
API_DIR = re.compile(r"(^|/)(api|server)/", re.IGNORECASE)
UTILS_DIR = re.compile(r"/(utils?|helpers?|lib)/", re.IGNORECASE)
CONFIG_DIR = re.compile(r"(^|/)(config|\.config)/", re.IGNORECASE)

FILE_TYPE_EXTENSIONS = {
    "typescript": (".ts", ".tsx"),
    "javascript": (".js", ".jsx", ".mjs", ".cjs"),
    "styles": (".css", ".scss", ".sass", ".less"),
    "python": (".py",),
    "rust": (".rs",),
    "go": (".go",),
    "config": (".json", ".yaml", ".yml", ".toml"),
    "markdown": (".md", ".mdx"),
}

TEST_FILE = re.compile(
    r"(\.(test|spec)\.(ts|tsx|js|jsx)$)|(_test\.(py|go)$)|(^test_\w*\.py$)",
    re.IGNORECASE
)

MONOREPO_DIRS = {"packages", "workspaces", "apps"}
CLI_DIRS = {"bin", "cli"}


def _analyze_directories(paths: Sequence[str]) -> DirectoryRoles:
    top_level = {path.split("/", 1)[0].lower() for path in paths if "/" in path}

    def any_match(pattern: re.Pattern) -> bool:
        return any(pattern.search(path) for path in paths)

    return DirectoryRoles(
        has_src=any_match(SOURCE_DIR),
        has_tests=any_match(TEST_DIR),
        has_components=any_match(COMPONENTS_DIR),
        has_pages=any_match(PAGES_DIR),
        has_api=any_match(API_DIR),
        has_utils=any_match(UTILS_DIR),
        has_config=any_match(CONFIG_DIR),
        has_packages=bool(top_level & MONOREPO_DIRS),
        has_cli=bool(top_level & CLI_DIRS)
    )


def _analyze_file_types(paths: Sequence[str]) -> Dict[str, int]:
    counts = {bucket: 0 for bucket in FILE_TYPE_EXTENSIONS}
    counts["tests"] = 0

    for path in paths:
        name = path.rsplit("/", 1)[-1].lower()
        for bucket, extensions in FILE_TYPE_EXTENSIONS.items():
            if name.endswith(extensions):
                counts[bucket] += 1
        if TEST_FILE.search(name):
            counts["tests"] += 1

    return counts


def _detect_style(roles: DirectoryRoles, file_types: Dict[str, int]) -> ProjectStyle:
    is_webapp = roles.has_components and (roles.has_pages or file_types["styles"] > 0)

    if roles.has_packages:
        return ProjectStyle.MONOREPO
    if is_webapp and roles.has_api:
        return ProjectStyle.MIXED
    if is_webapp:
        return ProjectStyle.WEBAPP
    if roles.has_api:
        return ProjectStyle.API
    if roles.has_cli:
        return ProjectStyle.CLI
    if roles.has_src and not roles.has_pages:
        return ProjectStyle.LIBRARY
    return ProjectStyle.UNKNOWN


def extract_structural_context(paths: Sequence[str]) -> Optional[StructuralContext]:
    """
    Build tier 2 context from workspace-relative file paths.

    Args:
        paths: Files relative to the workspace root, "/" separated

    Returns:
        Optional[StructuralContext]: None for an empty workspace
    """
    if not paths:
        return None

    roles = _analyze_directories(paths)
    file_types = _analyze_file_types(paths)

    directories = set()
    max_depth = 0
    for path in paths:
        parts = path.split("/")
        max_depth = max(max_depth, len(parts) - 1)
        for i in range(1, len(parts)):
            directories.add("/".join(parts[:i]))

    top_level = sorted({path.split("/", 1)[0] for path in paths if "/" in path})

    return StructuralContext(
        directories=roles,
        file_types=file_types,
        project_style=_detect_style(roles, file_types),
        total_files=len(paths),
        total_directories=len(directories),
        max_depth=max_depth,
        top_level_dirs=tuple(top_level)
    )


def format_tier2(structural: Optional[StructuralContext]) -> str:
    if structural is None:
        return ""

    lines: List[str] = []
    if structural.project_style != ProjectStyle.UNKNOWN:
        lines.append(f"Project type: {structural.project_style.value}")

    roles = structural.directories
    features = [
        label for present, label in (
            (roles.has_src, "source"),
            (roles.has_tests, "tests"),
            (roles.has_components, "components"),
            (roles.has_pages, "pages/routes"),
            (roles.has_api, "API"),
        ) if present
    ]
    if features:
        lines.append(f"Structure: {', '.join(features)}")

    counts = structural.file_types
    languages = []
    if counts["typescript"] > counts["javascript"]:
        languages.append(f"TypeScript ({counts['typescript']} files)")
    elif counts["javascript"] > 0:
        languages.append(f"JavaScript ({counts['javascript']} files)")
    for bucket, label in (("python", "Python"), ("rust", "Rust"), ("go", "Go")):
        if counts[bucket] > 0:
            languages.append(f"{label} ({counts[bucket]} files)")
    if languages:
        lines.append(f"Languages: {', '.join(languages)}")

    if counts["tests"] > 0:
        lines.append(f"Has {counts['tests']} test file(s)")

    lines.append(f"Size: {structural.total_files} files, {structural.total_directories} directories")
    return "\n".join(lines)
