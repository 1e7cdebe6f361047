import json

from promptsmith.core.cancellation import CancellationToken
from promptsmith.services.prompt_enhancement.context import aggregator as aggregator_module
from promptsmith.services.prompt_enhancement.context.aggregator import (
    ContextAggregator,
    get_context_summary,
    has_context,
    truncate_context
)
from promptsmith.services.prompt_enhancement.context.basic import detect_basic_context, format_tier1
from promptsmith.services.prompt_enhancement.context.models import (
    ActiveDocument,
    Diagnostic,
    DiagnosticSeverity,
    ProjectStyle,
    TieredContext
)
from promptsmith.services.prompt_enhancement.context.semantic import extract_semantic_context, format_tier3
from promptsmith.services.prompt_enhancement.context.structural import extract_structural_context, format_tier2
from promptsmith.services.prompt_enhancement.context.workspace_host import FilesystemWorkspaceHost

TS_SOURCE = """
import { useState, useEffect } from 'react';
import axios from 'axios';
import { helper } from './helper';

/**
 * Fetches the current user.
 * @param id user id
 */
export async function fetchUser(id: string) {
  return axios.get(`/api/users/${id}`);
}

export const formatName = (user: User): string => user.name;

export class UserStore extends BaseStore implements Disposable {
  private static instance: UserStore;
  constructor() { super(); }
  load(id: string) { return fetchUser(id); }
  dispose() {}
}
"""

PY_SOURCE = '''
import os
from typing import List, Optional


class Repository(Base, Mixin):
    """Stores things."""

    def __init__(self):
        self._items = []

    async def fetch(self, key):
        return await self.load(key)


@cached
def build_index(paths: List[str]):
    """Index the paths."""
    return {p: os.path.basename(p) for p in paths}


def _private():
    pass
'''


def write(root, relative, content=""):
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


def make_react_workspace(root):
    write(root, "package.json", json.dumps({
        "dependencies": {"react": "^18.0.0", "next": "14.0.0"},
        "devDependencies": {"typescript": "^5.0.0", "jest": "^29.0.0"}
    }))
    write(root, "pnpm-lock.yaml")
    write(root, "src/components/Button.tsx")
    write(root, "src/pages/index.tsx")
    write(root, "src/api/users.ts", TS_SOURCE)
    write(root, "src/utils/format.ts")
    write(root, "tests/Button.test.tsx")
    write(root, "node_modules/react/index.js")


# Workspace host

async def test_workspace_listing_skips_excluded_dirs(tmp_path):
    make_react_workspace(tmp_path)
    host = FilesystemWorkspaceHost(str(tmp_path))

    files = await host.list_workspace_files()

    assert "src/api/users.ts" in files
    assert not any(path.startswith("node_modules/") for path in files)


async def test_workspace_listing_is_capped(tmp_path):
    for i in range(10):
        write(tmp_path, f"file{i}.txt")

    files = await FilesystemWorkspaceHost(str(tmp_path), max_files=3).list_workspace_files()

    assert len(files) == 3


async def test_workspace_host_refuses_paths_outside_root(tmp_path):
    write(tmp_path, "outside.txt", "secret")
    root = tmp_path / "project"
    root.mkdir()
    host = FilesystemWorkspaceHost(str(root))

    assert await host.read_file("../outside.txt") is None
    assert await host.read_file("missing.txt") is None


async def test_missing_workspace(tmp_path):
    host = FilesystemWorkspaceHost(str(tmp_path / "nope"))

    assert host.workspace_root() is None
    assert await host.list_workspace_files() == []


# Tier 1

async def test_basic_context_detects_stack_and_editor_state(tmp_path):
    make_react_workspace(tmp_path)
    document = ActiveDocument(path=str(tmp_path.resolve() / "src/api/users.ts"), language_id="typescript", selection="x" * 150)
    host = FilesystemWorkspaceHost(
        str(tmp_path),
        active_document=document,
        diagnostics=[
            Diagnostic(DiagnosticSeverity.WARNING, "unused variable"),
            Diagnostic(DiagnosticSeverity.ERROR, "Cannot find name 'User'", line=14),
            Diagnostic(DiagnosticSeverity.ERROR, "second error"),
        ]
    )

    basic = await detect_basic_context(host, await host.list_workspace_files())

    assert basic.relative_path == "src/api/users.ts"
    assert basic.file_name == "users.ts"
    assert basic.tech_stack.languages == ("TypeScript",)
    assert basic.tech_stack.frameworks == ("Next.js", "React")
    assert basic.tech_stack.package_manager == "pnpm"
    assert basic.tech_stack.has_testing
    assert basic.diagnostics.errors == 2
    assert basic.diagnostics.warnings == 1

    formatted = format_tier1(basic).split("\n")
    assert formatted[0] == "Currently editing: src/api/users.ts"
    assert formatted[1] == "Tech stack: TypeScript, Next.js, React"
    assert formatted[2] == "Selected code: " + "x" * 100 + "..."
    assert formatted[3] == "Errors: 2 (Cannot find name 'User')"


async def test_basic_context_python_project(tmp_path):
    write(tmp_path, "requirements.txt", "fastapi==0.110\npytest\n")
    host = FilesystemWorkspaceHost(str(tmp_path))

    basic = await detect_basic_context(host, await host.list_workspace_files())

    assert basic.file_path is None
    assert basic.tech_stack.languages == ("Python",)
    assert basic.tech_stack.frameworks == ("FastAPI",)
    assert basic.tech_stack.package_manager == "pip"
    assert format_tier1(basic) == "Tech stack: Python, FastAPI"


async def test_basic_context_ignores_broken_package_json(tmp_path):
    write(tmp_path, "package.json", "{oops")
    host = FilesystemWorkspaceHost(str(tmp_path))

    basic = await detect_basic_context(host, await host.list_workspace_files())

    assert basic.tech_stack.is_empty


# Tier 2

def test_structural_context_webapp():
    paths = [
        "src/components/Button.tsx",
        "src/pages/index.tsx",
        "src/styles/main.css",
        "tests/Button.test.tsx",
        "README.md",
    ]

    structural = extract_structural_context(paths)

    assert structural.project_style == ProjectStyle.WEBAPP
    assert structural.directories.has_src
    assert structural.directories.has_tests
    assert structural.file_types["typescript"] == 3
    assert structural.file_types["tests"] == 1
    assert structural.total_directories == 5
    assert structural.max_depth == 2
    assert format_tier2(structural) == "\n".join([
        "Project type: webapp",
        "Structure: source, tests, components, pages/routes",
        "Languages: TypeScript (3 files)",
        "Has 1 test file(s)",
        "Size: 5 files, 5 directories",
    ])


def test_structural_context_styles():
    assert extract_structural_context(["packages/a/index.js"]).project_style == ProjectStyle.MONOREPO
    assert extract_structural_context(["server/app.py"]).project_style == ProjectStyle.API
    assert extract_structural_context(["bin/run.py"]).project_style == ProjectStyle.CLI
    assert extract_structural_context(["src/lib.rs"]).project_style == ProjectStyle.LIBRARY
    assert extract_structural_context(["notes.txt"]).project_style == ProjectStyle.UNKNOWN
    assert extract_structural_context([
        "src/components/A.tsx", "src/pages/b.tsx", "src/api/c.ts"
    ]).project_style == ProjectStyle.MIXED


def test_structural_context_empty_workspace():
    assert extract_structural_context([]) is None
    assert format_tier2(None) == ""


def test_python_test_files_are_counted():
    structural = extract_structural_context(["pkg/test_models.py", "pkg/models_test.py", "pkg/models.py"])

    assert structural.file_types["tests"] == 2
    assert structural.file_types["python"] == 3


# Tier 3

def test_semantic_context_typescript():
    document = ActiveDocument(path="src/api/users.ts", language_id="typescript")

    semantic = extract_semantic_context(document, TS_SOURCE)

    names = [function.name for function in semantic.functions]
    assert names == ["fetchUser", "formatName"]
    assert semantic.functions[0].is_async
    assert semantic.functions[0].has_doc
    assert semantic.classes[0].name == "UserStore"
    assert semantic.classes[0].extends == "BaseStore"
    assert semantic.classes[0].implements == ("Disposable",)
    assert semantic.classes[0].has_constructor
    assert semantic.classes[0].method_count == 2
    assert [item.source for item in semantic.imports] == ["react", "axios", "./helper"]
    assert semantic.imports[1].default == "axios"
    assert "singleton" in semantic.patterns
    assert "react-hooks" in semantic.patterns
    assert semantic.has_documentation

    formatted = format_tier3(semantic).split("\n")
    assert formatted[0] == "Functions: 2 total (2 exported, 1 async)"
    assert formatted[1] == "Key functions: fetchUser, formatName"
    assert formatted[2] == "Classes: UserStore extends BaseStore"
    assert formatted[3] == "Dependencies: react, axios"


def test_semantic_context_python():
    document = ActiveDocument(path="repo.py", language_id="python")

    semantic = extract_semantic_context(document, PY_SOURCE)

    functions = {function.name: function for function in semantic.functions}
    assert set(functions) == {"__init__", "fetch", "build_index", "_private"}
    assert functions["fetch"].is_async
    assert functions["build_index"].is_exported
    assert functions["build_index"].has_doc
    assert not functions["_private"].is_exported
    assert not functions["fetch"].is_exported
    assert semantic.classes[0].extends == "Base"
    assert semantic.classes[0].implements == ("Mixin",)
    assert semantic.classes[0].method_count == 1
    assert semantic.classes[0].has_constructor
    assert [item.source for item in semantic.imports] == ["os", "typing"]
    assert "decorators" in semantic.patterns
    assert "async/await" in semantic.patterns


def test_semantic_context_requires_supported_language():
    assert extract_semantic_context(ActiveDocument("a.rb", "ruby"), "def x; end") is None
    assert extract_semantic_context(None, "x") is None
    assert extract_semantic_context(ActiveDocument("a.py", "python"), None) is None


def test_semantic_context_respects_cancellation():
    token = CancellationToken()
    token.cancel()

    assert extract_semantic_context(ActiveDocument("a.py", "python"), PY_SOURCE, token) is None


# Aggregation

def test_truncate_context_keeps_whole_lines():
    text = "line one\nline two\nline three"

    assert truncate_context(text, None) == text
    assert truncate_context(text, 100) == text
    assert truncate_context(text, 18) == "line one\nline two\n..."


async def test_aggregator_collects_all_tiers_with_consent(tmp_path):
    make_react_workspace(tmp_path)
    document = ActiveDocument(path=str(tmp_path.resolve() / "src/api/users.ts"), language_id="typescript")
    host = FilesystemWorkspaceHost(str(tmp_path), active_document=document, semantic_consent=True)

    context = await ContextAggregator(host).detect()

    assert has_context(context)
    assert context.tiers_used.basic and context.tiers_used.structural and context.tiers_used.semantic
    assert get_context_summary(context) == "Context from 3 tier(s): basic, structural, semantic"
    sections = context.formatted.split("\n\n")
    assert sections[0].startswith("Currently editing: src/api/users.ts")
    assert sections[1].startswith("Project type: mixed")
    assert sections[2].startswith("Functions: 2 total")


async def test_aggregator_skips_semantic_without_consent(tmp_path):
    make_react_workspace(tmp_path)
    document = ActiveDocument(path=str(tmp_path.resolve() / "src/api/users.ts"), language_id="typescript")
    host = FilesystemWorkspaceHost(str(tmp_path), active_document=document)

    context = await ContextAggregator(host).detect()

    assert context.semantic is None
    assert "Functions:" not in context.formatted


async def test_aggregator_skip_flags_and_budget(tmp_path):
    make_react_workspace(tmp_path)
    host = FilesystemWorkspaceHost(str(tmp_path), semantic_consent=True)

    context = await ContextAggregator(host, max_length=500).detect(skip_structural=True, max_length=20)

    assert context.structural is None
    assert context.formatted.endswith("\n...")


async def test_aggregator_cancelled_at_entry(tmp_path):
    token = CancellationToken()
    token.cancel()

    context = await ContextAggregator(FilesystemWorkspaceHost(str(tmp_path))).detect(token)

    assert context == TieredContext()
    assert get_context_summary(context) == "No context available"


async def test_aggregator_accepts_workspace_relative_document(tmp_path):
    make_react_workspace(tmp_path)
    document = ActiveDocument(path="src/api/users.ts", language_id="typescript")
    host = FilesystemWorkspaceHost(str(tmp_path), active_document=document, semantic_consent=True)

    context = await ContextAggregator(host).detect()

    assert context.basic.relative_path == "src/api/users.ts"
    assert ".." not in context.formatted
    assert context.semantic is not None
    assert [function.name for function in context.semantic.functions] == ["fetchUser", "formatName"]


async def test_aggregator_drops_only_the_failing_tier(tmp_path, monkeypatch):
    make_react_workspace(tmp_path)
    document = ActiveDocument(path="src/api/users.ts", language_id="typescript")
    host = FilesystemWorkspaceHost(str(tmp_path), active_document=document, semantic_consent=True)

    def broken(files):
        raise RuntimeError("scan failed")

    monkeypatch.setattr(aggregator_module, "extract_structural_context", broken)

    context = await ContextAggregator(host).detect()

    assert context.structural is None
    assert context.basic is not None
    assert context.semantic is not None
    assert context.formatted.startswith("Currently editing: src/api/users.ts")
