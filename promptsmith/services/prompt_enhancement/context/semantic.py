"""
Tier 3 context: declarations and coding patterns of the active file.
Only runs with the workspace's semantic consent flag set.
"""

import re
from typing import List, Optional

from promptsmith.core.cancellation import CancellationToken

from .models import ActiveDocument, ClassInfo, FunctionInfo, ImportInfo, SemanticContext

SCRIPT_LANGUAGES = frozenset({"typescript", "typescriptreact", "javascript", "javascriptreact"})
PYTHON_LANGUAGES = frozenset({"python"})
SUPPORTED_LANGUAGES = SCRIPT_LANGUAGES | PYTHON_LANGUAGES

KEY_FUNCTION_LIMIT = 5
DEPENDENCY_LIMIT = 5
DOC_LOOKBACK = 500

# TypeScript / JavaScript
JS_FUNCTION = re.compile(r"(?:export\s+)?(async\s+)?function\s+(\w+)\s*\(([^)]*)\)")
JS_ARROW_FUNCTION = re.compile(
    r"(?:export\s+)?(const|let)\s+(\w+)\s*=\s*(async\s+)?\([^)]*\)\s*(?::\s*[^=]+)?\s*=>"
)
JS_CLASS = re.compile(r"(?:export\s+)?class\s+(\w+)(?:\s+extends\s+(\w+))?(?:\s+implements\s+([^{]+))?")
JS_METHOD = re.compile(
    r"(?:async\s+)?(?:static\s+)?(?:private\s+|public\s+|protected\s+)?(\w+)\s*\([^)]*\)\s*(?::\s*[^{]+)?\s*{"
)
JS_IMPORT = re.compile(
    r"import\s+(type\s+)?(?:{([^}]+)}|(\w+)(?:\s*,\s*{([^}]+)})?)\s+from\s+['\"]([^'\"]+)['\"]"
)
JS_EXPORT_NAMED = re.compile(r"export\s+(?:const|let|function|class|type|interface)\s+(\w+)")
JS_EXPORT_DEFAULT = re.compile(r"export\s+default\s+(?:(?:class|function)\s+)?(\w+)?")
JS_DOC = re.compile(r"/\*\*[\s\S]*?\*/")
NOT_METHODS = {"constructor", "if", "for", "while", "switch", "catch"}

# Python
PY_FUNCTION = re.compile(r"^([ \t]*)(async\s+)?def\s+(\w+)\s*\(([^)]*)\)", re.MULTILINE)
PY_CLASS = re.compile(r"^class\s+(\w+)(?:\(([^)]*)\))?\s*:", re.MULTILINE)
PY_IMPORT = re.compile(r"^(?:from\s+([\w.]+)\s+import\s+([^\n#]+)|import\s+([\w., ]+))", re.MULTILINE)
PY_DOCSTRING = re.compile(r"(\"\"\"|''')")

PATTERN_CHECKS = (
    ("singleton", re.compile(r"private\s+static\s+instance|getInstance\s*\(\)|_instance\s*=\s*None")),
    ("factory", re.compile(r"create\w+\s*\([^)]*\)\s*:\s*\w+|Factory")),
    ("observer/event-driven", re.compile(r"subscribe|unsubscribe|notify|addEventListener")),
    ("react-hooks", re.compile(r"useState|useEffect|useCallback|useMemo")),
    ("react-context", re.compile(r"createContext|useContext")),
    ("async/await", re.compile(r"async\s+(?:function|def)|await\s+")),
    ("promise-based", re.compile(r"new\s+Promise")),
)
DECORATOR = re.compile(r"^\s*@\w+", re.MULTILINE)


def _has_doc_before(content: str, position: int) -> bool:
    lookback = content[max(0, position - DOC_LOOKBACK):position]
    end = lookback.rfind("*/")
    if end == -1:
        return False
    return not lookback[end + 2:].strip()


def _class_body(content: str, start: int) -> str:
    """Text between the class's opening brace and its matching close"""
    open_brace = content.find("{", start)
    if open_brace == -1:
        return ""
    depth = 1
    i = open_brace + 1
    while i < len(content) and depth > 0:
        if content[i] == "{":
            depth += 1
        elif content[i] == "}":
            depth -= 1
        i += 1
    return content[open_brace:i]


def _split_names(names: Optional[str]) -> tuple:
    if not names:
        return ()
    return tuple(name.strip().split(" as ")[0].strip() for name in names.split(",") if name.strip())


def _scan_script(content: str):
    functions: List[FunctionInfo] = []
    for match in JS_FUNCTION.finditer(content):
        is_async = bool(match.group(1))
        name = match.group(2)
        functions.append(FunctionInfo(
            name=name,
            signature=f"{'async ' if is_async else ''}function {name}({match.group(3)})",
            is_async=is_async,
            is_exported=match.group(0).startswith("export"),
            has_doc=_has_doc_before(content, match.start())
        ))
    for match in JS_ARROW_FUNCTION.finditer(content):
        is_async = bool(match.group(3))
        name = match.group(2)
        functions.append(FunctionInfo(
            name=name,
            signature=f"{'async ' if is_async else ''}const {name} = () => ...",
            is_async=is_async,
            is_exported=match.group(0).startswith("export"),
            has_doc=_has_doc_before(content, match.start())
        ))

    classes: List[ClassInfo] = []
    for match in JS_CLASS.finditer(content):
        body = _class_body(content, match.start())
        method_count = sum(1 for m in JS_METHOD.finditer(body) if m.group(1) not in NOT_METHODS)
        classes.append(ClassInfo(
            name=match.group(1),
            is_exported=match.group(0).startswith("export"),
            extends=match.group(2),
            implements=_split_names(match.group(3)),
            method_count=method_count,
            has_constructor=bool(re.search(r"constructor\s*\(", body))
        ))

    imports = [
        ImportInfo(
            source=match.group(5),
            names=_split_names(match.group(2) or match.group(4)),
            default=match.group(3),
            is_type_only=bool(match.group(1))
        )
        for match in JS_IMPORT.finditer(content)
    ]

    exports = [match.group(1) for match in JS_EXPORT_NAMED.finditer(content)]
    exports.extend(match.group(1) or "default" for match in JS_EXPORT_DEFAULT.finditer(content))

    has_documentation = any(
        len(comment) > 20 and "@" in comment for comment in JS_DOC.findall(content)
    )
    return functions, classes, imports, exports, has_documentation


def _scan_python(content: str):
    functions = []
    for match in PY_FUNCTION.finditer(content):
        name = match.group(3)
        after = content[match.end():match.end() + 200]
        functions.append(FunctionInfo(
            name=name,
            signature=f"{'async ' if match.group(2) else ''}def {name}({match.group(4)})",
            is_async=bool(match.group(2)),
            is_exported=not match.group(1) and not name.startswith("_"),
            has_doc=bool(PY_DOCSTRING.match(after.split(":", 1)[-1].lstrip()))
        ))

    classes = []
    class_matches = list(PY_CLASS.finditer(content))
    for index, match in enumerate(class_matches):
        end = class_matches[index + 1].start() if index + 1 < len(class_matches) else len(content)
        body = content[match.end():end]
        bases = _split_names(match.group(2))
        methods = re.findall(r"^[ \t]+(?:async\s+)?def\s+(\w+)", body, re.MULTILINE)
        classes.append(ClassInfo(
            name=match.group(1),
            is_exported=not match.group(1).startswith("_"),
            extends=bases[0] if bases else None,
            implements=bases[1:],
            method_count=len([m for m in methods if m != "__init__"]),
            has_constructor="__init__" in methods
        ))

    imports = []
    for match in PY_IMPORT.finditer(content):
        if match.group(1):
            source = match.group(1)
            names = _split_names(match.group(2).strip("() "))
        else:
            names = _split_names(match.group(3))
            source = names[0] if names else ""
        imports.append(ImportInfo(source=source, names=names))

    exports = [f.name for f in functions if f.is_exported] + [c.name for c in classes if c.is_exported]
    has_documentation = bool(PY_DOCSTRING.search(content))
    return functions, classes, imports, exports, has_documentation


def detect_patterns(content: str, language: str) -> List[str]:
    patterns = [name for name, pattern in PATTERN_CHECKS if pattern.search(content)]
    if language in PYTHON_LANGUAGES and DECORATOR.search(content):
        patterns.append("decorators")
    return patterns


def extract_semantic_context(
    document: Optional[ActiveDocument],
    content: Optional[str],
    token: Optional[CancellationToken] = None
) -> Optional[SemanticContext]:
    """
    Scan the active file's text for declarations and patterns.

    Args:
        document: Active document, None when no editor is open
        content: Text of the active document
        token: Optional cancellation handle

    Returns:
        Optional[SemanticContext]: None when cancelled, no file, or unsupported language
    """
    if token is not None and token.is_cancellation_requested:
        return None
    if document is None or content is None:
        return None
    if document.language_id not in SUPPORTED_LANGUAGES:
        return None

    if document.language_id in PYTHON_LANGUAGES:
        functions, classes, imports, exports, has_documentation = _scan_python(content)
    else:
        functions, classes, imports, exports, has_documentation = _scan_script(content)

    return SemanticContext(
        language=document.language_id,
        functions=tuple(functions),
        classes=tuple(classes),
        imports=tuple(imports),
        exports=tuple(exports),
        patterns=tuple(detect_patterns(content, document.language_id)),
        has_documentation=has_documentation
    )


def format_tier3(semantic: Optional[SemanticContext]) -> str:
    if semantic is None:
        return ""

    lines = []
    if semantic.functions:
        exported = [f for f in semantic.functions if f.is_exported]
        async_count = sum(1 for f in semantic.functions if f.is_async)
        lines.append(
            f"Functions: {len(semantic.functions)} total "
            f"({len(exported)} exported, {async_count} async)"
        )
        if exported:
            names = ", ".join(f.name for f in exported[:KEY_FUNCTION_LIMIT])
            lines.append(f"Key functions: {names}")

    if semantic.classes:
        described = [
            f"{cls.name} extends {cls.extends}" if cls.extends else cls.name
            for cls in semantic.classes
        ]
        lines.append(f"Classes: {', '.join(described)}")

    external = []
    for item in semantic.imports:
        if item.source and not item.source.startswith(".") and item.source not in external:
            external.append(item.source)
    if external:
        lines.append(f"Dependencies: {', '.join(external[:DEPENDENCY_LIMIT])}")

    if semantic.patterns:
        lines.append(f"Patterns: {', '.join(semantic.patterns)}")

    return "\n".join(lines)
