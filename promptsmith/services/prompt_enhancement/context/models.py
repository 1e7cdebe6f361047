"""
Data models for workspace context tiers.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any, Tuple


class DiagnosticSeverity(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFORMATION = "information"
    HINT = "hint"


@dataclass(frozen=True)
class Diagnostic:
    """Single editor diagnostic for the active file"""
    severity: DiagnosticSeverity
    message: str
    line: Optional[int] = None


@dataclass(frozen=True)
class ActiveDocument:
    """Snapshot of the file open in the editor"""
    path: str
    language_id: str
    selection: str = ""


@dataclass(frozen=True)
class TechStack:
    """Languages, frameworks and tooling found in project manifests"""
    languages: Tuple[str, ...] = ()
    frameworks: Tuple[str, ...] = ()
    has_typescript: bool = False
    has_testing: bool = False
    package_manager: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.languages and not self.frameworks


@dataclass(frozen=True)
class DiagnosticSummary:
    errors: int = 0
    warnings: int = 0
    first_error: Optional[str] = None


@dataclass(frozen=True)
class BasicContext:
    """Tier 1: editor state and project manifests"""
    tech_stack: TechStack = field(default_factory=TechStack)
    file_path: Optional[str] = None
    file_name: Optional[str] = None
    relative_path: Optional[str] = None
    language: Optional[str] = None
    selection: Optional[str] = None
    diagnostics: Optional[DiagnosticSummary] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "file_path": self.file_path,
            "relative_path": self.relative_path,
            "language": self.language,
            "has_selection": bool(self.selection),
            "languages": list(self.tech_stack.languages),
            "frameworks": list(self.tech_stack.frameworks),
            "errors": self.diagnostics.errors if self.diagnostics else 0,
            "warnings": self.diagnostics.warnings if self.diagnostics else 0
        }


@dataclass(frozen=True)
class DirectoryRoles:
    """Which conventional directories the workspace has"""
    has_src: bool = False
    has_tests: bool = False
    has_components: bool = False
    has_pages: bool = False
    has_api: bool = False
    has_utils: bool = False
    has_config: bool = False
    has_packages: bool = False
    has_cli: bool = False


class ProjectStyle(Enum):
    MONOREPO = "monorepo"
    MIXED = "mixed"
    WEBAPP = "webapp"
    API = "api"
    CLI = "cli"
    LIBRARY = "library"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class StructuralContext:
    """Tier 2: directory roles, file types and project style"""
    directories: DirectoryRoles
    file_types: Dict[str, int]
    project_style: ProjectStyle
    total_files: int
    total_directories: int
    max_depth: int
    top_level_dirs: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "project_style": self.project_style.value,
            "file_types": dict(self.file_types),
            "total_files": self.total_files,
            "total_directories": self.total_directories,
            "max_depth": self.max_depth
        }


@dataclass(frozen=True)
class FunctionInfo:
    name: str
    signature: str
    is_async: bool = False
    is_exported: bool = False
    has_doc: bool = False


@dataclass(frozen=True)
class ClassInfo:
    name: str
    is_exported: bool = False
    extends: Optional[str] = None
    implements: Tuple[str, ...] = ()
    method_count: int = 0
    has_constructor: bool = False


@dataclass(frozen=True)
class ImportInfo:
    source: str
    names: Tuple[str, ...] = ()
    default: Optional[str] = None
    is_type_only: bool = False


@dataclass(frozen=True)
class SemanticContext:
    """Tier 3: declarations and patterns of the active file"""
    language: str
    functions: Tuple[FunctionInfo, ...] = ()
    classes: Tuple[ClassInfo, ...] = ()
    imports: Tuple[ImportInfo, ...] = ()
    exports: Tuple[str, ...] = ()
    patterns: Tuple[str, ...] = ()
    has_documentation: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "language": self.language,
            "functions": [function.name for function in self.functions],
            "classes": [cls.name for cls in self.classes],
            "imports": [item.source for item in self.imports],
            "exports": list(self.exports),
            "patterns": list(self.patterns),
            "has_documentation": self.has_documentation
        }


@dataclass(frozen=True)
class TiersUsed:
    basic: bool = False
    structural: bool = False
    semantic: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {"basic": self.basic, "structural": self.structural, "semantic": self.semantic}


@dataclass(frozen=True)
class TieredContext:
    """Context gathered for one orchestration call"""
    basic: Optional[BasicContext] = None
    structural: Optional[StructuralContext] = None
    semantic: Optional[SemanticContext] = None
    formatted: str = ""
    tiers_used: TiersUsed = field(default_factory=TiersUsed)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "basic": self.basic.to_dict() if self.basic else None,
            "structural": self.structural.to_dict() if self.structural else None,
            "semantic": self.semantic.to_dict() if self.semantic else None,
            "formatted": self.formatted,
            "tiers_used": self.tiers_used.to_dict()
        }
