"""
Shared word lists and regular expressions for prompt analysis.
Used by the rule-based vagueness classifier and the quality analyzer.
"""

import re

FRAMEWORKS = (
    "react", "vue", "angular", "svelte", "next", "nuxt", "express", "nest",
    "fastify", "django", "flask", "fastapi", "spring", "rails", "laravel",
)

LANGUAGES = (
    "typescript", "javascript", "python", "java", "go", "rust", "ruby", "php",
    "swift", "kotlin", "c#", "cpp", "node",
)

# c# ends in a non-word character, so the trailing boundary is a lookahead
FRAMEWORK_PATTERN = re.compile(
    r"\b(" + "|".join(re.escape(term) for term in FRAMEWORKS + LANGUAGES) + r")(?![\w#])",
    re.IGNORECASE,
)

VAGUE_VERBS = ("make", "create", "do", "fix", "help", "change", "update", "build")

LEARNING_VERBS = ("show", "tell", "teach", "explain", "learn", "understand")

# Pronouns and placeholders that stand in for an unnamed target
VAGUE_REFERENTS = ("it", "this", "that", "stuff", "things", "something", "somehow")

VAGUE_WORDS = (
    "maybe", "perhaps", "might", "could", "possibly", "somehow", "something",
    "stuff", "things", "probably", "sometimes", "usually", "generally",
    "basically", "actually", "really", "quite", "rather", "somewhat",
)

VAGUE_WORDS_PATTERN = re.compile(r"\b(" + "|".join(VAGUE_WORDS) + r")\b", re.IGNORECASE)

BROAD_TERMS = ("website", "app", "application", "system", "project", "api", "database")

CONTEXT_PATTERNS = (
    re.compile(r"in\s+[\w/.]+", re.IGNORECASE),
    re.compile(r"file:\s*[\w/.]+", re.IGNORECASE),
    re.compile(r"[\w/]+\.(ts|js|tsx|jsx|py|java|cpp|go)", re.IGNORECASE),
    re.compile(r"\b(react|vue|angular|node|python|java|typescript|javascript)\b", re.IGNORECASE),
    re.compile(r"\b(authentication|database|api|component|function|class|interface)\b", re.IGNORECASE),
    re.compile(r"(security\+|\bcomptia\b|\baws\b|\bazure\b|\bcertification\b|\bexam\b)", re.IGNORECASE),
    re.compile(r"[\w\s]+(fundamentals|basics|advanced|tutorial|guide|concepts)", re.IGNORECASE),
)

# Markers that a broad request already names concrete requirements
DETAIL_PATTERNS = (
    re.compile(r"\b(function|class|method|endpoint|route|component)\b", re.IGNORECASE),
    re.compile(r"\b(POST|GET|PUT|DELETE|PATCH)\b"),
    re.compile(r"\b(async|await|promise|callback)\b", re.IGNORECASE),
    re.compile(r"\b(jwt|auth|token|session|cookie)\b", re.IGNORECASE),
    re.compile(r"\b(database|sql|query|table|schema)\b", re.IGNORECASE),
    re.compile(r"\{[^}]+\}"),
)

ACTION_VERBS = (
    # Core development actions
    "implement", "create", "build", "add", "fix", "refactor", "update", "remove",
    "delete", "configure", "migrate", "optimize", "debug", "test", "write",
    "display", "render", "fetch", "validate", "handle", "integrate", "deploy",
    "install", "setup", "design", "define", "check", "ensure", "verify",
    # Data operations
    "connect", "send", "receive", "process", "transform", "convert", "parse",
    "format", "encode", "decode", "encrypt", "decrypt", "authenticate", "authorize",
    # Flow control
    "cache", "log", "track", "monitor", "search", "filter", "sort", "merge", "split",
    # Lifecycle
    "initialize", "load", "start", "stop", "enable", "disable", "show", "hide", "toggle",
)

TECH_OBJECTS = (
    # UI elements
    "form", "button", "component", "modal", "dialog", "table", "list", "card",
    "menu", "header", "footer", "input", "field", "panel", "grid", "layout",
    "view", "screen", "dashboard",
    # Data concepts
    "user", "admin", "role", "permission", "session", "token", "cookie", "cache",
    "storage", "database", "api", "endpoint", "route", "path", "url", "query",
    "request", "response", "error", "message",
    # Code concepts
    "event", "callback", "promise", "hook", "state", "prop", "context", "reducer",
    "action", "store", "middleware", "plugin", "module", "package", "service",
    "controller", "model", "schema", "interface", "class", "function", "method", "type",
    # Common task targets
    "bug", "issue", "feature", "test", "config", "setting", "authentication",
    "authorization", "security", "validation",
)

STOP_WORDS = frozenset({
    "a", "an", "the", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "must", "shall", "can", "need", "dare",
    "to", "of", "in", "for", "on", "with", "at", "by", "from", "up",
    "about", "into", "through", "during", "before", "after", "above",
    "below", "between", "under", "again", "further", "then", "once",
    "and", "but", "or", "nor", "so", "yet", "both", "either", "neither",
    "not", "only", "same", "than", "too", "very", "just", "also",
    "make", "create", "do", "fix", "help", "change", "update", "build",
    "it", "this", "that", "these", "those", "my", "your", "his", "her",
    "its", "our", "their", "what", "which", "who", "whom", "whose",
    "i", "me", "we", "us", "you", "he", "she", "they", "them",
})

# Specificity signals, highest value first

HIGH_VALUE_PATTERNS = (
    # File paths and file names
    re.compile(r"(?:[\w.-]+/)+[\w.-]+|\b[\w-]+\.(?:tsx?|jsx?|py|java|go|rs|cpp|c|h|rb|php|cs|kt|swift|vue|json|ya?ml|toml|css|scss|html|md|sql)\b", re.IGNORECASE),
    # HTTP methods and routes
    re.compile(r"\b(?:GET|POST|PUT|DELETE|PATCH)\b|(?<![\w/])/api/[\w/{}:-]*"),
    # Code references: calls, camelCase identifiers, dotted members
    re.compile(r"\b\w+\(\)|\b[a-z]+[A-Z]\w*\b|\b[A-Za-z_]\w*\.[a-z_]\w*\("),
    # Named errors and exceptions
    re.compile(r"\b\w*(?:Error|Exception)\b"),
    # Line numbers
    re.compile(r"\bline\s+\d+\b|:\d+:\d+", re.IGNORECASE),
)

MEDIUM_VALUE_TERMS = re.compile(
    r"\b(jwt|oauth2?|auth|authentication|authorization|bcrypt|login|password|session|token|"
    r"postgres(?:ql)?|mysql|mongodb|sqlite|redis|sql|orm|schema|"
    r"rest|graphql|grpc|websocket|"
    r"unit\s+tests?|jest|pytest|mocha|vitest|cypress|playwright|"
    r"docker|kubernetes|aws|azure|gcp|google|github|"
    + "|".join(FRAMEWORKS + tuple(term for term in LANGUAGES if term != "c#"))
    + r")\b",
    re.IGNORECASE,
)

LOW_VALUE_TERMS = re.compile(
    r"\b(api|endpoint|component|function|class|interface|hook|state|cache|middleware|"
    r"validation|error\s+handling|rate\s+limiting|pagination|async|await|promise|callback|"
    r"dashboard|form|button|modal|query|database|table|route|config|logging|input)\b",
    re.IGNORECASE,
)

REQUIREMENT_PATTERNS = (
    # Enumerations: "x, y, and z"
    re.compile(r"\w+\s*,\s*[\w\s]+,?\s+(?:and|or)\s+\w+", re.IGNORECASE),
    # Numbered or bulleted lines
    re.compile(r"(?:^|\n)\s*(?:\d+[.)]|[-*•])\s+\w", re.MULTILINE),
    # Constraint words
    re.compile(r"\b(must|should|without|only|at\s+least|at\s+most|instead\s+of|using|with)\b", re.IGNORECASE),
)


def contains_word(text: str, word: str) -> bool:
    """Whole-word, case-insensitive membership test"""
    return re.search(r"\b" + re.escape(word) + r"\b", text, re.IGNORECASE) is not None
