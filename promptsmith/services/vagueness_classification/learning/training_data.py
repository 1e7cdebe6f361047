"""
Bundled seed training set for the vagueness model.

Prompts are expanded from templates in three tiers; each tier maps to a
label range, and labels within a tier are spread deterministically.
"""

from dataclasses import dataclass, field
from itertools import product
from typing import Dict, List, Tuple

from ..models import LabeledPrompt

COMPONENTS = [
    "authentication", "login", "user registration", "API", "database",
    "form validation", "error handling", "caching", "logging", "session management",
]

VAGUE_TARGETS = ["it", "the thing", "this", "stuff", "the code", "something", "everything"]

SPECIFIC_FILES = [
    "src/auth/login.ts", "api/users/controller.js", "components/Form.tsx",
    "lib/database.py", "services/payment.ts",
]

FRAMEWORKS = ["React", "Vue", "Angular", "Express", "Django", "FastAPI", "Next.js", "NestJS"]

LANGUAGES = ["TypeScript", "JavaScript", "Python", "Go", "Rust"]

ERROR_TYPES = [
    "TypeError: Cannot read property 'id' of undefined",
    "ReferenceError: user is not defined",
    "500 Internal Server Error",
    "CORS policy blocked the request",
    "Connection refused on port 5432",
]

# Label range per tier: (low, high)
TIER_RANGES: Dict[str, Tuple[int, int]] = {
    "high": (75, 100),
    "medium": (40, 65),
    "low": (0, 25),
}


@dataclass(frozen=True)
class PromptTemplate:
    base: str
    tier: str
    intent: str = "unknown"
    variables: Dict[str, List[str]] = field(default_factory=dict)


VAGUE_TEMPLATES = [
    PromptTemplate("fix {target}", "high", "fix", {"target": VAGUE_TARGETS}),
    PromptTemplate("make {target} work", "high", "fix", {"target": VAGUE_TARGETS}),
    PromptTemplate("help me with {target}", "high", "unknown", {"target": VAGUE_TARGETS}),
    PromptTemplate("{target} is broken", "high", "fix", {"target": VAGUE_TARGETS}),
    PromptTemplate("something is not working", "high", "fix"),
    PromptTemplate("make it better", "high", "improve"),
    PromptTemplate("improve the code", "high", "improve"),
    PromptTemplate("optimize performance", "high", "improve"),
    PromptTemplate("fix the {component}", "high", "fix", {"component": COMPONENTS}),
    PromptTemplate("create a {component}", "high", "build", {"component": COMPONENTS}),
    PromptTemplate("build {component}", "high", "build", {"component": COMPONENTS}),
    PromptTemplate("explain {component}", "high", "learn", {"component": COMPONENTS}),
    PromptTemplate("make a website", "high", "build"),
    PromptTemplate("build an app", "high", "build"),
]

MEDIUM_TEMPLATES = [
    PromptTemplate("add {component} to my {framework} app", "medium", "build",
                   {"component": COMPONENTS, "framework": FRAMEWORKS}),
    PromptTemplate("fix the {component} bug in {language}", "medium", "fix",
                   {"component": COMPONENTS, "language": LANGUAGES}),
    PromptTemplate("how should I structure {component} in {framework}", "medium", "learn",
                   {"component": COMPONENTS, "framework": FRAMEWORKS}),
    PromptTemplate("refactor the {component} code to be cleaner", "medium", "improve",
                   {"component": COMPONENTS}),
]

SPECIFIC_TEMPLATES = [
    PromptTemplate(
        "Fix the {error} thrown in {file} on line 42 when the session token is missing",
        "low", "fix", {"error": ERROR_TYPES, "file": SPECIFIC_FILES}
    ),
    PromptTemplate(
        "Add {component} to {file} using {framework}: validate input, return 400 on "
        "invalid payloads, and cover it with unit tests",
        "low", "build", {"component": COMPONENTS, "file": SPECIFIC_FILES, "framework": FRAMEWORKS}
    ),
    PromptTemplate(
        "Create a POST /api/users endpoint in {framework} with JWT auth, PostgreSQL "
        "storage and a 201 response containing the new user id",
        "low", "build", {"framework": FRAMEWORKS}
    ),
    PromptTemplate(
        "Refactor getUserById() in {file} to use async/await instead of callbacks "
        "and keep the existing error handling",
        "low", "improve", {"file": SPECIFIC_FILES}
    ),
]

ALL_TEMPLATES = VAGUE_TEMPLATES + MEDIUM_TEMPLATES + SPECIFIC_TEMPLATES


def _expand(template: PromptTemplate) -> List[str]:
    if not template.variables:
        return [template.base]
    names = sorted(template.variables)
    prompts = []
    for values in product(*(template.variables[name] for name in names)):
        prompts.append(template.base.format(**dict(zip(names, values))))
    return prompts


def _label(tier: str, position: int, total: int) -> int:
    low, high = TIER_RANGES[tier]
    if total <= 1:
        return (low + high) // 2
    return low + round((high - low) * position / (total - 1))


def generate_seed_dataset(max_per_template: int = 12) -> List[LabeledPrompt]:
    """
    Expand the bundled templates into labelled prompts.

    Args:
        max_per_template: Cap on expansions taken from each template

    Returns:
        List[LabeledPrompt]: Deterministic, de-duplicated training examples
    """
    seen = set()
    dataset = []
    for template in ALL_TEMPLATES:
        prompts = _expand(template)[:max_per_template]
        for position, prompt in enumerate(prompts):
            key = prompt.lower()
            if key in seen:
                continue
            seen.add(key)
            dataset.append(LabeledPrompt(
                prompt=prompt,
                vagueness_score=_label(template.tier, position, len(prompts)),
                intent=template.intent
            ))
    return dataset
