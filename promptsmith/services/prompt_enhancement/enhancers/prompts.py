"""
Prompt templates shared by all rewrite providers.
"""

SYSTEM_PROMPT = """You rewrite vague requests to a coding assistant into clear, specific prompts.

First work out what the user wants:
- BUILD: create something new. Name the technology, the components and the expected behavior.
- LEARN: understand a concept. Ask for an explanation at a stated depth with examples.
- FIX: resolve a problem. Include the error, where it happens and what was expected.
- IMPROVE: refactor or optimize. Say what to improve and how success is measured.

Rules:
- Keep the user's intent and every concrete detail they gave.
- Use the workspace context when it is provided: file names, languages, frameworks, errors.
- Add requirements, constraints and the expected output format where they are missing.
- Do not invent project details that contradict the context.
- Reply with the rewritten prompt only. No preamble, no quotes, no explanation."""


def build_system_prompt() -> str:
    return SYSTEM_PROMPT


def build_user_prompt(prompt: str, context: str = "") -> str:
    """
    Build the user message for a rewrite request.

    Args:
        prompt: Original prompt
        context: Formatted workspace context, may be empty

    Returns:
        str: Quoted prompt, preceded by the context block when there is one
    """
    if context and context.strip():
        return f'WORKSPACE CONTEXT:\n{context}\n\nUSER PROMPT:\n"{prompt}"'
    return f'"{prompt}"'


def build_messages(prompt: str, context: str = ""):
    return [
        {"role": "system", "content": build_system_prompt()},
        {"role": "user", "content": build_user_prompt(prompt, context)}
    ]


def clean_enhanced_text(text: str) -> str:
    """Strip whitespace and one pair of surrounding quotes"""
    enhanced = text.strip()
    if len(enhanced) >= 2 and enhanced[0] == enhanced[-1] and enhanced[0] in ('"', "'"):
        enhanced = enhanced[1:-1]
    return enhanced.strip()
