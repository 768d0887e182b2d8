import re

# Whole-text fenced block: opening ``` with optional language tag, body, closing ```.
_FENCED_BLOCK = re.compile(r"\A```[^\n`]*\n(.*?)\n?```\Z", re.DOTALL)


def strip_markdown(text: str) -> str:
    """Remove a single fenced code block wrapping the entire *text*.

    Fences that do not span the whole (trimmed) text are left alone, so prose
    with an embedded snippet comes back unchanged apart from trimming.
    """
    trimmed = text.strip()
    match = _FENCED_BLOCK.match(trimmed)
    if not match:
        return trimmed
    return match.group(1).strip()
