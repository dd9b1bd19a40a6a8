"""
Commit message trailer parsing and AI tool classification.

Trailers are ``Key: value`` lines in the final paragraph of a commit message::

    Add retry to payment client

    Wraps the HTTP call in a bounded retry loop.

    AI-Tool: claude
    AI-Confidence: high
"""

import re
from collections.abc import Iterable

from .data_models import AiTool

TRAILER_AI_TOOL = "AI-Tool"
TRAILER_AI_ASSISTED = "AI-Assisted"
TRAILER_AI_CONFIDENCE = "AI-Confidence"

TRAILER_PATTERN = re.compile(r"^([A-Za-z][A-Za-z0-9-]*):\s*(.+)$")

ASSISTED_TRUE_VALUES = frozenset({"true", "yes", "1"})
TOOL_NEGATIVE_VALUES = frozenset({"none", "false"})

# Checked in order; the first matching fragment wins
TOOL_FRAGMENTS: tuple[tuple[tuple[str, ...], AiTool], ...] = (
    (("copilot",), AiTool.GITHUB_COPILOT),
    (("devin",), AiTool.DEVIN),
    (("claude",), AiTool.CLAUDE),
    (("gpt", "openai"), AiTool.CHATGPT),
    (("whisperer", "amazon"), AiTool.CODEWHISPERER),
)


def extract_trailers(message: str | None) -> dict[str, str]:
    """Parse trailers from the last paragraph of a commit message.

    Keys keep their original case; a repeated key keeps its last value.
    Messages without a blank-line separated trailer paragraph yield ``{}``.
    """
    if not message:
        return {}

    paragraphs = message.replace("\r\n", "\n").split("\n\n")
    while paragraphs and not paragraphs[-1].strip():
        paragraphs.pop()

    if len(paragraphs) < 2:
        return {}

    trailers: dict[str, str] = {}
    for line in paragraphs[-1].split("\n"):
        match = TRAILER_PATTERN.match(line)
        if not match:
            continue
        trailers[match.group(1)] = match.group(2).strip()

    return trailers


def classify_tool(value: str | None) -> AiTool:
    """Map a raw ``AI-Tool`` trailer value to an ``AiTool``."""
    if value is None or not value.strip():
        return AiTool.NONE

    normalized = value.strip().lower()

    for tool in AiTool:
        if normalized in (tool.trailer_id, tool.display_name.lower()):
            return tool

    for fragments, tool in TOOL_FRAGMENTS:
        if any(fragment in normalized for fragment in fragments):
            return tool

    return AiTool.OTHER


def find_trailer(trailers: dict[str, str], *names: str) -> str | None:
    """Return the value of the first trailer matching ``names`` case-insensitively."""
    for name in names:
        wanted = name.lower()
        for key, value in trailers.items():
            if key.lower() == wanted:
                return value
    return None


def tool_trailer_value(
    trailers: dict[str, str], custom_tool_trailers: Iterable[str] = ()
) -> str | None:
    """Value of the ``AI-Tool`` trailer, or of a configured alias of it."""
    return find_trailer(trailers, TRAILER_AI_TOOL, *custom_tool_trailers)


def is_ai_assisted(
    trailers: dict[str, str], custom_tool_trailers: Iterable[str] = ()
) -> bool:
    """Decide whether a commit was AI-assisted from its trailers.

    An explicit ``AI-Assisted`` trailer decides on its own. Otherwise any
    tool trailer implies assistance unless it says ``none`` or ``false``.
    """
    assisted = find_trailer(trailers, TRAILER_AI_ASSISTED)
    if assisted is not None:
        return assisted.strip().lower() in ASSISTED_TRUE_VALUES

    tool = tool_trailer_value(trailers, custom_tool_trailers)
    if tool is not None:
        return tool.strip().lower() not in TOOL_NEGATIVE_VALUES

    return False


def extract_ai_tool(
    trailers: dict[str, str], custom_tool_trailers: Iterable[str] = ()
) -> AiTool:
    """Classify the tool named by the trailers, ``NONE`` when absent."""
    return classify_tool(tool_trailer_value(trailers, custom_tool_trailers))


def extract_ai_confidence(trailers: dict[str, str]) -> str | None:
    return find_trailer(trailers, TRAILER_AI_CONFIDENCE)
