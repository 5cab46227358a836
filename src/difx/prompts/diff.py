"""Prompt template for diff explanation."""

from .common import MARKUP_INSTRUCTIONS, OUTPUT_TEMPLATE


def build_diff_prompt(diff_content: str, markup: str = "tags") -> str:
    """
    Build prompt for explaining a git diff.

    Args:
        diff_content: Output of git diff
        markup: Color marking convention the model must use ("tags" or "ansi")

    Raises:
        ValueError: If markup is not a known convention
    """
    if markup not in MARKUP_INSTRUCTIONS:
        raise ValueError(f"Unknown markup: {markup}. Available: {list(MARKUP_INSTRUCTIONS.keys())}")

    sections = [
        "I'm going to show you the output of a git diff command. "
        "Please explain these changes in a clear, concise way.",
        "",
        "Here's the git diff output:",
        "",
        "```",
        diff_content,
        "```",
        "",
        "Be concise but include every file that was changed in DETAILS. "
        "Use the format below and output plaintext without ```. "
        "Only include SUMMARY, FILE CHANGES and DETAILS sections:",
        "",
        "```",
        OUTPUT_TEMPLATE,
        "```",
        "",
        MARKUP_INSTRUCTIONS[markup],
    ]

    return "\n".join(sections)
