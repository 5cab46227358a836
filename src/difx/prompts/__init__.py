"""Prompt templates for diff explanation."""

from .common import MARKUP_INSTRUCTIONS, OUTPUT_TEMPLATE
from .diff import build_diff_prompt

__all__ = [
    "build_diff_prompt",
    "MARKUP_INSTRUCTIONS",
    "OUTPUT_TEMPLATE",
]
