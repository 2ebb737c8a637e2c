"""Prompt library used by the embedded provider."""

from mcpbridge.prompts.library import PromptDef, PromptLibrary

__all__ = ["PromptDef", "PromptLibrary"]
