"""Prompt library: the prompt source behind the embedded provider.

Prompts are declared in YAML files and rendered with Jinja2. Missing
arguments render as empty text so a filled prompt never contains raw
template placeholders.
"""

import datetime
import logging
from pathlib import Path
from typing import Any

import yaml
from jinja2 import Environment, meta
from pydantic import BaseModel, Field

from mcpbridge.mcp.models import McpPrompt, McpPromptArgument

logger = logging.getLogger(__name__)

DEFAULT_LIBRARY_PATH = Path(__file__).parent / "default_prompts.yaml"

_environment = Environment(autoescape=False, keep_trailing_newline=True)


class PromptArg(BaseModel):
    name: str
    description: str | None = None
    required: bool = False


class PromptDef(BaseModel):
    """A prompt template and its metadata."""

    id: str
    category: str | None = None
    title: str | None = None
    description: str | None = None
    args: list[PromptArg] = Field(default_factory=list)
    template: str

    def template_fields(self) -> list[str]:
        """Names of the variables referenced by the template."""
        parsed = _environment.parse(self.template)
        return sorted(meta.find_undeclared_variables(parsed) - {"today"})

    def fill(self, args: dict[str, Any]) -> str:
        """Render the template with the given arguments."""
        fields = {"today": datetime.date.today().isoformat(), **args}
        return _environment.from_string(self.template).render(**fields)

    def to_mcp_prompt(self) -> McpPrompt:
        args = self.args or [PromptArg(name=name) for name in self.template_fields()]
        return McpPrompt(
            name=self.id,
            title=self.title,
            description=self.description,
            arguments=[
                McpPromptArgument(name=a.name, description=a.description, required=a.required)
                for a in args
            ],
        )


class PromptLibrary:
    """An ordered collection of prompt definitions keyed by id."""

    def __init__(self, prompts: list[PromptDef] | None = None):
        self._prompts: dict[str, PromptDef] = {}
        for prompt in prompts or []:
            self.add(prompt)

    def add(self, prompt: PromptDef) -> None:
        if prompt.id in self._prompts:
            logger.warning(f"Prompt '{prompt.id}' already defined, overwriting")
        prompts = dict(self._prompts)
        prompts[prompt.id] = prompt
        self._prompts = prompts

    def get(self, prompt_id: str) -> PromptDef | None:
        return self._prompts.get(prompt_id)

    def list(self, category_prefix: str | None = None) -> list[PromptDef]:
        prompts = list(self._prompts.values())
        if category_prefix is not None:
            prompts = [p for p in prompts if (p.category or "").startswith(category_prefix)]
        return prompts

    def __len__(self) -> int:
        return len(self._prompts)

    @classmethod
    def load_file(cls, path: str | Path) -> "PromptLibrary":
        """Load prompts from a YAML file with a top-level ``prompts`` list."""
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls([PromptDef(**item) for item in data.get("prompts", [])])

    @classmethod
    def load_from_path(cls, path: str | Path) -> "PromptLibrary":
        """Load from a single YAML file or every YAML file in a directory."""
        path = Path(path)
        if not path.is_dir():
            return cls.load_file(path)

        library = cls()
        for file in sorted(path.glob("*.y*ml")):
            for prompt in cls.load_file(file).list():
                library.add(prompt)
        logger.info(f"Loaded {len(library)} prompts from {path}")
        return library

    @classmethod
    def default(cls) -> "PromptLibrary":
        """The bundled prompt library."""
        return cls.load_file(DEFAULT_LIBRARY_PATH)
