# File: workshop/templates.py
"""
Workshop - Stub Template Renderer
==================================
Renders the ``.j2`` stubs under ``workshop/stubs/`` into PHP, Blade and
JSON-adjacent source text.

The generated files are full of ``{{ }}`` (Blade) and ``{$var}`` (PHP), so
the Jinja2 environment uses square-bracket delimiters instead:

    [[ entity.studly_singular ]]     placeholder
    [% for entity in entities %]     block
    [# note #]                       comment

``StrictUndefined`` makes a misspelt placeholder fail at render time rather
than leave a hole in a generated file.

Conditional sections
--------------------
Some artifacts have two shapes depending on whether a collection in the
context is empty (the sidebar is the canonical case).  Instead of sprinkling
``if`` checks into one stub, each shape is its own stub and a
``ConditionalTemplate`` picks one by ``RenderMode``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sized, Union

from jinja2 import Environment, FileSystemLoader, StrictUndefined

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("workshop.templates")

# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

DEFAULT_STUBS_DIR: Path = Path(__file__).parent / "stubs"


# ---------------------------------------------------------------------------
# Conditional templates
# ---------------------------------------------------------------------------


class RenderMode(str, Enum):
    """Which branch of a ``ConditionalTemplate`` is rendered."""

    POPULATED = "populated"
    EMPTY = "empty"


@dataclass(frozen=True)
class ConditionalTemplate:
    """
    A template with a populated and an empty variant.

    ``collection`` names the context key whose emptiness decides the mode.
    """

    collection: str
    populated: str
    empty: str

    def mode_for(self, context: Mapping[str, Any]) -> RenderMode:
        if self.collection not in context:
            raise KeyError(
                f"Conditional template needs context key {self.collection!r}."
            )
        items: Optional[Sized] = context[self.collection]
        return RenderMode.POPULATED if items else RenderMode.EMPTY

    def template_for(self, mode: RenderMode) -> str:
        return self.populated if mode is RenderMode.POPULATED else self.empty


TemplateRef = Union[str, ConditionalTemplate]


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 stubs for module scaffolding."""

    def __init__(self, stubs_dir: Optional[Path] = None) -> None:
        self.stubs_dir: Path = Path(stubs_dir) if stubs_dir else DEFAULT_STUBS_DIR
        self.env: Environment = Environment(
            loader=FileSystemLoader(str(self.stubs_dir)),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            variable_start_string="[[",
            variable_end_string="]]",
            block_start_string="[%",
            block_end_string="%]",
            comment_start_string="[#",
            comment_end_string="#]",
        )
        logger.debug("TemplateRenderer using stubs from %s.", self.stubs_dir)

    def render(self, template: TemplateRef, context: Mapping[str, Any]) -> str:
        """
        Render *template* with *context*.

        Args:
            template: Stub path relative to the stubs directory (e.g.
                ``"entities/entity.php.j2"``) or a ``ConditionalTemplate``.
            context: Variables available inside the stub.

        Returns:
            The rendered text.
        """
        if isinstance(template, ConditionalTemplate):
            mode: RenderMode = template.mode_for(context)
            template_id: str = template.template_for(mode)
            logger.debug(
                "Conditional template on %r rendered as %s (%s).",
                template.collection,
                mode.value,
                template_id,
            )
        else:
            template_id = template
        return self.env.get_template(template_id).render(**context)

    def render_string(self, source: str, context: Mapping[str, Any]) -> str:
        """Render an inline template string with the same delimiters."""
        return self.env.from_string(source).render(**context)

    def has_template(self, template_id: str) -> bool:
        return (self.stubs_dir / template_id).is_file()


__all__: List[str] = [
    "DEFAULT_STUBS_DIR",
    "ConditionalTemplate",
    "RenderMode",
    "TemplateRef",
    "TemplateRenderer",
]
