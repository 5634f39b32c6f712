"""
Jinja2 loader for the refinement prompts.

Templates live next to this module as <name>.jinja2 files and are shipped
as package data. Rendering is strict: a variable missing from the context
raises instead of silently producing an empty string in the prompt.
"""

from functools import lru_cache
from pathlib import Path
from typing import List

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .templates import Template

TEMPLATES_DIR = Path(__file__).parent / "templates"
TEMPLATE_SUFFIX = ".jinja2"


def template_names() -> List[str]:
    return [getattr(Template, name) for name in dir(Template) if not name.startswith("_")]


def _check_templates_present():
    """Fails fast at import if any Template constant has no file."""
    missing = [
        name for name in template_names()
        if not (TEMPLATES_DIR / f"{name}{TEMPLATE_SUFFIX}").exists()
    ]
    if missing:
        raise FileNotFoundError(f"Prompt templates missing from {TEMPLATES_DIR}: {', '.join(missing)}")


_check_templates_present()


@lru_cache(maxsize=1)
def _environment() -> Environment:
    # Prompts are plain text, so no autoescaping
    return Environment(
        loader=FileSystemLoader(TEMPLATES_DIR),
        autoescape=False,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render(template_name: str, **context) -> str:
    """Renders the named template (without suffix) with the given variables."""
    return _environment().get_template(f"{template_name}{TEMPLATE_SUFFIX}").render(**context)
