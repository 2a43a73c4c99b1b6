from jinja2 import Environment, FileSystemLoader, StrictUndefined
from pathlib import Path
from typing import Any, Dict, Optional

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def _percent(value: float, digits: int = 2) -> str:
    return f"{value * 100:.{digits}f}%"


def get_env(templates_dir: Optional[str | Path] = None) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["percent"] = _percent
    return env


def render_template(template_name: str, ctx: Dict[str, Any], templates_dir: Optional[str | Path] = None) -> str:
    env = get_env(templates_dir)
    tmpl = env.get_template(template_name)
    return tmpl.render(**ctx)
