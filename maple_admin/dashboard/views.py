"""
Plain-text views for the CLI.

Templates live in config/views.yaml and are rendered with Jinja2.
Templates are cached in memory after first load.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import jinja2
import yaml

from ..utils.logger import StructuredLogger, get_logger, mask_card_number
from ..utils.timezone import format_display_date

DEFAULT_VIEWS_PATH = Path(__file__).resolve().parents[1] / "config" / "views.yaml"
COLUMN_GAP = "  "
MAX_CELL_WIDTH = 40


def render_table(headers: Sequence[Any], rows: Sequence[Sequence[Any]]) -> str:
    """Align rows under headers with a dashed rule. Long cells are cut."""
    cells: List[List[str]] = [[_cell(h) for h in headers]]
    for row in rows:
        cells.append([_cell(value) for value in row])

    widths = [max(len(line[i]) for line in cells if i < len(line)) for i in range(len(headers))]
    lines = []
    for index, line in enumerate(cells):
        padded = [line[i].ljust(widths[i]) if i < len(line) else "" for i in range(len(widths))]
        lines.append(COLUMN_GAP.join(padded).rstrip())
        if index == 0:
            lines.append(COLUMN_GAP.join("-" * w for w in widths))
    if not rows:
        lines.append("(none)")
    return "\n".join(lines)


def _cell(value: Any) -> str:
    text = "-" if value is None else str(value)
    text = " ".join(text.split())
    if len(text) > MAX_CELL_WIDTH:
        text = text[: MAX_CELL_WIDTH - 3] + "..."
    return text


class ViewRenderer:
    """
    Loader for CLI view templates from YAML configuration.

    Supports Jinja2 template rendering with variable substitution.
    """

    def __init__(
        self,
        template_path: Path = DEFAULT_VIEWS_PATH,
        logger: Optional[StructuredLogger] = None,
    ):
        self.template_path = Path(template_path)
        self.logger = logger or get_logger(__name__)
        self._templates: Dict[str, str] = {}
        self._loaded = False
        self._env = jinja2.Environment(undefined=jinja2.StrictUndefined, autoescape=False)
        self._env.globals["table"] = render_table
        self._env.filters["display_date"] = format_display_date
        self._env.filters["mask_card"] = mask_card_number

    def load_templates(self) -> None:
        """Load all templates from YAML file."""
        if self._loaded:
            return

        try:
            with open(self.template_path, "r", encoding="utf-8") as f:
                content = yaml.safe_load(f) or {}
        except FileNotFoundError as e:
            self.logger.error(
                f"View templates file not found: {self.template_path}",
                operation="load_view_templates",
                error=str(e),
            )
            raise

        if not isinstance(content, dict):
            raise ValueError(f"View templates in {self.template_path} must be a mapping")

        self._templates = {str(k): str(v) for k, v in content.items()}
        self._loaded = True
        self.logger.debug(
            f"Loaded {len(self._templates)} view templates",
            operation="load_view_templates",
        )

    def render(self, template_name: str, **context: Any) -> str:
        """
        Render a template with context variables.

        Raises:
            ValueError: If template not found
            jinja2.TemplateError: If template rendering fails
        """
        if not self._loaded:
            self.load_templates()

        if template_name not in self._templates:
            raise ValueError(
                f"Template '{template_name}' not found. Available: {list(self._templates.keys())}"
            )

        try:
            template = self._env.from_string(self._templates[template_name])
            return template.render(**context).rstrip()
        except jinja2.TemplateError as e:
            self.logger.error(
                f"Failed to render view '{template_name}'",
                operation="render_view",
                error=str(e),
            )
            raise
