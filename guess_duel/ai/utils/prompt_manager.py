import os
import logging
from typing import Optional
from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

logger = logging.getLogger(__name__)


class PromptManager:
    """
    Manages loading and rendering of prompt templates using Jinja2.
    """

    def __init__(self, templates_dir: Optional[str] = None):
        """
        Initialize the prompt manager with a templates directory.

        Args:
            templates_dir: Path to the templates directory. If None, defaults to
                           'prompt_templates' in the parent of this module's directory.
        """
        if templates_dir is None:
            # Default templates directory is relative to the module directory
            root_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
            templates_dir = os.path.join(root_dir, 'prompt_templates')

        if not os.path.isdir(templates_dir):
            raise FileNotFoundError(f"Templates directory {templates_dir} does not exist")

        self.templates_dir = templates_dir
        logger.debug(f"Initializing PromptManager with templates directory: {templates_dir}")

        # Prompts are plain text; a missing variable is a bug, not an empty string
        self.env = Environment(
            loader=FileSystemLoader(templates_dir),
            autoescape=False,
            undefined=StrictUndefined,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
        )

    def render_template(self, template_name: str, **kwargs) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Name of the template file (with .j2 extension)
            **kwargs: Variables to pass to the template

        Returns:
            Rendered template as a string
        """
        try:
            template = self.env.get_template(template_name)
            return template.render(**kwargs).strip()
        except TemplateError as e:
            logger.error(f"Error rendering template {template_name}: {e}")
            raise
