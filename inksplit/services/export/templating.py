import os
from typing import Dict, Optional
from jinja2 import BaseLoader, Environment, Template, TemplateError

DEFAULT_CHANNEL_PATTERN = (
    "{{ base_name }}_{{ channel }}{% if color %}_{{ color }}{% endif %}"
)


class FilenameTemplater:
    """
    Renders per-channel export file names (without extension) from a Jinja2
    pattern. Available variables: base_name, channel, color.
    """

    def __init__(self) -> None:
        self.env = Environment(
            loader=BaseLoader(),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self._compiled: Dict[str, Template] = {}

    def _template(self, pattern: str) -> Template:
        template = self._compiled.get(pattern)
        if template is None:
            template = self.env.from_string(pattern)
            self._compiled[pattern] = template
        return template

    def render(self, pattern: str, context: dict) -> str:
        """
        Falls back to {base_name}_{channel} when the pattern is broken or
        renders to nothing usable.
        """
        fallback = f"{context.get('base_name', 'image')}_{context.get('channel', 'channel')}"
        try:
            rendered = self._template(pattern).render(context).strip()
        except TemplateError:
            return fallback
        # a name, never a path
        rendered = rendered.replace(os.sep, "_").replace("/", "_")
        if not rendered or rendered in (".", ".."):
            return fallback
        return rendered

    def channel_name(
        self,
        base_name: str,
        channel: str,
        color: Optional[str] = None,
        pattern: str = DEFAULT_CHANNEL_PATTERN,
    ) -> str:
        return self.render(
            pattern, {"base_name": base_name, "channel": channel, "color": color or ""}
        )
