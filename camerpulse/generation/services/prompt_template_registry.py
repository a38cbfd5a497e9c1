from string import Template
from typing import Any, Dict, Optional

POLL_SYSTEM_TEMPLATE_ID = "autonomous_poll_system"
POLL_USER_TEMPLATE_ID = "autonomous_poll_user"

DEFAULT_TEMPLATES = {
    POLL_SYSTEM_TEMPLATE_ID: (
        "You are CamerPulse Intelligence, a neutral civic analyst for Cameroon. "
        "You write balanced, non-partisan polls about current civic issues. "
        "Respond with a single JSON object and nothing else."
    ),
    POLL_USER_TEMPLATE_ID: (
        "A ${source_label} is trending on CamerPulse.\n"
        "Topic: ${topic}\n"
        "Category: ${category}\n"
        "Region: ${region}\n"
        "Trend strength: ${strength}\n\n"
        "Write one poll question that lets citizens express their view on this issue, "
        "with 3 to 5 short, mutually exclusive answer options.\n"
        "Return JSON with exactly these keys:\n"
        '{"question": "...", "description": "...", "options": ["..."], '
        '"reasoning": "why this poll matters now"}'
    ),
}


class PromptTemplateRegistry:
    """
    Prompt bodies by template id. Defaults can be overridden per id, e.g. to
    trial a different wording without touching the synthesizer.
    """

    def __init__(self, overrides: Optional[Dict[str, str]] = None):
        self._templates: Dict[str, str] = dict(DEFAULT_TEMPLATES)
        self._templates.update(overrides or {})

    def render(self, template_id: str, variables: Dict[str, Any]) -> str:
        body = self._templates.get(template_id)
        if body is None:
            raise KeyError(f"Template not found: {template_id}")
        safe_vars = {k: str(v) for k, v in variables.items()}
        return Template(body).safe_substitute(safe_vars)
