"""HTML pages served to the browser at the end of a login attempt.

The callback listener only decides *what* happened; this module turns an
outcome into an HTTP status and a page for the user's browser tab. Pages
are Jinja2 templates in ``auth/templates/`` rendered with autoescaping, so
a provider-supplied ``error`` value is never injected as markup.
"""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from errors_ai.auth.outcome import CallbackOutcome

TEMPLATE_DIR = Path(__file__).parent / "templates"
"""Path to the Jinja2 template directory (``auth/templates/``)."""

SUCCESS_STATUS = 200
FAILURE_STATUS = 400

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
)


def render_success_page(message: str = "", hint: str = "errors-ai whoami") -> str:
    """Render the confirmation page shown after a successful login."""
    return _env.get_template("success.html").render(message=message, hint=hint)


def render_error_page(message: str) -> str:
    """Render the failure page with *message* shown to the user."""
    return _env.get_template("error.html").render(message=message)


def render_outcome_page(outcome: CallbackOutcome) -> tuple[int, str]:
    """Pick the status code and page for a terminal callback outcome.

    Args:
        outcome: The outcome the listener resolved for the request.

    Returns:
        A ``(status, html)`` tuple: ``200`` with the success page, or
        ``400`` with the error page carrying ``outcome.message``.
    """
    if outcome.ok:
        return SUCCESS_STATUS, render_success_page(outcome.message)
    return FAILURE_STATUS, render_error_page(outcome.message)
