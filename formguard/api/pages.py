"""Page registry — views rendered by ``on_error_use_page``.

A page renderer receives the request, the collected messages and the params
given at dispatch, and returns a Response (or HTML text).
"""

from html import escape
from typing import Any, Awaitable, Callable, Optional, Union

from fastapi import Request
from fastapi.responses import HTMLResponse, Response

from formguard.errors import Messages
from formguard.exceptions import DispatchError

PageRenderer = Callable[..., Union[Response, str, Awaitable[Union[Response, str]]]]


class PageRegistry:
    """Maps page names to renderers."""

    def __init__(self):
        self._pages: dict[str, PageRenderer] = {}

    def page(self, name: str) -> Callable[[PageRenderer], PageRenderer]:
        """Decorator registering a renderer under ``name``."""
        def decorator(renderer: PageRenderer) -> PageRenderer:
            self._pages[name] = renderer
            return renderer
        return decorator

    def get(self, name: str) -> PageRenderer:
        try:
            return self._pages[name]
        except KeyError:
            raise DispatchError(f"No page registered as '{name}'") from None

    def __contains__(self, name: str) -> bool:
        return name in self._pages


# Module-level singleton
pages = PageRegistry()


# ─── Customer pages ───


def _field_row(messages: Messages, category: str, label: str, name: str, value: Any) -> str:
    errors = messages.errors.from_(category)
    warnings = messages.warnings.from_(category)
    row = (
        f'<p><label for="{name}">{label}</label> '
        f'<input id="{name}" name="{name}" value="{escape(str(value or ""))}">'
    )
    if errors:
        row += f' <span class="error">{escape(errors.join(", "))}</span>'
    if warnings:
        row += f' <span class="warning">{escape(warnings.join(", "))}</span>'
    return row + "</p>"


@pages.page("customers.form")
def customer_form(request: Request, messages: Messages, customer: Optional[Any] = None) -> HTMLResponse:
    """Registration form, with messages next to their fields."""
    values = customer.model_dump() if customer is not None else {}
    rows = [
        _field_row(messages, "customer.name", "Name", "name", values.get("name")),
        _field_row(messages, "customer.email", "E-mail", "email", values.get("email")),
        _field_row(messages, "customer.birth_date", "Birth date", "birth_date", values.get("birth_date")),
        _field_row(messages, "customer.nickname", "Nickname", "nickname", values.get("nickname")),
    ]
    other = [v for v in messages.errors if v.category not in
             ("customer.name", "customer.email", "customer.birth_date", "customer.nickname")]
    summary = "".join(
        f'<li data-category="{escape(v.category)}">{escape(v.message)}</li>' for v in other
    )

    body = (
        "<html><body><h1>New customer</h1>"
        + (f'<ul class="errors">{summary}</ul>' if summary else "")
        + '<form method="post" action="/api/v1/customers">'
        + "".join(rows)
        + '<button type="submit">Save</button></form></body></html>'
    )
    return HTMLResponse(body)


@pages.page("customers.preview")
def customer_preview(request: Request, messages: Messages, customer: Any) -> HTMLResponse:
    """Confirmation page for a valid draft."""
    notes = "".join(f"<li>{escape(v.message)}</li>" for v in messages.warnings)
    return HTMLResponse(
        "<html><body><h1>Review customer</h1>"
        f"<p>{escape(customer.name)} &lt;{escape(customer.email)}&gt;</p>"
        + (f'<ul class="warnings">{notes}</ul>' if notes else "")
        + "</body></html>"
    )
