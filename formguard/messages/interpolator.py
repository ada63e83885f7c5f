"""Message Interpolator — turns templates and bundle keys into final text.

Resolution order for a template:
    1. ``{bundle.key}``  replaced by the bundle entry (recursively)
    2. ``{param}``       replaced by a parameter (``{min}``, ``{0}``,
                         ``{validatedValue}``); inserted values are escaped
    3. ``${expr}``       evaluated, see messages.expressions
    4. ``\\{ \\} \\$ \\\\``  unescaped to the literal character

Placeholders nothing can resolve, and expressions that fail, stay in the
output as written. Resolution never raises.
"""

import re
from typing import Any, Callable, Mapping, Optional

import structlog

from formguard.config import get_settings
from formguard.exceptions import ExpressionError
from formguard.messages.bundle import BundleLoader
from formguard.messages.expressions import evaluate, parse, render_value
from formguard.messages.formatter import Formatter

logger = structlog.get_logger()

VALIDATED_VALUE = "validatedValue"

_PLACEHOLDER = re.compile(r"\{([^{}\\$\s]+)\}")
_ESCAPE = re.compile(r"([\\{}$])")
_UNESCAPE = re.compile(r"\\(.)")


def escape(text: str) -> str:
    """Escape text so it is rendered literally."""
    return _ESCAPE.sub(r"\\\1", text)


def _closing_brace(template: str, start: int) -> Optional[int]:
    """Index of the brace closing an expression body starting at ``start``."""
    depth = 0
    quote = None
    i = start
    while i < len(template):
        ch = template[i]
        if quote:
            if ch == "\\":
                i += 1
            elif ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == "{":
            depth += 1
        elif ch == "}":
            if depth == 0:
                return i
            depth -= 1
        i += 1
    return None


def scan(template: str) -> list[tuple[str, str]]:
    """Split a template into ("text" | "param" | "expr", body) segments.

    Text segments keep their escapes.
    """
    segments: list[tuple[str, str]] = []
    buffer: list[str] = []

    def flush():
        if buffer:
            segments.append(("text", "".join(buffer)))
            buffer.clear()

    i = 0
    while i < len(template):
        ch = template[i]
        if ch == "\\" and i + 1 < len(template):
            buffer.append(template[i:i + 2])
            i += 2
            continue
        if ch == "$" and template.startswith("{", i + 1):
            end = _closing_brace(template, i + 2)
            if end is not None:
                flush()
                segments.append(("expr", template[i + 2:end]))
                i = end + 1
                continue
        if ch == "{":
            match = _PLACEHOLDER.match(template, i)
            if match:
                flush()
                segments.append(("param", match.group(1)))
                i = match.end()
                continue
        buffer.append(ch)
        i += 1

    flush()
    return segments


def _rebuild(kind: str, body: str) -> str:
    if kind == "param":
        return "{" + body + "}"
    if kind == "expr":
        return "${" + body + "}"
    return body


class MessageInterpolator:
    """Resolves message templates against resource bundles and parameters."""

    def __init__(
        self,
        loader: Optional[BundleLoader] = None,
        max_depth: Optional[int] = None,
    ):
        settings = get_settings()
        self.loader = loader or BundleLoader(settings.BUNDLE_DIRS, settings.DEFAULT_LOCALE)
        self.max_depth = max_depth or settings.MAX_INTERPOLATION_DEPTH
        self.formatter = Formatter()

    def interpolate(
        self,
        template: str,
        params: Optional[Mapping[str, Any]] = None,
        locale: Optional[str] = None,
        resolve_keys: bool = True,
    ) -> str:
        """Resolve a template.

        Args:
            template: Literal text with placeholders, or a single ``{bundle.key}``
            params: Constraint attributes, positional ``"0"``, ``validatedValue``...
            locale: Locale for bundle lookups; loader default when None
            resolve_keys: False skips the bundle pass (literal messages)

        Returns:
            The resolved message
        """
        params = dict(params or {})

        # 1. Bundle keys, recursively
        text = template
        if resolve_keys:
            bundle = self.loader.bundle(locale)
            for _ in range(self.max_depth):
                replaced = self._substitute(text, bundle.get)
                if replaced == text:
                    break
                text = replaced

        # 2. Parameters
        def lookup_param(name: str) -> Optional[str]:
            if name in params:
                return escape(render_value(params[name]))
            return None

        text = self._substitute(text, lookup_param)

        # 3 + 4. Expressions and escapes
        return self._finish(text, params)

    def message(
        self,
        key: str,
        params: Optional[Mapping[str, Any]] = None,
        locale: Optional[str] = None,
        default: Optional[str] = None,
    ) -> str:
        """Resolve a bundle key.

        A key missing from the bundle falls back to ``default`` (interpolated
        like any template) and then to the key itself.
        """
        template = self.loader.bundle(locale).get(key)
        if template is None:
            if default is None:
                logger.debug("message_key_missing", key=key, locale=locale)
                return key
            template = default
        return self.interpolate(template, params, locale)

    # ── Passes ──

    def _substitute(self, text: str, lookup: Callable[[str], Optional[str]]) -> str:
        out = []
        for kind, body in scan(text):
            if kind == "param":
                value = lookup(body)
                out.append(_rebuild(kind, body) if value is None else value)
            else:
                out.append(_rebuild(kind, body))
        return "".join(out)

    def _finish(self, text: str, params: dict[str, Any]) -> str:
        scope = {"formatter": self.formatter, **params}
        out = []
        for kind, body in scan(text):
            if kind == "text":
                out.append(_UNESCAPE.sub(r"\1", body))
            elif kind == "param":
                out.append(_rebuild(kind, body))
            else:
                try:
                    out.append(render_value(evaluate(parse(body), scope)))
                except (ExpressionError, RecursionError) as e:
                    logger.debug("message_expression_failed", expression=body, error=str(e))
                    out.append(_rebuild(kind, body))
        return "".join(out)
