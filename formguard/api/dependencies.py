"""Request-scoped dependencies — locale negotiation and the error collector."""

from typing import Optional

from fastapi import Depends, Request

from formguard.errors import ErrorCollector
from formguard.messages import normalize_locale
from formguard.validators import ValidationContext


def parse_accept_language(header: Optional[str]) -> list[str]:
    """Locales from an Accept-Language header, best first.

    'pt-BR,pt;q=0.9,en;q=0.8' -> ['pt_BR', 'pt', 'en']
    """
    if not header:
        return []

    weighted = []
    for position, part in enumerate(header.split(",")):
        piece = part.strip()
        if not piece:
            continue
        tag, _, params = piece.partition(";")
        quality = 1.0
        params = params.strip()
        if params.startswith("q="):
            try:
                quality = float(params[2:])
            except ValueError:
                quality = 0.0
        if tag.strip() == "*" or quality <= 0:
            continue
        weighted.append((-quality, position, normalize_locale(tag.strip())))

    return [locale for _, _, locale in sorted(weighted)]


def negotiate_locale(header: Optional[str], available: list[str], default: str) -> str:
    """First requested locale we have messages for, by exact tag then language."""
    for locale in parse_accept_language(header):
        if locale in available:
            return locale
        language = locale.split("_")[0]
        if language in available:
            return language
        for candidate in available:
            if candidate.split("_")[0] == language:
                return candidate
    return default


def get_locale(request: Request) -> str:
    loader = request.app.state.validation_engine.interpolator.loader
    return negotiate_locale(
        request.headers.get("accept-language"),
        loader.available_locales(),
        loader.default_locale,
    )


def get_error_collector(request: Request, locale: str = Depends(get_locale)) -> ErrorCollector:
    """A fresh collector per request, also stored on ``request.state``."""
    collector = ErrorCollector(
        engine=request.app.state.validation_engine,
        locale=locale,
        context=ValidationContext(services=request.app.state.validation_services),
    )
    request.state.error_collector = collector
    return collector
