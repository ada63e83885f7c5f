"""Message resolution — resource bundles, expressions and the interpolator.

Usage:
    from formguard.messages import MessageInterpolator

    interpolator = MessageInterpolator()
    interpolator.interpolate("{constraints.size}", {"min": 2, "max": 10}, "pt_BR")
    interpolator.message("customer.email.taken", {"0": email}, default="taken")
"""

from formguard.messages.bundle import BundleLoader, ResourceBundle, normalize_locale
from formguard.messages.formatter import Formatter
from formguard.messages.interpolator import VALIDATED_VALUE, MessageInterpolator, escape

__all__ = [
    "BundleLoader",
    "ResourceBundle",
    "normalize_locale",
    "Formatter",
    "MessageInterpolator",
    "VALIDATED_VALUE",
    "escape",
]
