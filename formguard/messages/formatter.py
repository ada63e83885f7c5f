"""Printf-style formatter exposed to message expressions as ``formatter``.

Supports the conversions message authors reach for in practice::

    ${formatter.format('%1$.2f', validatedValue)}
    ${formatter.format('%,d items', count)}
    ${formatter.format('%-10s|', name)}

Conversions: s S d o x X e E f g G b B c C % n. Flags: - + space 0 , ( #.
Explicit argument indexes (``%2$s``) and ``%<s`` (previous argument) work.
"""

import re
from decimal import Decimal
from typing import Any

from formguard.exceptions import ExpressionError

_SPECIFIER = re.compile(
    r"%(?:(?P<index>\d+)\$|(?P<previous><))?"
    r"(?P<flags>[-#+ 0,(]*)"
    r"(?P<width>\d+)?"
    r"(?:\.(?P<precision>\d+))?"
    r"(?P<conversion>[a-zA-Z%])"
)

_INTEGER_TYPES = {"d": "d", "o": "o", "x": "x", "X": "X"}
_FLOAT_TYPES = {"e": "e", "E": "E", "f": "f", "g": "g", "G": "G"}


def _text(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class Formatter:
    """Formats strings with printf-style specifiers."""

    # Methods message expressions may call
    __expression_methods__ = frozenset({"format"})

    def format(self, fmt: str, *args: Any) -> str:
        """Format ``args`` according to ``fmt``.

        Raises:
            ExpressionError: unknown conversion, missing argument or a value
                that does not fit the conversion
        """
        out = []
        position = 0
        ordinary_index = 0
        last_index = None

        for match in _SPECIFIER.finditer(fmt):
            out.append(fmt[position:match.start()])
            position = match.end()
            conversion = match.group("conversion")

            if conversion == "%":
                out.append(self._pad("%", match.group("flags"), match.group("width")))
                continue
            if conversion == "n":
                out.append("\n")
                continue

            if match.group("previous"):
                if last_index is None:
                    raise ExpressionError(f"'%<' used before any argument in '{fmt}'")
                index = last_index
            elif match.group("index"):
                index = int(match.group("index")) - 1
            else:
                index = ordinary_index
                ordinary_index += 1

            if index < 0 or index >= len(args):
                raise ExpressionError(f"Missing format argument for '{match.group(0)}' in '{fmt}'")
            last_index = index

            out.append(self._convert(args[index], match))

        out.append(fmt[position:])
        return "".join(out)

    # ── Conversions ──

    def _convert(self, value: Any, match: re.Match) -> str:
        conversion = match.group("conversion")
        flags = match.group("flags")
        width = match.group("width")
        precision = match.group("precision")
        lower = conversion.lower()

        if lower in ("s", "b", "c"):
            if lower == "b":
                text = "false" if value is None or value is False else "true"
            elif lower == "c":
                text = self._char(value)
            else:
                text = _text(value)
            if precision is not None:
                text = text[: int(precision)]
            if conversion.isupper():
                text = text.upper()
            return self._pad(text, flags, width)

        if conversion in _INTEGER_TYPES:
            return self._format_number(self._integer(value), _INTEGER_TYPES[conversion], flags, width, None)

        if conversion in _FLOAT_TYPES:
            number = self._float(value)
            if precision is None:
                precision = "6"
            return self._format_number(number, _FLOAT_TYPES[conversion], flags, width, precision)

        raise ExpressionError(f"Unsupported format conversion '%{conversion}'")

    def _format_number(self, number, type_char: str, flags: str, width, precision) -> str:
        negative = number < 0
        parenthesize = "(" in flags and negative
        if parenthesize:
            number = -number

        spec = ""
        if "-" in flags:
            spec += "<"
        if "+" in flags and not parenthesize:
            spec += "+"
        elif " " in flags and not parenthesize:
            spec += " "
        if "#" in flags and type_char in ("o", "x", "X"):
            spec += "#"
        if "0" in flags and "-" not in flags:
            spec += "0"
        if width and not parenthesize:
            spec += width
        if "," in flags and type_char in ("d", "f", "e", "E", "g", "G"):
            spec += ","
        if precision is not None:
            spec += "." + precision
        spec += type_char

        try:
            text = format(number, spec)
        except (ValueError, TypeError, ArithmeticError) as e:
            raise ExpressionError(f"Cannot format {number!r} with '%{spec}': {e}") from None

        if parenthesize:
            text = self._pad(f"({text})", flags.replace("0", ""), width)
        return text

    # ── Coercion ──

    def _integer(self, value: Any) -> int:
        if isinstance(value, bool) or value is None:
            raise ExpressionError(f"Integer conversion needs a number, got {_text(value)}")
        if isinstance(value, int):
            return value
        if isinstance(value, (float, Decimal)):
            try:
                integral = int(value)
            except (ValueError, OverflowError):
                raise ExpressionError(f"Integer conversion needs a finite number, got {value!r}") from None
            if value == integral:
                return integral
        raise ExpressionError(f"Integer conversion needs an integral number, got {value!r}")

    def _float(self, value: Any):
        if isinstance(value, bool) or value is None:
            raise ExpressionError(f"Floating point conversion needs a number, got {_text(value)}")
        if isinstance(value, Decimal):
            return value
        if isinstance(value, (int, float)):
            return float(value)
        raise ExpressionError(f"Floating point conversion needs a number, got {value!r}")

    def _char(self, value: Any) -> str:
        if isinstance(value, str) and len(value) == 1:
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return chr(value)
            except (ValueError, OverflowError):
                raise ExpressionError(f"{value} is not a valid character code") from None
        raise ExpressionError(f"Character conversion needs a single character, got {value!r}")

    def _pad(self, text: str, flags: str, width) -> str:
        if not width:
            return text
        return text.ljust(int(width)) if "-" in flags else text.rjust(int(width))
