from __future__ import annotations

from imageoverlay.errors import InvalidValueError

COLOR_MAX = 255
ALPHA_MAX = 127  # 0 = opaque, 127 = fully transparent


class Color:
    """RGB colour with a 7-bit alpha channel, validated on every write."""

    __hash__ = None  # mutable

    def __init__(self, red: int = 0, green: int = 0, blue: int = 0, alpha: int = 0):
        self.red = red
        self.green = green
        self.blue = blue
        self.alpha = alpha

    @property
    def red(self) -> int:
        return self._red

    @red.setter
    def red(self, value: int) -> None:
        self.validate_color(value)
        self._red = value

    @property
    def green(self) -> int:
        return self._green

    @green.setter
    def green(self, value: int) -> None:
        self.validate_color(value)
        self._green = value

    @property
    def blue(self) -> int:
        return self._blue

    @blue.setter
    def blue(self, value: int) -> None:
        self.validate_color(value)
        self._blue = value

    @property
    def alpha(self) -> int:
        return self._alpha

    @alpha.setter
    def alpha(self, value: int) -> None:
        self.validate_alpha(value)
        self._alpha = value

    @staticmethod
    def validate_color(value: int) -> bool:
        _require_int(value)
        if 0 <= value <= COLOR_MAX:
            return True
        raise InvalidValueError(
            f"color component out of range: expected an integer between 0 and {COLOR_MAX}, got {value}"
        )

    @staticmethod
    def validate_alpha(value: int) -> bool:
        _require_int(value)
        if 0 <= value <= ALPHA_MAX:
            return True
        raise InvalidValueError(
            f"alpha out of range: expected an integer between 0 and {ALPHA_MAX}, got {value}"
        )

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self._red, self._green, self._blue, self._alpha)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Color):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __repr__(self) -> str:
        r, g, b, a = self.as_tuple()
        return f"Color(red={r}, green={g}, blue={b}, alpha={a})"


def _require_int(value) -> None:
    # bool is an int subclass; True/False are not colour components
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidValueError(f"expected an integer, got {type(value).__name__}")
