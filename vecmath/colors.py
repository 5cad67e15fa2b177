import numpy as np

from vecmath.tuples import Tuple2, Tuple3, Tuple4, _component

_F = np.dtype(np.float32)
_D = np.dtype(np.float64)


class Color:
    """Conversion between [0, 1] float channels and 8-bit channels."""
    __slots__ = ()

    @classmethod
    def from_rgb8(cls, *channels: int) -> "Color":
        """Build a color from 0-255 integer channels."""
        return cls(np.asarray(channels, dtype=np.float64) / 255.0)

    def to_rgb8(self) -> tuple:
        """Channels as 0-255 integers, clamped and rounded to nearest."""
        values = np.clip(np.rint(self.data.astype(np.float64) * 255.0), 0, 255)
        return tuple(int(v) for v in values)


class Color3(Color, Tuple3):
    __slots__ = ()
    r = _component(0, "red channel")
    g = _component(1, "green channel")
    b = _component(2, "blue channel")


class Color4(Color, Tuple4):
    __slots__ = ()
    r = _component(0, "red channel")
    g = _component(1, "green channel")
    b = _component(2, "blue channel")
    a = _component(3, "alpha channel")


class Color3f(Color3):
    __slots__ = ()
    _dtype = _F


class Color3d(Color3):
    __slots__ = ()
    _dtype = _D


class Color4f(Color4):
    __slots__ = ()
    _dtype = _F


class Color4d(Color4):
    __slots__ = ()
    _dtype = _D


class TexCoord2f(Tuple2):
    __slots__ = ()
    _dtype = _F


class TexCoord2d(Tuple2):
    __slots__ = ()
    _dtype = _D


class TexCoord3f(Tuple3):
    __slots__ = ()
    _dtype = _F


class TexCoord3d(Tuple3):
    __slots__ = ()
    _dtype = _D
