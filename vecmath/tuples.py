import numpy as np
from numpy import asarray as np_asarray
from numpy import ndarray
from typing import Union, Iterable, Iterator, List

from vecmath.utils import hash_components, format_components


def _component(index: int, doc: str) -> property:
    def getter(self): return self.data[index]
    def setter(self, value): self.data[index] = value
    return property(getter, setter, doc=doc)


class Components:
    """
    Fixed-size storage of floats: construction, access, equality, hashing
    and printing, with no arithmetic.

    Concrete classes fix the arity (`_size`) and the precision (`_dtype`).
    Operations defined on subclasses return a new value unless `inplace=True`
    is given, in which case the receiver is overwritten and returned. Results
    are always computed into a temporary first, so an operand may be the
    receiver itself.
    """
    __slots__ = ("data",)
    _size: int = 0
    _dtype: np.dtype = np.dtype(np.float64)

    def __init__(self, *args):
        if not args:
            self.data = np.zeros(self._size, dtype=self._dtype)
        elif len(args) == 1:
            self.data = self._coerce(args[0]).copy()
        elif len(args) == self._size:
            self.data = np.array(args, dtype=self._dtype)
        else:
            raise ValueError(
                f"{self.__class__.__name__} takes {self._size} components, got {len(args)}")

    @classmethod
    def from_unchecked(cls, data: ndarray) -> "Components":
        """Wrap an array without copying or checking it. Useful when the shape and dtype are known to be right."""
        instance = object.__new__(cls)
        instance.data = data
        return instance

    def _coerce(self, other: Union["Components", Iterable[float]]) -> ndarray:
        """Return `other` as an array of this value's shape and precision."""
        if isinstance(other, Components):
            other = other.data
        arr = np_asarray(other, dtype=self._dtype)
        if arr.shape != (self._size,):
            raise ValueError(
                f"{self.__class__.__name__} needs {self._size} components, got shape {arr.shape}")
        return arr

    def _result(self, values: ndarray, inplace: bool) -> "Components":
        if inplace:
            self.data[:] = values
            return self
        return self.from_unchecked(np_asarray(values, dtype=self._dtype))

    #########
    # Setters and getters
    #

    def set(self, *args) -> "Components":
        """Overwrite the components from values, a sequence, or another instance."""
        if len(args) == 1:
            self.data[:] = self._coerce(args[0])
        else:
            self.data[:] = self._coerce(args)
        return self

    def get(self) -> List[float]:
        """Components as a list of Python floats."""
        return self.data.tolist()

    def to_array(self) -> ndarray:
        """A copy of the components as a numpy array."""
        return self.data.copy()

    def copy(self) -> "Components":
        return self.from_unchecked(self.data.copy())

    def epsilon_equals(self, other, epsilon: float) -> bool:
        """True if every component differs from `other` by at most epsilon."""
        return bool(np.all(np.abs(self.data - self._coerce(other)) <= epsilon))

    #########
    # Dunder methods
    #

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator:
        return iter(self.data.tolist())

    def __getitem__(self, index):
        return self.data[index]

    def __setitem__(self, index, value) -> None:
        self.data[index] = value

    def __eq__(self, other: object) -> bool:
        """
        Bitwise equality of the components; `other` must be the same class.
        """
        if other.__class__ is not self.__class__:
            return False
        return self.data.tobytes() == other.data.tobytes()

    def __ne__(self, other: object) -> bool:
        return not self.__eq__(other)

    def __hash__(self) -> int:
        return hash_components(self.data)

    def __str__(self) -> str:
        return format_components(self.data)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}{format_components(self.data)}"

    def __copy__(self) -> "Components":
        return self.copy()

    def __deepcopy__(self, memo) -> "Components":
        # components are numeric, so shallow vs deep is effectively the same here
        return self.copy()

    def __reduce__(self):
        return (self.__class__, (self.data.copy(),))


class Tuple(Components):
    """
    Fixed-size bag of floats with element-wise arithmetic.
    """
    __slots__ = ()

    #########
    # Arithmetic
    #

    def add(self, other, *, inplace: bool = False) -> "Tuple":
        return self._result(self.data + self._coerce(other), inplace)

    def sub(self, other, *, inplace: bool = False) -> "Tuple":
        return self._result(self.data - self._coerce(other), inplace)

    def negate(self, *, inplace: bool = False) -> "Tuple":
        return self._result(-self.data, inplace)

    def scale(self, s: float, *, inplace: bool = False) -> "Tuple":
        return self._result(self.data * s, inplace)

    def scale_add(self, s: float, other, *, inplace: bool = False) -> "Tuple":
        """s * self + other"""
        return self._result(self.data * s + self._coerce(other), inplace)

    def absolute(self, *, inplace: bool = False) -> "Tuple":
        return self._result(np.abs(self.data), inplace)

    def clamp(self, minimum: float, maximum: float, *, inplace: bool = False) -> "Tuple":
        """Clamp every component into [minimum, maximum]."""
        values = np.maximum(self.data, minimum)
        values = np.minimum(values, maximum)
        return self._result(values, inplace)

    def clamp_min(self, minimum: float, *, inplace: bool = False) -> "Tuple":
        return self._result(np.maximum(self.data, minimum), inplace)

    def clamp_max(self, maximum: float, *, inplace: bool = False) -> "Tuple":
        return self._result(np.minimum(self.data, maximum), inplace)

    def interpolate(self, other, alpha: float, *, inplace: bool = False) -> "Tuple":
        """Linear interpolation (1 - alpha) * self + alpha * other."""
        beta = 1.0 - alpha
        return self._result(beta * self.data + alpha * self._coerce(other), inplace)

    #########
    # Operators
    #

    def __add__(self, other):
        try:
            return self.add(other)
        except (TypeError, ValueError):
            return NotImplemented

    def __sub__(self, other):
        try:
            return self.sub(other)
        except (TypeError, ValueError):
            return NotImplemented

    def __neg__(self):
        return self.negate()

    def __mul__(self, s):
        if not isinstance(s, (int, float, np.number)):
            return NotImplemented
        return self.scale(s)

    __rmul__ = __mul__

    def __truediv__(self, s):
        if not isinstance(s, (int, float, np.number)):
            return NotImplemented
        return self._result(self.data / s, False)

    def __abs__(self):
        return self.absolute()


class Tuple2(Tuple):
    __slots__ = ()
    _size = 2
    x = _component(0, "first component")
    y = _component(1, "second component")


class Tuple3(Tuple):
    __slots__ = ()
    _size = 3
    x = _component(0, "first component")
    y = _component(1, "second component")
    z = _component(2, "third component")


class Tuple4(Tuple):
    __slots__ = ()
    _size = 4
    x = _component(0, "first component")
    y = _component(1, "second component")
    z = _component(2, "third component")
    w = _component(3, "fourth component")
