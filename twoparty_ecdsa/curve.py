"""Arithmetic on the secp256k1 curve: scalars modulo the group order and points."""

from __future__ import annotations

import hashlib
import secrets
from functools import lru_cache

P = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F
ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
GX = 0x79BE667EF9DCBBAC55A06295CE870B07029BFCDB2DCE28D959F2815B16F81798
GY = 0x483ADA7726A3C4655DA4FBFC0E1108A8FD17B448A68554199C47D08FFB10D4B8
_B = 7

_JacobianPoint = tuple[int, int, int]
_JAC_INFINITY: _JacobianPoint = (0, 1, 0)


class Scalar:
    """An element of the scalar field of secp256k1 (integers modulo the order)."""

    __slots__ = ("_value",)

    def __init__(self, value: int | Scalar = 0) -> None:
        self._value = int(value) % ORDER

    @classmethod
    def random(cls) -> Scalar:
        """A uniformly random non-zero scalar."""
        return cls(secrets.randbelow(ORDER - 1) + 1)

    @classmethod
    def zero(cls) -> Scalar:
        return cls(0)

    def invert(self) -> Scalar:
        """The multiplicative inverse; raises ZeroDivisionError for zero."""
        if self._value == 0:
            raise ZeroDivisionError("zero scalar has no inverse")
        return Scalar(pow(self._value, -1, ORDER))

    def to_int(self) -> int:
        return self._value

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    @staticmethod
    def _coerce(other: object) -> int | None:
        if isinstance(other, Scalar):
            return other._value
        if isinstance(other, int) and not isinstance(other, bool):
            return other
        return None

    def __add__(self, other: object) -> Scalar:
        value = self._coerce(other)
        if value is None:
            return NotImplemented
        return Scalar(self._value + value)

    __radd__ = __add__

    def __sub__(self, other: object) -> Scalar:
        value = self._coerce(other)
        if value is None:
            return NotImplemented
        return Scalar(self._value - value)

    def __rsub__(self, other: object) -> Scalar:
        value = self._coerce(other)
        if value is None:
            return NotImplemented
        return Scalar(value - self._value)

    def __mul__(self, other: object) -> Scalar:
        value = self._coerce(other)
        if value is None:
            return NotImplemented
        return Scalar(self._value * value)

    def __rmul__(self, other: object) -> Scalar:
        return self.__mul__(other)

    def __neg__(self) -> Scalar:
        return Scalar(-self._value)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Scalar):
            return self._value == other._value
        return NotImplemented

    def __hash__(self) -> int:
        return hash(("Scalar", self._value))

    def __repr__(self) -> str:
        return f"Scalar({self._value:#x})"


def _sqrt_mod_p(value: int) -> int | None:
    root = pow(value, (P + 1) // 4, P)
    return root if root * root % P == value % P else None


def _on_curve(x: int, y: int) -> bool:
    return 0 <= x < P and 0 <= y < P and (y * y - x * x * x - _B) % P == 0


def _jac_double(pt: _JacobianPoint) -> _JacobianPoint:
    x, y, z = pt
    if z == 0 or y == 0:
        return _JAC_INFINITY
    yy = y * y % P
    s = 4 * x * yy % P
    m = 3 * x * x % P
    x3 = (m * m - 2 * s) % P
    y3 = (m * (s - x3) - 8 * yy * yy) % P
    z3 = 2 * y * z % P
    return (x3, y3, z3)


def _jac_add(p1: _JacobianPoint, p2: _JacobianPoint) -> _JacobianPoint:
    if p1[2] == 0:
        return p2
    if p2[2] == 0:
        return p1
    x1, y1, z1 = p1
    x2, y2, z2 = p2
    z1z1 = z1 * z1 % P
    z2z2 = z2 * z2 % P
    u1 = x1 * z2z2 % P
    u2 = x2 * z1z1 % P
    s1 = y1 * z2 * z2z2 % P
    s2 = y2 * z1 * z1z1 % P
    if u1 == u2:
        if s1 != s2:
            return _JAC_INFINITY
        return _jac_double(p1)
    h = (u2 - u1) % P
    r = (s2 - s1) % P
    hh = h * h % P
    hhh = h * hh % P
    v = u1 * hh % P
    x3 = (r * r - hhh - 2 * v) % P
    y3 = (r * (v - x3) - s1 * hhh) % P
    z3 = h * z1 * z2 % P
    return (x3, y3, z3)


class Point:
    """A point on secp256k1 in affine coordinates, or the point at infinity."""

    __slots__ = ("_x", "_y")

    def __init__(self, x: int, y: int) -> None:
        if not _on_curve(x, y):
            raise ValueError("point is not on the secp256k1 curve")
        self._x: int | None = x
        self._y: int | None = y

    @classmethod
    def _from_affine(cls, coords: tuple[int, int] | None) -> Point:
        point = object.__new__(cls)
        if coords is None:
            point._x = point._y = None
        else:
            point._x, point._y = coords
        return point

    @classmethod
    def _from_jacobian(cls, pt: _JacobianPoint) -> Point:
        x, y, z = pt
        if z == 0:
            return cls._from_affine(None)
        z_inv = pow(z, -1, P)
        z_inv2 = z_inv * z_inv % P
        return cls._from_affine((x * z_inv2 % P, y * z_inv2 * z_inv % P))

    def _jacobian(self) -> _JacobianPoint:
        if self._x is None:
            return _JAC_INFINITY
        return (self._x, self._y, 1)

    @classmethod
    def generator(cls) -> Point:
        return cls._from_affine((GX, GY))

    @classmethod
    def base_point2(cls) -> Point:
        """A second generator whose discrete log relative to G is unknown."""
        return _base_point2()

    @classmethod
    def infinity(cls) -> Point:
        return cls._from_affine(None)

    @classmethod
    def from_bytes(cls, data: bytes) -> Point:
        """Decode a SEC1 encoding (compressed, uncompressed, or 0x00 for infinity)."""
        data = bytes(data)
        if data == b"\x00":
            return cls.infinity()
        if len(data) == 33 and data[0] in (2, 3):
            x = int.from_bytes(data[1:], "big")
            if x >= P:
                raise ValueError("x coordinate out of range")
            y = _sqrt_mod_p((x * x * x + _B) % P)
            if y is None:
                raise ValueError("no curve point with this x coordinate")
            if y % 2 != data[0] % 2:
                y = P - y
            return cls(x, y)
        if len(data) == 65 and data[0] == 4:
            return cls(int.from_bytes(data[1:33], "big"), int.from_bytes(data[33:], "big"))
        raise ValueError("malformed point encoding")

    def is_zero(self) -> bool:
        return self._x is None

    def x_coord(self) -> int | None:
        return self._x

    def y_coord(self) -> int | None:
        return self._y

    def to_bytes(self, compressed: bool = True) -> bytes:
        if self._x is None:
            return b"\x00"
        x_bytes = self._x.to_bytes(32, "big")
        if compressed:
            return bytes([2 + (self._y & 1)]) + x_bytes
        return b"\x04" + x_bytes + self._y.to_bytes(32, "big")

    def __add__(self, other: object) -> Point:
        if not isinstance(other, Point):
            return NotImplemented
        return Point._from_jacobian(_jac_add(self._jacobian(), other._jacobian()))

    def __neg__(self) -> Point:
        if self._x is None:
            return self
        return Point._from_affine((self._x, (P - self._y) % P))

    def __sub__(self, other: object) -> Point:
        if not isinstance(other, Point):
            return NotImplemented
        return self + (-other)

    def __mul__(self, other: object) -> Point:
        if isinstance(other, Scalar):
            k = other.to_int()
        elif isinstance(other, int) and not isinstance(other, bool):
            k = other % ORDER
        else:
            return NotImplemented
        result = _JAC_INFINITY
        addend = self._jacobian()
        while k:
            if k & 1:
                result = _jac_add(result, addend)
            addend = _jac_double(addend)
            k >>= 1
        return Point._from_jacobian(result)

    __rmul__ = __mul__

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Point):
            return self._x == other._x and self._y == other._y
        return NotImplemented

    def __hash__(self) -> int:
        return hash(("Point", self._x, self._y))

    def __repr__(self) -> str:
        if self._x is None:
            return "Point.infinity()"
        return f"Point({self._x:#x}, {self._y:#x})"


@lru_cache(maxsize=1)
def _base_point2() -> Point:
    seed = hashlib.sha256(Point.generator().to_bytes(compressed=False)).digest()
    counter = 0
    while True:
        digest = hashlib.sha256(seed + counter.to_bytes(4, "big")).digest()
        x = int.from_bytes(digest, "big") % P
        y = _sqrt_mod_p((x * x * x + _B) % P)
        if y is not None:
            return Point(x, y if y % 2 == 0 else P - y)
        counter += 1