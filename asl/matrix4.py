"""4x4 matrices for affine and projective 3D transforms, and rotation quaternions."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from numbers import Real
from typing import Union

Vec3 = tuple[float, float, float]
Vec4 = tuple[float, float, float, float]
Axes = Union[str, Sequence[int]]


def _norm(v: Sequence[float]) -> float:
    return math.sqrt(sum(c * c for c in v))


def _normalized(v: Sequence[float]) -> Vec3:
    n = _norm(v)
    return (v[0] / n, v[1] / n, v[2] / n)


def _cross(a: Sequence[float], b: Sequence[float]) -> Vec3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def _add(a: Sequence[float], b: Sequence[float]) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def _vec3(x: float | Sequence[float], y: float | None, z: float | None) -> Vec3:
    if y is None and z is None and isinstance(x, Sequence):
        return (float(x[0]), float(x[1]), float(x[2]))
    if y is None or z is None:
        raise TypeError("expected a 3D vector or three coordinates")
    return (float(x), float(y), float(z))  # type: ignore[arg-type]


def _axis_indices(axes: Axes) -> tuple[int, int, int, bool] | None:
    """Turn ``"XYZ"``/``"XYZ*"`` or a sequence of 3 indices into indices and a fixed-axes flag."""
    if isinstance(axes, str):
        if len(axes) < 3:
            return None
        a0, a1, a2 = (ord(c) - ord("X") for c in axes[:3])
        return a0, a1, a2, len(axes) > 3 and axes[3] == "*"
    if len(axes) < 3:
        return None
    return int(axes[0]), int(axes[1]), int(axes[2]), False


@dataclass(frozen=True)
class Quaternion:
    """A quaternion ``w + xi + yj + zk``, used to represent 3D rotations."""

    w: float
    x: float
    y: float
    z: float

    @staticmethod
    def from_axis_angle(axis: Sequence[float], angle: float) -> Quaternion:
        """Return the rotation of ``angle`` radians around ``axis``."""
        n = _norm(axis)
        if n == 0:
            return Quaternion(1.0, 0.0, 0.0, 0.0)
        s = math.sin(angle / 2) / n
        return Quaternion(math.cos(angle / 2), axis[0] * s, axis[1] * s, axis[2] * s)

    def length(self) -> float:
        """Return the quaternion's norm."""
        return math.sqrt(self.w ** 2 + self.x ** 2 + self.y ** 2 + self.z ** 2)

    def matrix(self) -> Matrix4:
        """Return the rotation matrix equivalent to this quaternion."""
        w, x, y, z = self.w, self.x, self.y, self.z
        n = w * w + x * x + y * y + z * z
        s = 2.0 / n if n else 0.0
        return Matrix4(
            1 - s * (y * y + z * z), s * (x * y - w * z), s * (x * z + w * y), 0.0,
            s * (x * y + w * z), 1 - s * (x * x + z * z), s * (y * z - w * x), 0.0,
            s * (x * z - w * y), s * (y * z + w * x), 1 - s * (x * x + y * y), 0.0,
        )

    def axis_angle(self) -> Vec3:
        """Return the rotation vector: the axis scaled by the rotation angle."""
        w, x, y, z = self.w, self.x, self.y, self.z
        if w < 0:
            w, x, y, z = -w, -x, -y, -z
        sin_half = math.sqrt(x * x + y * y + z * z)
        if sin_half < 1e-12:
            return (0.0, 0.0, 0.0)
        angle = 2 * math.atan2(sin_half, w)
        k = angle / sin_half
        return (x * k, y * k, z * k)


class Matrix4:
    """A row-major 4x4 matrix.

    ``Matrix4()`` is the identity; ``Matrix4(*12 values)`` sets the first three rows
    (the last being ``0 0 0 1``); ``Matrix4(*16 values)`` sets all rows; ``Matrix4(m)`` copies.
    """

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, *args: float | Matrix4) -> None:
        if not args:
            self._a = [[1.0 if i == j else 0.0 for j in range(4)] for i in range(4)]
        elif len(args) == 1 and isinstance(args[0], Matrix4):
            self._a = [list(row) for row in args[0]._a]
        elif len(args) in (12, 16):
            values = [float(v) for v in args]  # type: ignore[arg-type]
            if len(values) == 12:
                values += [0.0, 0.0, 0.0, 1.0]
            self._a = [values[4 * i:4 * i + 4] for i in range(4)]
        else:
            raise TypeError("Matrix4 takes no arguments, a Matrix4, or 12 or 16 numbers")

    # element access

    def __getitem__(self, index: tuple[int, int] | int) -> float | Vec4:
        if isinstance(index, tuple):
            i, j = index
            return self._a[i][j]
        return tuple(self._a[index])  # type: ignore[return-value]

    def __setitem__(self, index: tuple[int, int], value: float) -> None:
        i, j = index
        self._a[i][j] = float(value)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix4):
            return NotImplemented
        return self._a == other._a

    def __repr__(self) -> str:
        return f"Matrix4{tuple(tuple(row) for row in self._a)}"

    # arithmetic

    def __add__(self, other: Matrix4) -> Matrix4:
        if not isinstance(other, Matrix4):
            return NotImplemented
        return Matrix4(*(a + b for ra, rb in zip(self._a, other._a) for a, b in zip(ra, rb)))

    def __sub__(self, other: Matrix4) -> Matrix4:
        if not isinstance(other, Matrix4):
            return NotImplemented
        return Matrix4(*(a - b for ra, rb in zip(self._a, other._a) for a, b in zip(ra, rb)))

    def __mul__(self, other: Matrix4 | float | Sequence[float]):
        """Multiply by a matrix, a scalar, a 4D vector, or a 3D point (affine transform)."""
        if isinstance(other, Matrix4):
            b = other._a
            return Matrix4(*(
                sum(row[k] * b[k][j] for k in range(4))
                for row in self._a for j in range(4)
            ))
        if isinstance(other, Real):
            t = float(other)
            return Matrix4(*(t * v for row in self._a for v in row))
        if isinstance(other, Sequence) and not isinstance(other, str):
            if len(other) == 4:
                return tuple(sum(row[k] * other[k] for k in range(4)) for row in self._a)
            if len(other) == 3:
                return self.transform_point(other)
        return NotImplemented

    def __rmul__(self, other: float) -> Matrix4:
        if isinstance(other, Real):
            return self * other
        return NotImplemented

    # constructors

    @staticmethod
    def from_columns(
        v1: Sequence[float], v2: Sequence[float], v3: Sequence[float], v4: Sequence[float] | None = None
    ) -> Matrix4:
        """Build a matrix from column vectors: 3D columns get a last row ``0 0 0 1``."""
        cols = [v1, v2, v3, v4 if v4 is not None else (0.0, 0.0, 0.0)]
        if all(len(c) == 4 for c in cols):
            return Matrix4(*(c[i] for i in range(4) for c in cols))
        return Matrix4(*(c[i] for i in range(3) for c in cols))

    @staticmethod
    def from_sequence(values: Sequence[float], colmajor: bool = False) -> Matrix4:
        """Build a matrix from 16 values, row-major by default."""
        if len(values) != 16:
            raise ValueError("expected 16 values")
        m = Matrix4(*values)
        return m.transposed() if colmajor else m

    @staticmethod
    def identity() -> Matrix4:
        return Matrix4()

    @staticmethod
    def translate(x: float | Sequence[float], y: float | None = None, z: float | None = None) -> Matrix4:
        """Return a translation by a vector or by three coordinates."""
        tx, ty, tz = _vec3(x, y, z)
        return Matrix4(1, 0, 0, tx, 0, 1, 0, ty, 0, 0, 1, tz)

    @staticmethod
    def scale(x: float | Sequence[float], y: float | None = None, z: float | None = None) -> Matrix4:
        """Return a scale matrix from a vector, three factors, or one uniform factor."""
        if y is None and z is None and not isinstance(x, Sequence):
            y = z = x  # type: ignore[assignment]
        sx, sy, sz = _vec3(x, y, z)
        return Matrix4(sx, 0, 0, 0, 0, sy, 0, 0, 0, 0, sz, 0)

    @staticmethod
    def rotate_x(angle: float) -> Matrix4:
        c, s = math.cos(angle), math.sin(angle)
        return Matrix4(1, 0, 0, 0, 0, c, -s, 0, 0, s, c, 0)

    @staticmethod
    def rotate_y(angle: float) -> Matrix4:
        c, s = math.cos(angle), math.sin(angle)
        return Matrix4(c, 0, s, 0, 0, 1, 0, 0, -s, 0, c, 0)

    @staticmethod
    def rotate_z(angle: float) -> Matrix4:
        c, s = math.cos(angle), math.sin(angle)
        return Matrix4(c, -s, 0, 0, s, c, 0, 0, 0, 0, 1, 0)

    @staticmethod
    def rotate(axis: int | str | Sequence[float], angle: float) -> Matrix4:
        """Rotate around an axis index (0-2), an axis letter ('X', 'Y', 'Z') or an arbitrary vector.

        An unknown axis index or letter gives the identity.
        """
        if isinstance(axis, (int, str)):
            key = axis.upper() if isinstance(axis, str) else axis
            if key in (0, "X"):
                return Matrix4.rotate_x(angle)
            if key in (1, "Y"):
                return Matrix4.rotate_y(angle)
            if key in (2, "Z"):
                return Matrix4.rotate_z(angle)
            return Matrix4()
        return Quaternion.from_axis_angle(axis, angle).matrix()

    @staticmethod
    def rotate_axis_angle(axis_angle: Sequence[float]) -> Matrix4:
        """Rotate by a rotation vector whose length is the angle."""
        return Matrix4.rotate(axis_angle, _norm(axis_angle))

    @staticmethod
    def rotate_e(angles: Sequence[float], axes: Axes) -> Matrix4:
        """Build a rotation from Euler angles for axes such as ``"XYZ"`` (moving axes) or ``"XYZ*"`` (fixed axes).

        The result for ``a0 a1 a2`` is ``R[a0](angles[0]) * R[a1](angles[1]) * R[a2](angles[2])``.
        """
        spec = _axis_indices(axes)
        if spec is None:
            return Matrix4()
        a0, a1, a2, fixed = spec
        r = tuple(angles)
        if fixed:
            r, (a0, a2) = r[::-1], (a2, a0)
        return Matrix4.rotate(a0, r[0]) * Matrix4.rotate(a1, r[1]) * Matrix4.rotate(a2, r[2])

    @staticmethod
    def orthonormal_base(vec: Sequence[float]) -> Matrix4:
        """Return a basis with ``vec`` (normalised) as Z and two perpendicular unit axes."""
        w = _normalized(vec)
        helper = (1.0, 0.0, 0.0) if abs(w[0]) < 0.7 else (0.0, 1.0, 0.0)
        u = _normalized(_cross(w, helper))
        v = _normalized(_cross(w, u))
        return Matrix4.from_columns(u, v, w)

    # queries and transforms

    def rows(self) -> tuple[Vec4, Vec4, Vec4, Vec4]:
        """Return the four rows as tuples."""
        return tuple(tuple(row) for row in self._a)  # type: ignore[return-value]

    def transposed(self) -> Matrix4:
        return Matrix4(*(self._a[i][j] for j in range(4) for i in range(4)))

    def trace(self) -> float:
        return sum(self._a[i][i] for i in range(4))

    def transform_point(self, p: Sequence[float]) -> Vec3:
        """Apply this affine transform to a 3D point (implicit w = 1)."""
        a = self._a
        return tuple(a[i][0] * p[0] + a[i][1] * p[1] + a[i][2] * p[2] + a[i][3] for i in range(3))  # type: ignore

    def transform_projective(self, p: Sequence[float]) -> Vec3:
        """Apply this projective transform to a 3D point, dividing by the resulting w."""
        a = self._a
        iw = 1 / (a[3][0] * p[0] + a[3][1] * p[1] + a[3][2] * p[2] + a[3][3])
        x, y, z = self.transform_point(p)
        return (x * iw, y * iw, z * iw)

    def transform_vector(self, p: Sequence[float]) -> Vec3:
        """Multiply a 3D vector by the top-left 3x3 block (no translation)."""
        a = self._a
        return tuple(a[i][0] * p[0] + a[i][1] * p[1] + a[i][2] * p[2] for i in range(3))  # type: ignore

    def _euler(self, a0: int, a1: int, a2: int) -> Vec3:
        def at(i: int, j: int) -> float:
            return self._a[i][j]

        if a0 != a2:
            s = -1.0 if (a1 - a0 + 3) % 3 == 1 else 1.0
            if abs(at(a0, a2)) < 1:
                r1 = math.asin(-s * at(a0, a2))
                r2 = math.atan2(s * at(a1, a2), at(a2, a2))
                r0 = math.atan2(s * at(a0, a1), at(a0, a0))
            else:
                r1 = -at(a0, a2) * s * (math.pi / 2)
                r2 = at(a0, a2) * math.atan2(-s * at(a1, a0), at(a1, a1))
                r0 = 0.0
        else:
            k = 3 - a0 - a1
            s = -1.0 if (a1 - a0 + 3) % 3 == 2 else 1.0
            if abs(at(a0, a0)) < 1:
                r1 = math.acos(at(a0, a0))
                r2 = math.atan2(at(a1, a0), -s * at(k, a0))
                r0 = math.atan2(at(a0, a1), s * at(a0, k))
            else:
                r1 = math.pi if at(a0, a0) < 0 else 0.0
                r2 = at(a0, a0) * math.atan2(-s * at(a1, k), at(a1, a1))
                r0 = 0.0
        return (r2, r1, r0)

    def euler_angles(self, axes: Axes) -> Vec3:
        """Return the Euler angles of this rotation for the same axes notation as ``rotate_e``."""
        spec = _axis_indices(axes)
        if spec is None:
            return (0.0, 0.0, 0.0)
        a0, a1, a2, fixed = spec
        if fixed:
            return self._euler(a2, a1, a0)[::-1]
        return self._euler(a0, a1, a2)

    def _minor(self, row: int, col: int) -> float:
        m = [[v for j, v in enumerate(r) if j != col] for i, r in enumerate(self._a) if i != row]
        return (
            m[0][0] * (m[1][1] * m[2][2] - m[1][2] * m[2][1])
            - m[0][1] * (m[1][0] * m[2][2] - m[1][2] * m[2][0])
            + m[0][2] * (m[1][0] * m[2][1] - m[1][1] * m[2][0])
        )

    def det(self) -> float:
        return sum((-1) ** j * self._a[0][j] * self._minor(0, j) for j in range(4))

    def inverse(self) -> Matrix4:
        """Return the inverse; raises ZeroDivisionError for a singular matrix."""
        d = self.det()
        inv_d = 1.0 / d
        return Matrix4(*(
            (-1) ** (i + j) * self._minor(j, i) * inv_d for i in range(4) for j in range(4)
        ))

    def rotation(self) -> Quaternion:
        """Return the rotation part of this matrix as a quaternion."""
        def at(i: int, j: int) -> float:
            return self._a[i][j]

        t = at(0, 0) + at(1, 1) + at(2, 2)
        if t >= 0:
            r = math.sqrt(1 + t)
            s = 0.5 / r
            return Quaternion(0.5 * r, (at(2, 1) - at(1, 2)) * s, (at(0, 2) - at(2, 0)) * s, (at(1, 0) - at(0, 1)) * s)
        if at(1, 1) > at(0, 0) and at(1, 1) >= at(2, 2):
            r = math.sqrt(1 + at(1, 1) - at(2, 2) - at(0, 0))
            s = 0.5 / r
            return Quaternion((at(0, 2) - at(2, 0)) * s, (at(0, 1) + at(1, 0)) * s, 0.5 * r, (at(1, 2) + at(2, 1)) * s)
        if at(2, 2) > at(0, 0):
            r = math.sqrt(1 + at(2, 2) - at(0, 0) - at(1, 1))
            s = 0.5 / r
            return Quaternion((at(1, 0) - at(0, 1)) * s, (at(2, 0) + at(0, 2)) * s, (at(1, 2) + at(2, 1)) * s, 0.5 * r)
        r = math.sqrt(1 + at(0, 0) - at(1, 1) - at(2, 2))
        s = 0.5 / r
        return Quaternion((at(2, 1) - at(1, 2)) * s, 0.5 * r, (at(0, 1) + at(1, 0)) * s, (at(2, 0) + at(0, 2)) * s)

    def axis_angle(self) -> Vec3:
        """Return the rotation part as a rotation vector."""
        return self.rotation().axis_angle()

    def column3(self, i: int) -> Vec3:
        return (self._a[0][i], self._a[1][i], self._a[2][i])

    def column(self, i: int) -> Vec4:
        return (self._a[0][i], self._a[1][i], self._a[2][i], self._a[3][i])

    def translation(self) -> Vec3:
        return self.column3(3)

    def set_translation(self, t: Sequence[float]) -> Matrix4:
        """Set the translation column in place and return this matrix."""
        for i in range(3):
            self._a[i][3] = float(t[i])
        return self

    def norm_sq(self) -> float:
        return sum(v * v for row in self._a for v in row)

    def norm(self) -> float:
        return math.sqrt(self.norm_sq())


def orthonormalize(m: Matrix4) -> Matrix4:
    """Return an orthonormal approximation of a transform, keeping its translation."""
    v1 = _normalized(m.column3(0))
    v2 = _normalized(m.column3(1))
    v3 = _normalized(m.column3(2))
    v1, v2, v3 = _add(v1, _cross(v2, v3)), _add(v2, _cross(v3, v1)), _add(v3, _cross(v1, v2))
    x = _normalized(_cross(v2, v3))
    y = _normalized(_cross(v3, x))
    z = _normalized(_cross(x, y))
    return Matrix4.from_columns(x, y, z, m.column3(3))