import itertools
import numpy as np
from bnrevise.errors import InvalidArgumentError


class Tensor:
    """
    A dense multi-dimensional table of doubles stored in row-major order.

    For dimensions d1, ..., dn the flat position of the entry [i1, ..., in] is
        offset = i1 * f1 + ... + in * fn
    where fn = 1 and fj = d(j+1) * ... * dn.
    Every valid index vector maps to exactly one offset in [0, d1 * ... * dn) and vice versa.

    The data lives in a numpy array (self.values) whose shape is the tuple of dimensions,
     so numpy's own row-major layout gives us the bijection for free;
     offset_of and indices_of make it explicit.
    """

    def __init__(self, dimensions, data=None):
        """
        dimensions: a non-empty sequence of positive integers
        data: optional, either a flat sequence of d1 * ... * dn numbers (in row-major order)
            or an array already shaped as `dimensions`; if omitted the table is filled with zeros
        """
        dimensions = tuple(int(d) for d in dimensions)
        if len(dimensions) == 0:
            raise InvalidArgumentError("A tensor needs at least one dimension")
        if any(d <= 0 for d in dimensions):
            raise InvalidArgumentError(f"Dimension sizes must be positive integers, got {dimensions}")
        self.dimensions = dimensions
        # fj = d(j+1) * ... * dn
        factors = []
        production = 1
        for d in reversed(dimensions):
            factors.append(production)
            production *= d
        self.factors = tuple(reversed(factors))
        if data is None:
            self.values = np.zeros(dimensions, dtype=float)
        else:
            data = np.array(data, dtype=float)
            if data.size != production:
                raise InvalidArgumentError(
                    f"I need {production} entries for dimensions {dimensions}, got {data.size}")
            self.values = data.reshape(dimensions)

    @property
    def num_dimensions(self):
        return len(self.dimensions)

    @property
    def size(self):
        """The number of entries"""
        return self.values.size

    def offset_of(self, indices) -> int:
        """Return the flat (row-major) position of an index vector"""
        indices = tuple(indices)
        if len(indices) != len(self.dimensions):
            raise IndexError(f"I need {len(self.dimensions)} indices, got {len(indices)}")
        offset = 0
        for idx, d, f in zip(indices, self.dimensions, self.factors):
            if idx < 0 or idx >= d:
                raise IndexError(f"Index {idx} out of bounds for a dimension of size {d}")
            offset += idx * f
        return offset

    def indices_of(self, offset: int) -> tuple:
        """Return the index vector stored at a flat (row-major) position"""
        if offset < 0 or offset >= self.size:
            raise IndexError(f"Offset {offset} out of bounds for a tensor with {self.size} entries")
        indices = [0] * len(self.dimensions)
        for i in range(len(self.dimensions) - 1, -1, -1):
            indices[i] = offset % self.dimensions[i]
            offset //= self.dimensions[i]
        return tuple(indices)

    def get(self, indices) -> float:
        return float(self.values.flat[self.offset_of(indices)])

    def set(self, indices, value: float):
        self.values.flat[self.offset_of(indices)] = value

    def __getitem__(self, indices):
        return self.get(indices)

    def __setitem__(self, indices, value):
        self.set(indices, value)

    def iter_indices(self):
        """Enumerate all index vectors in offset order"""
        return itertools.product(*(range(d) for d in self.dimensions))

    def sum(self) -> float:
        return float(np.sum(self.values))

    def conditional_sum(self, partial: dict) -> float:
        """
        Return the sum of the entries that agree with a partial assignment.

        partial: dict mapping a dimension (0-based position) to the index that dimension must take
        """
        slicer = [slice(None)] * len(self.dimensions)
        for dim, idx in partial.items():
            if dim < 0 or dim >= len(self.dimensions):
                raise IndexError(f"Dimension {dim} out of bounds")
            if idx < 0 or idx >= self.dimensions[dim]:
                raise IndexError(f"Index {idx} out of bounds for dimension {dim}")
            slicer[dim] = idx
        return float(np.sum(self.values[tuple(slicer)]))

    def copy(self) -> 'Tensor':
        return Tensor(self.dimensions, self.values.copy())

    def __eq__(self, other):
        if not isinstance(other, Tensor):
            return NotImplemented
        return self.dimensions == other.dimensions and np.array_equal(self.values, other.values)

    def __repr__(self):
        return f"Tensor(dimensions={self.dimensions})"

    def __str__(self):
        return ' '.join(str(v) for v in self.values.flatten())


def didactic_marginal_values(values, scope, keep):
    """
    Sum out every axis of `values` whose name is not in `keep`,
    returning the remaining axes in the order given by `keep`.

    values: np.array with one axis per name in scope
    scope: a sequence of names (axis labels)
    keep: a sequence of names from scope
    """
    axes = [axis for axis, name in enumerate(scope) if name not in keep]
    new_values = values
    # sum axis by axis, from the last, so the remaining axis numbers stay valid
    for ax in sorted(axes, reverse=True):
        new_values = np.sum(new_values, axis=ax)
    remaining = [name for name in scope if name in keep]
    perm = [remaining.index(name) for name in keep]
    return np.transpose(new_values, perm)


def marginal_values(values, scope, keep):
    """
    Same as didactic_marginal_values, but with numpy's Einsum.

    Example:
        φ(A, B, C)  --keep (C, A)-->  φ'(C, A)
        Einsum pattern: 'abc->ca'
    """
    # einsum cannot deal with too many axes
    if len(scope) > 26:
        return didactic_marginal_values(values, scope, keep)
    # each variable (axis) gets a unique letter label
    var_to_letter = {v: chr(97 + i) for i, v in enumerate(scope)}
    idx_in = ''.join(var_to_letter[v] for v in scope)
    # omitted letters are summed out, the order of the output letters transposes the result
    idx_out = ''.join(var_to_letter[v] for v in keep)
    return np.einsum(f"{idx_in}->{idx_out}", values)


def broadcast_values(values, sub_scope, scope):
    """
    Align a table over sub_scope with the axes of a table over scope,
    so the two can be combined elementwise with numpy broadcasting.

    The axes of `values` are permuted into the order in which their names appear in scope,
     and a singleton axis is inserted for every name in scope that is not in sub_scope.
    """
    positions = [scope.index(name) for name in sub_scope]
    perm = sorted(range(len(sub_scope)), key=lambda i: positions[i])
    aligned = np.transpose(values, perm)
    shape = []
    j = 0
    ordered = [sub_scope[i] for i in perm]
    for name in scope:
        if j < len(ordered) and ordered[j] == name:
            shape.append(aligned.shape[j])
            j += 1
        else:
            shape.append(1)
    return aligned.reshape(shape)
