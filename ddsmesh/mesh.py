"""Lit triangle meshes: per-vertex normals and a UV sphere generator."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import IntEnum

Vector = tuple[float, float, float]

_ZERO: Vector = (0.0, 0.0, 0.0)


class Topology(IntEnum):
    """How a sequence of vertices is assembled into primitives."""

    UNDEFINED = 0
    POINTLIST = 1
    LINELIST = 2
    LINESTRIP = 3
    TRIANGLELIST = 4
    TRIANGLESTRIP = 5


@dataclass(frozen=True)
class IlluminatedMesh:
    """A mesh whose vertices carry a position and a normal."""

    topology: Topology
    positions: tuple[Vector, ...]
    normals: tuple[Vector, ...]
    indices: tuple[int, ...] | None = None


def _sub(a: Vector, b: Vector) -> Vector:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def _add(a: Vector, b: Vector) -> Vector:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def _cross(a: Vector, b: Vector) -> Vector:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def _normalize(v: Vector) -> Vector:
    length = math.sqrt(v[0] * v[0] + v[1] * v[1] + v[2] * v[2])
    if length == 0.0:
        return _ZERO
    return (v[0] / length, v[1] / length, v[2] / length)


def _face_normal(p0: Vector, p1: Vector, p2: Vector) -> Vector:
    return _normalize(_cross(_sub(p1, p0), _sub(p2, p0)))


def _as_vectors(positions: Iterable[Sequence[float]]) -> list[Vector]:
    return [(float(x), float(y), float(z)) for x, y, z in positions]


def _blend_normals(positions: list[Vector],
                   triangles: Iterable[tuple[int, int, int]]) -> list[Vector]:
    """Average the face normals of the triangles around each vertex."""
    count = len(positions)
    touching: list[list[Vector]] = [[] for _ in range(count)]
    for tri in triangles:
        if any(not 0 <= index < count for index in tri):
            raise ValueError(f"triangle {tri} refers to a vertex outside 0..{count - 1}")
        normal = _face_normal(*(positions[index] for index in tri))
        for vertex in dict.fromkeys(tri):
            touching[vertex].append(normal)

    normals = []
    for faces in touching:
        total = _ZERO
        for normal in faces:
            total = _normalize(_add(total, normal))
        normals.append(_normalize(total))
    return normals


def triangle_list_normals(positions) -> list[Vector]:
    """Flat normals for an unindexed triangle list: each triangle gets its face normal."""
    points = _as_vectors(positions)
    normals = [_ZERO] * len(points)
    for start in range(0, len(points) - 2, 3):
        normal = _face_normal(*points[start:start + 3])
        normals[start:start + 3] = [normal] * 3
    return normals


def indexed_triangle_list_normals(positions, indices) -> list[Vector]:
    """Smooth normals for an indexed triangle list."""
    points = _as_vectors(positions)
    flat = [int(index) for index in indices]
    triangles = zip(flat[0::3], flat[1::3], flat[2::3])
    return _blend_normals(points, triangles)


def _strip_triangles(order: Sequence[int]) -> Iterable[tuple[int, int, int]]:
    for i in range(max(len(order) - 2, 0)):
        if i % 2 == 0:
            yield order[i], order[i + 1], order[i + 2]
        else:
            yield order[i + 1], order[i], order[i + 2]


def triangle_strip_normals(positions, indices=None) -> list[Vector]:
    """Smooth normals for a triangle strip, indexed or not."""
    points = _as_vectors(positions)
    order = [int(index) for index in indices] if indices is not None else range(len(points))
    return _blend_normals(points, _strip_triangles(order))


def calculate_vertex_normals(topology, positions, indices=None) -> list[Vector]:
    """Vertex normals for the given topology; other topologies get zero normals."""
    topology = Topology(topology)
    if topology == Topology.TRIANGLELIST:
        if indices is not None:
            return indexed_triangle_list_normals(positions, indices)
        return triangle_list_normals(positions)
    if topology == Topology.TRIANGLESTRIP:
        return triangle_strip_normals(positions, indices)
    return [_ZERO] * len(_as_vectors(positions))


def _sphere_indices(slices: int, stacks: int, vertex_count: int) -> list[int]:
    indices: list[int] = []
    for i in range(slices):
        indices += [0, 1 + (i + 1) % slices, 1 + i]
    for j in range(stacks - 2):
        for i in range(slices):
            here = 1 + i + j * slices
            right = 1 + (i + 1) % slices + j * slices
            below = 1 + i + (j + 1) * slices
            below_right = 1 + (i + 1) % slices + (j + 1) * slices
            indices += [here, right, below, below, right, below_right]
    bottom = vertex_count - 1
    ring = bottom - slices
    for i in range(slices):
        indices += [bottom, ring + i, ring + (i + 1) % slices]
    return indices


def sphere_mesh(radius=2.0, slices=20, stacks=20) -> IlluminatedMesh:
    """Build an indexed UV sphere centred on the origin with smooth normals."""
    if slices < 1:
        raise ValueError("a sphere needs at least one slice")
    if stacks < 2:
        raise ValueError("a sphere needs at least two stacks")

    delta_phi = math.pi / stacks
    delta_theta = 2.0 * math.pi / slices

    positions: list[Vector] = [(0.0, radius, 0.0)]
    for j in range(1, stacks):
        phi = delta_phi * j
        for i in range(slices):
            theta = delta_theta * i
            positions.append((
                radius * math.sin(phi) * math.cos(theta),
                radius * math.cos(phi),
                radius * math.sin(phi) * math.sin(theta),
            ))
    positions.append((0.0, -radius, 0.0))

    indices = _sphere_indices(slices, stacks, len(positions))
    normals = calculate_vertex_normals(Topology.TRIANGLELIST, positions, indices)
    return IlluminatedMesh(
        topology=Topology.TRIANGLELIST,
        positions=tuple(positions),
        normals=tuple(normals),
        indices=tuple(indices),
    )