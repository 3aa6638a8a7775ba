"""Wireframe topology of the N-cube bounding the simulation."""

import itertools
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np


@dataclass(frozen=True)
class HypercubeGraph:
    """
    Corners and edges of ``[-bound, bound]^N``.

    ``vertices`` is (2^N, N) with the first axis varying slowest. ``edges``
    holds index pairs (i < j) whose vertices differ in exactly one
    coordinate, i.e. the 1-skeleton of the cube.
    """

    vertices: np.ndarray
    edges: Tuple[Tuple[int, int], ...]

    @classmethod
    def build(cls, dimensions: int, bound: float) -> "HypercubeGraph":
        coords = (-float(bound), float(bound))
        vertices = np.array(
            list(itertools.product(coords, repeat=dimensions)), dtype=np.float64
        )
        vertices.setflags(write=False)
        return cls(vertices=vertices, edges=tuple(_hamming_one_pairs(vertices)))

    @property
    def dimensions(self) -> int:
        return self.vertices.shape[1]

    def degree(self, index: int) -> int:
        return sum(1 for i, j in self.edges if index in (i, j))


def _hamming_one_pairs(vertices: np.ndarray) -> List[Tuple[int, int]]:
    differ = (vertices[:, None, :] != vertices[None, :, :]).sum(axis=2)
    rows, cols = np.nonzero(np.triu(differ == 1))
    return [(int(i), int(j)) for i, j in zip(rows, cols)]
