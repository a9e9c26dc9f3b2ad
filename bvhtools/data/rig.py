"""
Scene-graph model of an animated rig.

A rig is a tree of RigNode transforms. The top node plays the role of the
avatar object: its position, rotation and scale place the whole character in
the world, and the bones hang below it. Each node holds a local translation,
rotation ([x, y, z, w]) and scale relative to its parent.

World-space queries accept an ``origin`` node. The origin is treated as if
it sat at the world origin with identity rotation while keeping its scale,
which lets callers evaluate a rig "at rest" without mutating it.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional

import numpy as np

from bvhtools.utils.math_utils import (
    IDENTITY_QUATERNION,
    normalize_quaternion,
    quaternion_multiply,
    transform_points,
    trs_matrix,
)


def _vector(value) -> np.ndarray:
    return np.array(value, dtype=float).reshape(3)


@dataclass(eq=False)
class RigNode:
    """
    A transform in the rig hierarchy.

    Attributes:
        name: Node name
        local_position: Translation relative to the parent
        local_rotation: Rotation relative to the parent [x, y, z, w]
        local_scale: Per-axis scale relative to the parent
    """
    name: str
    local_position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    local_rotation: np.ndarray = field(default_factory=lambda: IDENTITY_QUATERNION.copy())
    local_scale: np.ndarray = field(default_factory=lambda: np.ones(3))
    parent: Optional["RigNode"] = field(default=None, repr=False)
    children: List["RigNode"] = field(default_factory=list, repr=False)

    def __post_init__(self):
        self.local_position = _vector(self.local_position)
        self.local_scale = _vector(self.local_scale)
        self.local_rotation = normalize_quaternion(self.local_rotation)

    def add_child(self, child: "RigNode") -> "RigNode":
        """Attach ``child`` below this node and return it."""
        if child.parent is not None:
            child.parent.children.remove(child)
        child.parent = self
        self.children.append(child)
        return child

    def add(self, name: str, position=(0.0, 0.0, 0.0), rotation=None) -> "RigNode":
        """Create, attach and return a new child node."""
        node = RigNode(
            name=name,
            local_position=position,
            local_rotation=IDENTITY_QUATERNION if rotation is None else rotation,
        )
        return self.add_child(node)

    @property
    def child_count(self) -> int:
        return len(self.children)

    def iter_nodes(self) -> Iterator["RigNode"]:
        """This node and all descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()

    def find(self, name: str) -> Optional["RigNode"]:
        """First node in pre-order with exactly this name."""
        for node in self.iter_nodes():
            if node.name == name:
                return node
        return None

    def is_child_of(self, other: "RigNode") -> bool:
        """True if ``other`` is this node or one of its ancestors."""
        node: Optional[RigNode] = self
        while node is not None:
            if node is other:
                return True
            node = node.parent
        return False

    def path_from(self, ancestor: "RigNode") -> str:
        """Slash-separated names from below ``ancestor`` down to this node."""
        names = []
        node: Optional[RigNode] = self
        while node is not None and node is not ancestor:
            names.append(node.name)
            node = node.parent
        if node is None:
            raise ValueError(f'"{ancestor.name}" is not an ancestor of "{self.name}"')
        return "/".join(reversed(names))

    def set_rotation(self, rotation: np.ndarray):
        self.local_rotation = normalize_quaternion(rotation)

    def local_matrix(self) -> np.ndarray:
        return trs_matrix(self.local_position, self.local_rotation, self.local_scale)

    def world_matrix(self, origin: Optional["RigNode"] = None) -> np.ndarray:
        """Local-to-world transform, optionally with ``origin`` reset."""
        if self is origin:
            return trs_matrix(np.zeros(3), IDENTITY_QUATERNION, self.local_scale)
        local = self.local_matrix()
        if self.parent is None:
            return local
        return self.parent.world_matrix(origin) @ local

    def world_position(self, origin: Optional["RigNode"] = None) -> np.ndarray:
        return self.world_matrix(origin)[:3, 3].copy()

    def world_rotation(self, origin: Optional["RigNode"] = None) -> np.ndarray:
        """World rotation, ignoring scale."""
        if self is origin:
            return IDENTITY_QUATERNION.copy()
        if self.parent is None:
            return self.local_rotation.copy()
        return quaternion_multiply(self.parent.world_rotation(origin), self.local_rotation)

    def lossy_scale(self) -> np.ndarray:
        """Accumulated per-axis scale from the top of the hierarchy."""
        scale = self.local_scale.copy()
        node = self.parent
        while node is not None:
            scale = scale * node.local_scale
            node = node.parent
        return scale

    def inverse_transform_point(
        self,
        points: np.ndarray,
        origin: Optional["RigNode"] = None,
    ) -> np.ndarray:
        """Map world-space point(s) into this node's local space."""
        inverse = np.linalg.inv(self.world_matrix(origin))
        return transform_points(inverse, points)


class Rig(RigNode):
    """
    Top-level avatar transform owning a bone hierarchy.

    The rig's own position, rotation and scale are the avatar placement.
    """

    def __init__(self, name: str = "Avatar", position=(0.0, 0.0, 0.0),
                 rotation=None, scale=(1.0, 1.0, 1.0)):
        super().__init__(
            name=name,
            local_position=position,
            local_rotation=IDENTITY_QUATERNION if rotation is None else rotation,
            local_scale=scale,
        )

    @property
    def position(self) -> np.ndarray:
        return self.local_position

    @property
    def scale(self) -> np.ndarray:
        return self.local_scale

    def nodes(self) -> List[RigNode]:
        """The rig and every node below it, pre-order."""
        return list(self.iter_nodes())

    def bones(self) -> List[RigNode]:
        """Every node below the rig itself, pre-order."""
        return [node for node in self.iter_nodes() if node is not self]
