"""
Matching BVH joint names to rig nodes.
"""

import logging
from collections import deque
from typing import Dict, Mapping, Optional

from bvhtools.core.errors import NameResolutionError
from bvhtools.data.rig import RigNode

logger = logging.getLogger(__name__)


def flexible_name(name: str) -> str:
    """Drop spaces and underscores and lower-case a name."""
    return name.replace(" ", "").replace("_", "").lower()


class NameResolver:
    """
    Resolves BVH joint names against rig nodes.

    Args:
        flexible: Compare names ignoring case, spaces and underscores
        renaming_map: BVH name -> rig (or standard) name; entries with an
            empty side are ignored
        name_map: Standard bone name -> rig node, for rigs whose nodes carry
            non-standard names
    """

    def __init__(
        self,
        flexible: bool = True,
        renaming_map: Optional[Mapping[str, str]] = None,
        name_map: Optional[Mapping[str, RigNode]] = None,
    ):
        self.flexible = flexible
        self.renaming_map: Dict[str, str] = {}
        for bvh_name, target_name in (renaming_map or {}).items():
            if bvh_name and target_name:
                self.renaming_map[self.normalize(bvh_name)] = self.normalize(target_name)
        self.name_map: Dict[str, RigNode] = {
            self.normalize(name): node for name, node in (name_map or {}).items()
        }

    def normalize(self, name: str) -> str:
        return flexible_name(name) if self.flexible else name

    def target_name(self, name: str) -> str:
        """Normalized name to look for, after applying the renaming map."""
        target = self.normalize(name)
        return self.renaming_map.get(target, target)

    def matches(self, node: RigNode, target: str) -> bool:
        if self.normalize(node.name) == target:
            return True
        return self.name_map.get(target) is node

    def find_bone(self, name: str, node: RigNode, include_self: bool = False) -> RigNode:
        """
        Find the rig node for a BVH joint among the children of ``node``.

        Args:
            name: BVH joint name
            node: Rig node of the parent joint
            include_self: Also accept ``node`` itself (used for the root)

        Raises:
            NameResolutionError: If no candidate matches
        """
        target = self.target_name(name)
        if include_self and self.matches(node, target):
            return node
        for child in node.children:
            if self.matches(child, target):
                return child
        raise NameResolutionError(name, node.name)

    def find_root(self, name: str, top: RigNode) -> Optional[RigNode]:
        """Breadth-first search below ``top`` (inclusive) for the root joint's node."""
        target = self.target_name(name)
        queue = deque([top])
        while queue:
            node = queue.popleft()
            if self.matches(node, target):
                return node
            queue.extend(node.children)
        return None
