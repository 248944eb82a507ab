"""
Transform hierarchy for the robotic arm.

Only the parts the delivery animation moves are modelled: three nested
segments hanging off the scene root and the medicine box that gets handed
from the shelf to the patient. Geometry lives in the UI; clients rebuild the
picture from `Arm.pose()`.
"""

from typing import Dict, List, Optional, Tuple

Vector = Tuple[float, float, float]

SHELF_POSITION: Vector = (-10.0, 7.0, 0.0)
PATIENT_POSITION: Vector = (12.0, 7.0, 0.0)


class Node:
    """A named transform with a rotation per axis and a single parent."""

    def __init__(self, name: str, position: Vector = (0.0, 0.0, 0.0)):
        self.name = name
        self.position: Vector = tuple(position)
        self.rotation: Dict[str, float] = {"x": 0.0, "y": 0.0, "z": 0.0}
        self.parent: Optional["Node"] = None
        self.children: List["Node"] = []

    def add(self, child: "Node") -> "Node":
        """Attach `child` to this node, detaching it from its previous parent."""
        if child.parent is not None:
            child.parent.remove(child)
        child.parent = self
        self.children.append(child)
        return child

    def remove(self, child: "Node") -> None:
        if child in self.children:
            self.children.remove(child)
            child.parent = None

    def __repr__(self):
        return f"Node({self.name!r}, parent={self.parent.name if self.parent else None!r})"


class Arm:
    """Scene root, three arm segments and the medicine box."""

    def __init__(self):
        self.scene = Node("scene")
        self.segment1 = self.scene.add(Node("segment1", (0.0, 2.0, 0.0)))
        self.segment2 = self.segment1.add(Node("segment2", (0.0, 8.0, 0.0)))
        self.segment3 = self.segment2.add(Node("segment3", (0.0, 8.0, 0.0)))
        self.medicine = self.scene.add(Node("medicine", SHELF_POSITION))
        self.nodes: Dict[str, Node] = {
            n.name: n
            for n in (self.scene, self.segment1, self.segment2, self.segment3, self.medicine)
        }

    def node(self, name: str) -> Node:
        try:
            return self.nodes[name]
        except KeyError:
            raise KeyError(f"Unknown arm node: {name!r}") from None

    def pose(self) -> dict:
        """JSON-ready snapshot of everything the animation can change."""
        return {
            "segment1": dict(self.segment1.rotation),
            "segment2": dict(self.segment2.rotation),
            "segment3": dict(self.segment3.rotation),
            "medicine": {
                "parent": self.medicine.parent.name if self.medicine.parent else None,
                "position": list(self.medicine.position),
            },
        }
