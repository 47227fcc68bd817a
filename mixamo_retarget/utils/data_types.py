from __future__ import annotations

import uuid
from typing import Any, Dict, Iterable, List, Optional, Protocol

import numpy as np


class BoneNode(Protocol):
    """What the retargeter needs from a host hierarchy node."""
    name: str
    uuid: str
    is_bone: bool
    quaternion: np.ndarray  # local rotation [x, y, z, w]
    children: Iterable["BoneNode"]


class Bone:
    """Minimal hierarchy node satisfying BoneNode"""
    def __init__(self, name: str, quaternion=None, is_bone: bool = True):
        self.name = name
        self.uuid = uuid.uuid4().hex
        self.is_bone = is_bone
        self.quaternion = np.array([0.0, 0.0, 0.0, 1.0]) if quaternion is None else np.asarray(quaternion, dtype=np.float64)
        self.position = np.zeros(3)
        self.scale = np.ones(3)
        self.parent: Optional[Bone] = None
        self.children: List[Bone] = []

    def add(self, child: "Bone") -> "Bone":
        child.parent = self
        self.children.append(child)
        return child

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Bone":
        """Build a node tree from {"name": ..., "is_bone": ..., "quaternion": [...], "children": [...]}"""
        node = cls(data["name"], data.get("quaternion"), data.get("is_bone", True))
        for child in data.get("children", []):
            node.add(cls.from_dict(child))
        return node

    def __repr__(self):
        return f"Bone({self.name!r})"


class KeyframeTrack:
    """Timed samples for one "<target>.<property>" binding"""
    value_type_name = ""

    def __init__(self, name: str, times, values):
        self.name = name
        self.times = np.asarray(times, dtype=np.float32)
        self.values = np.asarray(values, dtype=np.float32)

    def get_value_size(self) -> int:
        return len(self.values) // len(self.times) if len(self.times) else 0


class NumberKeyframeTrack(KeyframeTrack):
    value_type_name = "number"


class VectorKeyframeTrack(KeyframeTrack):
    value_type_name = "vector"


class QuaternionKeyframeTrack(KeyframeTrack):
    value_type_name = "quaternion"  # values are [x, y, z, w] per sample


class AnimationClip:
    """Named, fixed-duration collection of keyframe tracks"""
    def __init__(self, name: str, duration: float, tracks: List[KeyframeTrack], user_data: Optional[Dict[str, Any]] = None):
        self.name = name
        self.duration = duration
        self.tracks = tracks
        self.user_data = user_data if user_data is not None else {}
