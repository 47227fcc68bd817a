"""
Retargeting utilities shared by the Mixamo -> Tripo converter.
Quaternion math, bone name cleanup, hierarchy walking and JSON config loading.
"""
import os
import json
from typing import Iterator, Optional

import numpy as np
from scipy.spatial.transform import Rotation as R

from .presets import MIXAMO_PREFIX, BASE_BONE_MAPPING, DEFAULT_ROTATION_CORRECTIONS


def clean_mixamo_bone_name(name: str) -> str:
    """Strip the Mixamo rig prefix (mixamorig, mixamorig:, mixamorig_) from a bone name."""
    return MIXAMO_PREFIX.sub("", name, count=1)


def quaternion_multiply(q1: np.ndarray, q2: np.ndarray) -> np.ndarray:
    """
    Hamilton product q1 * q2 of quaternions stored as [x, y, z, w].
    Both arguments may be batches of shape [..., 4]; they broadcast against each other.
    """
    q1 = np.asarray(q1, dtype=np.float64)
    q2 = np.asarray(q2, dtype=np.float64)
    x1, y1, z1, w1 = np.moveaxis(q1, -1, 0)
    x2, y2, z2, w2 = np.moveaxis(q2, -1, 0)
    return np.stack(
        [
            w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
            w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
        ],
        axis=-1,
    )


def euler_to_quaternion(angles, order: str = "XYZ") -> np.ndarray:
    """Convert Euler angles in degrees to an [x, y, z, w] quaternion."""
    return R.from_euler(order, angles, degrees=True).as_quat()


def traverse_nodes(root) -> Iterator:
    """Yield root and all of its descendants, depth first, parents before children."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(list(getattr(node, "children", ()) or ())))


def parse_correction(bone_name: str, value) -> Optional[np.ndarray]:
    """Turn a config value (None, [x, y, z, w], {x, y, z, w} or {"euler": [...]}) into a unit quaternion."""
    if value is None:
        return None

    if isinstance(value, dict) and "euler" in value:
        angles = value["euler"]
        if len(angles) != 3:
            raise ValueError(f"Correction for '{bone_name}': 'euler' needs 3 angles, got {len(angles)}")
        return euler_to_quaternion(angles, value.get("order", "XYZ"))

    if isinstance(value, dict):
        try:
            quat = [value["x"], value["y"], value["z"], value["w"]]
        except KeyError as e:
            raise ValueError(f"Correction for '{bone_name}' is missing component {e}") from e
    else:
        quat = list(value)

    quat = np.asarray(quat, dtype=np.float64)
    if quat.shape != (4,):
        raise ValueError(f"Correction for '{bone_name}' must have 4 components [x, y, z, w]")
    norm = np.linalg.norm(quat)
    if norm < 1e-9:
        raise ValueError(f"Correction for '{bone_name}' is a zero quaternion")
    return quat / norm


def parse_bone_mapping(bones: dict) -> dict:
    """
    Normalize a "bones" JSON object into source -> target names.
    Values may be a plain name or a list whose last entry is the target name.
    """
    mapping = {}
    for key, values in bones.items():
        if isinstance(values, list):
            if len(values) >= 2:
                mapping[values[0]] = values[-1]
            elif len(values) == 1:
                mapping[key] = values[0]
        elif isinstance(values, str):
            mapping[key] = values
    return mapping


def parse_rotation_corrections(corrections: dict) -> dict:
    return {bone: parse_correction(bone, value) for bone, value in corrections.items()}


def load_json(filepath: str) -> dict:
    with open(filepath, "r") as f:
        return json.load(f)


def load_bone_mapping(filepath: str) -> dict:
    """Load bone mapping from JSON file, merging with base mapping."""
    mapping = BASE_BONE_MAPPING.copy()
    if not filepath or not os.path.exists(filepath):
        return mapping

    print(f"[Retarget] Loading Mapping File: {filepath}")
    data = load_json(filepath)
    mapping.update(parse_bone_mapping(data.get("bones", {})))
    return mapping


def load_rotation_corrections(filepath: str) -> dict:
    """Load per-bone rotation corrections from JSON file, merging with the defaults."""
    corrections = dict(DEFAULT_ROTATION_CORRECTIONS)
    if not filepath or not os.path.exists(filepath):
        return corrections

    print(f"[Retarget] Loading Rotation Corrections: {filepath}")
    data = load_json(filepath)
    corrections.update(parse_rotation_corrections(data.get("corrections", {})))
    return corrections
