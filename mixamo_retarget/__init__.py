"""
Mixamo -> Tripo skeletal animation retargeting.

Matches bones by name across two rigs, rebinds animation clips to the target rig
and optionally pre-rotates bones whose bind pose differs.
"""

__version__ = "1.0.0"

from .utils.data_types import (
    BoneNode,
    Bone,
    KeyframeTrack,
    NumberKeyframeTrack,
    VectorKeyframeTrack,
    QuaternionKeyframeTrack,
    AnimationClip,
)
from .utils.retarget_tripo import MixamoToTripoConverter, MatchKind
from .utils.retarget_utils import clean_mixamo_bone_name, load_bone_mapping, load_rotation_corrections

__all__ = [
    "BoneNode",
    "Bone",
    "KeyframeTrack",
    "NumberKeyframeTrack",
    "VectorKeyframeTrack",
    "QuaternionKeyframeTrack",
    "AnimationClip",
    "MixamoToTripoConverter",
    "MatchKind",
    "clean_mixamo_bone_name",
    "load_bone_mapping",
    "load_rotation_corrections",
]
