"""
Built-in presets for retargeting Mixamo animation onto Tripo rigs.
"""
import re

# Mixamo exports bones as "mixamorig:Hips", "mixamorig_Hips" or "mixamorigHips".
# Repeated prefixes (re-exported rigs) are stripped together so cleaning is idempotent.
MIXAMO_PREFIX = re.compile(r"^(?:mixamorig[_:]?)+", re.IGNORECASE)

# Canonical Mixamo bone name -> canonical Tripo bone name.
# Tripo rigs use the same simplified naming, so the defaults are identity entries.
BASE_BONE_MAPPING = {
    # Root / pelvis
    "Hips": "Hips",
    # Spine
    "Spine": "Spine",
    "Spine1": "Spine1",
    "Spine2": "Spine2",
    # Neck / head
    "Neck": "Neck",
    "Head": "Head",
    # Left arm
    "LeftShoulder": "LeftShoulder",
    "LeftArm": "LeftArm",
    "LeftForeArm": "LeftForeArm",
    "LeftHand": "LeftHand",
    # Left fingers
    "LeftHandThumb1": "LeftHandThumb1",
    "LeftHandThumb2": "LeftHandThumb2",
    "LeftHandThumb3": "LeftHandThumb3",
    "LeftHandIndex1": "LeftHandIndex1",
    "LeftHandIndex2": "LeftHandIndex2",
    "LeftHandIndex3": "LeftHandIndex3",
    "LeftHandMiddle1": "LeftHandMiddle1",
    "LeftHandMiddle2": "LeftHandMiddle2",
    "LeftHandMiddle3": "LeftHandMiddle3",
    "LeftHandRing1": "LeftHandRing1",
    "LeftHandRing2": "LeftHandRing2",
    "LeftHandRing3": "LeftHandRing3",
    "LeftHandPinky1": "LeftHandPinky1",
    "LeftHandPinky2": "LeftHandPinky2",
    "LeftHandPinky3": "LeftHandPinky3",
    # Right arm
    "RightShoulder": "RightShoulder",
    "RightArm": "RightArm",
    "RightForeArm": "RightForeArm",
    "RightHand": "RightHand",
    # Right fingers
    "RightHandThumb1": "RightHandThumb1",
    "RightHandThumb2": "RightHandThumb2",
    "RightHandThumb3": "RightHandThumb3",
    "RightHandIndex1": "RightHandIndex1",
    "RightHandIndex2": "RightHandIndex2",
    "RightHandIndex3": "RightHandIndex3",
    "RightHandMiddle1": "RightHandMiddle1",
    "RightHandMiddle2": "RightHandMiddle2",
    "RightHandMiddle3": "RightHandMiddle3",
    "RightHandRing1": "RightHandRing1",
    "RightHandRing2": "RightHandRing2",
    "RightHandRing3": "RightHandRing3",
    "RightHandPinky1": "RightHandPinky1",
    "RightHandPinky2": "RightHandPinky2",
    "RightHandPinky3": "RightHandPinky3",
    # Left leg
    "LeftUpLeg": "LeftUpLeg",
    "LeftLeg": "LeftLeg",
    "LeftFoot": "LeftFoot",
    "LeftToeBase": "LeftToeBase",
    # Right leg
    "RightUpLeg": "RightUpLeg",
    "RightLeg": "RightLeg",
    "RightFoot": "RightFoot",
    "RightToeBase": "RightToeBase",
}

# Canonical bone name -> pre-rotation [x, y, z, w], or None for no correction
DEFAULT_ROTATION_CORRECTIONS = {
    "Hips": None,  # some Tripo exports need 90 deg on X here
    "Spine": None,
    "Spine1": None,
    "Spine2": None,
    "Neck": None,
    "Head": None,
}

DEFAULT_CLIP_NAME = "Remapped_Animation"
REMAP_SOURCE_TAG = "mixamo-to-tripo"

# Track properties handled specially by the remapper
ROTATION_PROPERTY = "quaternion"
POSITION_PROPERTY = "position"
