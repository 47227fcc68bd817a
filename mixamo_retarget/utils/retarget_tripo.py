"""
Mixamo -> Tripo animation retargeting.

Bones are matched by name: the Mixamo prefix is stripped, the result is looked up in
the bone mapping table, and if that fails a bone with the same name on the target is used.
Rotation tracks can be pre-multiplied by a per-bone correction to reconcile bind poses.
Position tracks are never copied since the two rigs have different proportions.
"""
from __future__ import annotations

import enum
from typing import Optional

import numpy as np

from .presets import (
    BASE_BONE_MAPPING,
    DEFAULT_ROTATION_CORRECTIONS,
    DEFAULT_CLIP_NAME,
    REMAP_SOURCE_TAG,
    ROTATION_PROPERTY,
    POSITION_PROPERTY,
)
from .retarget_utils import (
    clean_mixamo_bone_name,
    quaternion_multiply,
    traverse_nodes,
    parse_correction,
    parse_bone_mapping,
    parse_rotation_corrections,
    load_json,
)
from .data_types import (
    BoneNode,
    AnimationClip,
    KeyframeTrack,
    NumberKeyframeTrack,
    VectorKeyframeTrack,
    QuaternionKeyframeTrack,
)


class MatchKind(enum.Enum):
    MAPPED = "mapped"  # found through the bone mapping table
    FALLBACK = "fallback"  # same canonical name exists on the target
    UNMATCHED = "unmatched"


class MixamoToTripoConverter:
    """
    Converts Mixamo skeleton rotations and clips to a Tripo skeleton.

    Usage:
        converter = MixamoToTripoConverter()
        clips = converter.apply_animations_to_model(mixamo_animations, tripo_root)
    """

    def __init__(self, bone_mapping: Optional[dict] = None, rotation_corrections: Optional[dict] = None):
        self.bone_mapping = BASE_BONE_MAPPING.copy()
        if bone_mapping:
            self.bone_mapping.update(bone_mapping)

        self.rotation_corrections = dict(DEFAULT_ROTATION_CORRECTIONS)
        if rotation_corrections:
            self.rotation_corrections.update(parse_rotation_corrections(rotation_corrections))

    @classmethod
    def from_config(cls, filepath: str) -> "MixamoToTripoConverter":
        """Build a converter from a JSON file with optional "bones" and "corrections" objects."""
        print(f"[Retarget] Loading converter config: {filepath}")
        data = load_json(filepath)
        return cls(
            bone_mapping=parse_bone_mapping(data.get("bones", {})),
            rotation_corrections=data.get("corrections", {}),
        )

    # -------------------------------------------------------------------------
    # Bone lookup
    # -------------------------------------------------------------------------

    @staticmethod
    def clean_mixamo_bone_name(name: str) -> str:
        return clean_mixamo_bone_name(name)

    def collect_bones(self, model: BoneNode) -> dict[str, BoneNode]:
        """Index every bone under model by its cleaned name and by its original name."""
        bones_by_name = {}
        for node in traverse_nodes(model):
            if not getattr(node, "is_bone", False):
                continue
            bones_by_name[self.clean_mixamo_bone_name(node.name)] = node
            bones_by_name[node.name] = node
        return bones_by_name

    def find_name_collisions(self, model: BoneNode) -> dict[str, list[str]]:
        """Cleaned names shared by more than one bone, with the original names in traversal order."""
        seen: dict[str, list] = {}
        for node in traverse_nodes(model):
            if getattr(node, "is_bone", False):
                seen.setdefault(self.clean_mixamo_bone_name(node.name), []).append(node)
        return {
            name: [n.name for n in nodes]
            for name, nodes in seen.items()
            if len(nodes) > 1
        }

    def resolve_bone(self, mixamo_bone_name: str, tripo_bones_by_name: dict) -> tuple[Optional[BoneNode], MatchKind]:
        clean_name = self.clean_mixamo_bone_name(mixamo_bone_name)

        tripo_name = self.bone_mapping.get(clean_name)
        if tripo_name and tripo_name in tripo_bones_by_name:
            return tripo_bones_by_name[tripo_name], MatchKind.MAPPED

        if clean_name in tripo_bones_by_name:
            return tripo_bones_by_name[clean_name], MatchKind.FALLBACK

        return None, MatchKind.UNMATCHED

    def find_target_bone(self, mixamo_bone_name: str, tripo_bones_by_name: dict) -> Optional[BoneNode]:
        """Tripo bone matching a Mixamo bone name, or None."""
        bone, _ = self.resolve_bone(mixamo_bone_name, tripo_bones_by_name)
        return bone

    # -------------------------------------------------------------------------
    # Rotation corrections
    # -------------------------------------------------------------------------

    def apply_rotation_correction(self, quaternion, bone_name: str):
        """
        Pre-multiply quaternion [x, y, z, w] by the correction registered for bone_name.
        Without a correction the input is returned as is.
        """
        correction = self.rotation_corrections.get(bone_name)
        if correction is None:
            return quaternion
        return quaternion_multiply(correction, quaternion)

    def correct_track_values(self, values, bone_name: str):
        """Apply the bone's correction to every [x, y, z, w] sample of a flat quaternion track."""
        correction = self.rotation_corrections.get(bone_name)
        if correction is None:
            return values

        values = np.asarray(values)
        if values.size % 4 != 0:
            raise ValueError(
                f"Quaternion track for '{bone_name}' has {values.size} values, not a multiple of 4"
            )
        corrected = quaternion_multiply(correction, values.reshape(-1, 4))
        return corrected.astype(np.float32).reshape(-1)

    # -------------------------------------------------------------------------
    # Live pose sync
    # -------------------------------------------------------------------------

    def copy_bone_rotation(self, mixamo_bone: BoneNode, tripo_bone: BoneNode, bone_name: str):
        rotation = np.array(mixamo_bone.quaternion, dtype=np.float64)
        tripo_bone.quaternion = np.array(self.apply_rotation_correction(rotation, bone_name), dtype=np.float64)

    def sync_skeletons(self, mixamo_model: BoneNode, tripo_model: BoneNode):
        """Copy the current local rotations of every matched bone. Meant to run once per frame."""
        mixamo_bones = self.collect_bones(mixamo_model)
        tripo_bones = self.collect_bones(tripo_model)

        for name, mixamo_bone in mixamo_bones.items():
            # Each bone is indexed twice; only handle the entry under its original name
            if name != mixamo_bone.name:
                continue
            tripo_bone = self.find_target_bone(name, tripo_bones)
            if tripo_bone is not None:
                self.copy_bone_rotation(mixamo_bone, tripo_bone, self.clean_mixamo_bone_name(name))

    # -------------------------------------------------------------------------
    # Clip remapping
    # -------------------------------------------------------------------------

    def remap_animation_clip(self, mixamo_clip: AnimationClip, tripo_bones_by_name: dict) -> Optional[AnimationClip]:
        """
        Rebind a Mixamo clip to Tripo bones.

        Tracks are named "<bone>.<property>". Quaternion tracks get the bone's rotation
        correction, position tracks are dropped, other tracks are copied with their kind kept.
        Returns None if no track could be remapped.
        """
        remapped_tracks = []

        for track in mixamo_clip.tracks:
            mixamo_bone_name, sep, prop = track.name.partition(".")
            if not sep:
                continue

            tripo_bone = self.find_target_bone(mixamo_bone_name, tripo_bones_by_name)
            if tripo_bone is None:
                continue

            new_track_name = f"{tripo_bone.uuid}.{prop}"

            if prop == ROTATION_PROPERTY:
                clean_bone_name = self.clean_mixamo_bone_name(mixamo_bone_name)
                corrected_values = self.correct_track_values(track.values, clean_bone_name)
                remapped_tracks.append(QuaternionKeyframeTrack(new_track_name, track.times, corrected_values))
            elif prop == POSITION_PROPERTY:
                # Different proportions, copying positions would stretch the rig
                continue
            elif isinstance(track, VectorKeyframeTrack):
                remapped_tracks.append(VectorKeyframeTrack(new_track_name, track.times, track.values))
            elif isinstance(track, NumberKeyframeTrack):
                remapped_tracks.append(NumberKeyframeTrack(new_track_name, track.times, track.values))
            else:
                remapped_tracks.append(KeyframeTrack(new_track_name, track.times, track.values))

        if not remapped_tracks:
            return None

        return AnimationClip(
            mixamo_clip.name or DEFAULT_CLIP_NAME,
            mixamo_clip.duration,
            remapped_tracks,
            user_data={"source": REMAP_SOURCE_TAG},
        )

    def apply_animations_to_model(self, mixamo_animations, tripo_model: BoneNode) -> list[AnimationClip]:
        """Remap every Mixamo clip for tripo_model, returning only the clips that produced tracks."""
        tripo_bones_by_name = self.collect_bones(tripo_model)
        remapped_animations = []

        for clip in mixamo_animations or []:
            remapped_clip = self.remap_animation_clip(clip, tripo_bones_by_name)
            if remapped_clip is not None:
                remapped_animations.append(remapped_clip)
                print(f'[Retarget] Animation "{clip.name}" remapped ({len(remapped_clip.tracks)} tracks)')
            else:
                print(f'[Retarget] WARNING: Animation "{clip.name}" could not be remapped')

        return remapped_animations

    # -------------------------------------------------------------------------
    # Diagnostics
    # -------------------------------------------------------------------------

    def bone_report(self, mixamo_model: BoneNode, tripo_model: BoneNode) -> str:
        """Readable summary of which Mixamo bones reach which Tripo bones."""
        mixamo_bones = self.collect_bones(mixamo_model)
        tripo_bones = self.collect_bones(tripo_model)

        lines = ["=== Bone correspondence report ===", "", "Mixamo bones:"]
        used_targets = set()
        for name, bone in mixamo_bones.items():
            if name != bone.name:
                continue
            clean_name = self.clean_mixamo_bone_name(name)
            tripo_bone, kind = self.resolve_bone(name, tripo_bones)
            if tripo_bone is None:
                lines.append(f"  {clean_name} -> ??? ✗")
                continue
            used_targets.add(id(tripo_bone))
            suffix = " (same name)" if kind is MatchKind.FALLBACK else ""
            lines.append(f"  {clean_name} -> {tripo_bone.name} ✓{suffix}")

        lines += ["", "Unmapped Tripo bones:"]
        for name, bone in tripo_bones.items():
            if name == bone.name and id(bone) not in used_targets:
                lines.append(f"  {name} (unused)")

        for label, model in (("Mixamo", mixamo_model), ("Tripo", tripo_model)):
            collisions = self.find_name_collisions(model)
            if collisions:
                lines += ["", f"{label} name collisions (last one wins):"]
                for clean_name, raw_names in collisions.items():
                    lines.append(f"  {clean_name}: {', '.join(raw_names)}")

        return "\n".join(lines)

    def print_bone_report(self, mixamo_model: BoneNode, tripo_model: BoneNode):
        print(self.bone_report(mixamo_model, tripo_model))

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def set_custom_mapping(self, custom_mapping: dict):
        self.bone_mapping = {**self.bone_mapping, **custom_mapping}

    def set_rotation_correction(self, bone_name: str, quaternion):
        """Register a pre-rotation for bone_name; None removes it."""
        self.rotation_corrections[bone_name] = parse_correction(bone_name, quaternion)
