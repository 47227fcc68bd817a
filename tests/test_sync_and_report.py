import sys
import os
import io
import unittest
from contextlib import redirect_stdout
import numpy as np

# Add the project root to sys.path
script_dir = os.path.dirname(os.path.abspath(__file__))
project_root = os.path.dirname(script_dir)
sys.path.insert(0, project_root)

from mixamo_retarget.utils.data_types import Bone
from mixamo_retarget.utils.retarget_tripo import MixamoToTripoConverter
from mixamo_retarget.utils.retarget_utils import quaternion_multiply

S = np.sqrt(0.5)


class TestSyncSkeletons(unittest.TestCase):
    def setUp(self):
        self.converter = MixamoToTripoConverter()

        self.src_root = Bone("Armature", is_bone=False)
        self.src_hips = self.src_root.add(Bone("mixamorig:Hips", quaternion=[0, S, 0, S]))
        self.src_spine = self.src_hips.add(Bone("mixamorig:Spine", quaternion=[S, 0, 0, S]))
        self.src_hips.add(Bone("mixamorig:LeftToeBase", quaternion=[0, 0, S, S]))

        self.tgt_root = Bone("Scene", is_bone=False)
        self.tgt_hips = self.tgt_root.add(Bone("Hips"))
        self.tgt_hips.position = np.array([0.0, 1.0, 0.0])
        self.tgt_spine = self.tgt_hips.add(Bone("Spine"))
        self.tgt_tail = self.tgt_hips.add(Bone("Tail", quaternion=[0.5, 0.5, 0.5, 0.5]))

    def test_rotations_copied(self):
        self.converter.sync_skeletons(self.src_root, self.tgt_root)

        np.testing.assert_allclose(self.tgt_hips.quaternion, [0, S, 0, S])
        np.testing.assert_allclose(self.tgt_spine.quaternion, [S, 0, 0, S])

    def test_unmapped_target_and_position_untouched(self):
        self.converter.sync_skeletons(self.src_root, self.tgt_root)

        np.testing.assert_array_equal(self.tgt_tail.quaternion, [0.5, 0.5, 0.5, 0.5])
        np.testing.assert_array_equal(self.tgt_hips.position, [0.0, 1.0, 0.0])
        np.testing.assert_array_equal(self.tgt_hips.scale, [1.0, 1.0, 1.0])

    def test_correction_applied_on_sync(self):
        correction = np.array([0, 0, S, S])
        self.converter.set_rotation_correction("Spine", correction)
        self.converter.sync_skeletons(self.src_root, self.tgt_root)

        np.testing.assert_allclose(self.tgt_spine.quaternion, quaternion_multiply(correction, [S, 0, 0, S]), atol=1e-12)
        np.testing.assert_allclose(self.tgt_hips.quaternion, [0, S, 0, S])

    def test_target_does_not_alias_source(self):
        self.converter.sync_skeletons(self.src_root, self.tgt_root)
        self.tgt_hips.quaternion[0] = 0.9
        np.testing.assert_array_equal(self.src_hips.quaternion, [0, S, 0, S])

    def test_repeated_sync_follows_source(self):
        self.converter.sync_skeletons(self.src_root, self.tgt_root)
        self.src_hips.quaternion = np.array([0.0, 0.0, 0.0, 1.0])
        self.converter.sync_skeletons(self.src_root, self.tgt_root)
        np.testing.assert_array_equal(self.tgt_hips.quaternion, [0.0, 0.0, 0.0, 1.0])

    def test_copy_bone_rotation(self):
        self.converter.copy_bone_rotation(self.src_spine, self.tgt_tail, "Spine")
        np.testing.assert_allclose(self.tgt_tail.quaternion, [S, 0, 0, S])


class TestBoneReport(unittest.TestCase):
    def setUp(self):
        self.converter = MixamoToTripoConverter()

        self.src_root = Bone("Armature", is_bone=False)
        hips = self.src_root.add(Bone("mixamorig:Hips"))
        hips.add(Bone("mixamorig:Spine"))
        hips.add(Bone("mixamorig:Tail"))
        hips.add(Bone("mixamorig:LeftToeBase"))

        self.tgt_root = Bone("Scene", is_bone=False)
        tgt_hips = self.tgt_root.add(Bone("Hips"))
        tgt_hips.add(Bone("Spine"))
        tgt_hips.add(Bone("Tail"))
        tgt_hips.add(Bone("Jaw"))

    def test_report_lines(self):
        report = self.converter.bone_report(self.src_root, self.tgt_root)
        lines = report.splitlines()

        self.assertIn("  Hips -> Hips ✓", lines)
        self.assertIn("  Spine -> Spine ✓", lines)
        self.assertIn("  Tail -> Tail ✓ (same name)", lines)
        self.assertIn("  LeftToeBase -> ??? ✗", lines)
        self.assertIn("  Jaw (unused)", lines)
        self.assertNotIn("  Hips (unused)", lines)
        self.assertNotIn("collisions", report)

    def test_each_source_bone_listed_once(self):
        report = self.converter.bone_report(self.src_root, self.tgt_root)
        self.assertEqual(report.count("  Hips -> "), 1)

    def test_collisions_listed(self):
        self.tgt_root.add(Bone("mixamorig:Jaw"))
        report = self.converter.bone_report(self.src_root, self.tgt_root)
        self.assertIn("Tripo name collisions (last one wins):", report)
        self.assertIn("  Jaw: Jaw, mixamorig:Jaw", report)

    def test_print_bone_report(self):
        buf = io.StringIO()
        with redirect_stdout(buf):
            self.converter.print_bone_report(self.src_root, self.tgt_root)
        self.assertIn("=== Bone correspondence report ===", buf.getvalue())


if __name__ == "__main__":
    unittest.main()
