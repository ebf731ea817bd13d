import unittest

import numpy as np
from scipy.spatial.transform import Rotation

from ergoreach.config import CONFIG
from ergoreach.core.posture import PostureSampler
from ergoreach.core.types import Joint, JointSource, Side
from tests.fixtures import make_pose


class TestPostureAngles(unittest.TestCase):
    def setUp(self):
        self.sampler = PostureSampler(JointSource.IK_MODEL, controller_offset=0.0)

    def test_neutral_pose(self):
        """Arms hanging with level forearms, upright trunk and head."""
        angles = self.sampler.sample(make_pose())
        for side in Side:
            arm = angles.arm(side)
            self.assertAlmostEqual(arm.shoulder, 0.0)
            self.assertAlmostEqual(arm.elbow, 90.0)
            self.assertAlmostEqual(arm.wrist, 0.0)
            self.assertGreater(arm.midline_offset, 0.0)
            self.assertAlmostEqual(arm.lateral_offset, 0.0)
        self.assertAlmostEqual(angles.trunk, 0.0)
        self.assertAlmostEqual(angles.trunk_twist, 0.0)
        self.assertAlmostEqual(angles.trunk_side_bend, 0.0)
        self.assertAlmostEqual(angles.neck, 0.0)
        self.assertAlmostEqual(angles.neck_twist, 0.0)
        self.assertAlmostEqual(angles.neck_roll, 0.0)

    def test_shoulder_flexion(self):
        """Upper arm raised straight forward reads 90 degrees."""
        pose = make_pose({Joint.RIGHT_ELBOW: (0.2, 1.4, 0.3), Joint.RIGHT_WRIST: (0.2, 1.4, 0.55)})
        angles = self.sampler.sample(pose)
        self.assertAlmostEqual(angles.right.shoulder, 90.0)
        self.assertAlmostEqual(angles.right.elbow, 0.0)
        self.assertAlmostEqual(angles.left.shoulder, 0.0)

    def test_wrist_uses_controller_offset(self):
        """The neutral grip angle is subtracted before taking the magnitude."""
        vive = PostureSampler(JointSource.IK_MODEL, controller_offset=30.0)
        self.assertAlmostEqual(vive.sample(make_pose()).left.wrist, 30.0)

        bent = make_pose(rotations={Joint.LEFT_HAND: Rotation.from_euler("x", -30, degrees=True)})
        self.assertAlmostEqual(vive.sample(bent).left.wrist, 0.0)

    def test_controller_models(self):
        self.assertEqual(PostureSampler.for_controller("vive").controller_offset, 30.0)
        self.assertEqual(PostureSampler.for_controller("oculus").controller_offset, 0.0)
        with self.assertRaises(ValueError):
            PostureSampler.for_controller("joycon")

    def test_forward_lean_is_positive(self):
        lean = np.radians(30)
        pose = make_pose({Joint.HEAD: (0.0, 1.0 + 0.7 * np.cos(lean), 0.7 * np.sin(lean))})
        self.assertAlmostEqual(self.sampler.sample(pose).trunk, 30.0)

    def test_neck_tilt_sign(self):
        down = make_pose(rotations={Joint.HEAD: Rotation.from_euler("x", 15, degrees=True)})
        up = make_pose(rotations={Joint.HEAD: Rotation.from_euler("x", -15, degrees=True)})
        self.assertAlmostEqual(self.sampler.sample(down).neck, 15.0)
        self.assertAlmostEqual(self.sampler.sample(up).neck, -15.0)

    def test_trunk_twist_and_side_bend(self):
        twist = np.radians(20)
        twisted = make_pose({
            Joint.LEFT_SHOULDER: (-0.2 * np.cos(twist), 1.4, -0.2 * np.sin(twist)),
            Joint.RIGHT_SHOULDER: (0.2 * np.cos(twist), 1.4, 0.2 * np.sin(twist)),
        })
        angles = self.sampler.sample(twisted)
        self.assertAlmostEqual(abs(angles.trunk_twist), 20.0)
        self.assertAlmostEqual(angles.trunk_side_bend, 0.0)

        bent = make_pose({Joint.LEFT_SHOULDER: (-0.2, 1.35, 0.0), Joint.RIGHT_SHOULDER: (0.2, 1.45, 0.0)})
        angles = self.sampler.sample(bent)
        self.assertAlmostEqual(abs(angles.trunk_side_bend), np.degrees(np.arctan2(0.1, 0.4)))
        self.assertAlmostEqual(angles.trunk_twist, 0.0)

    def test_neck_twist(self):
        pose = make_pose(rotations={Joint.HEAD: Rotation.from_euler("y", 60, degrees=True)})
        angles = self.sampler.sample(pose)
        self.assertAlmostEqual(abs(angles.neck_twist), 60.0)
        self.assertAlmostEqual(angles.neck_roll, 0.0)

    def test_hand_across_midline(self):
        pose = make_pose({Joint.RIGHT_HAND: (-0.1, 1.1, 0.3)})
        self.assertLess(self.sampler.sample(pose).right.midline_offset, 0.0)

    def test_hand_out_to_side(self):
        pose = make_pose({Joint.LEFT_HAND: (-0.45, 1.1, 0.3)})
        arm = self.sampler.sample(pose).left
        self.assertGreater(arm.midline_offset, 0.0)
        self.assertGreater(arm.lateral_offset, 0.0)

    def test_lateral_axis_points_to_right_shoulder(self):
        """A waist frame facing backwards still yields a right-pointing lateral axis."""
        pose = make_pose(rotations={Joint.WAIST: Rotation.from_euler("y", 180, degrees=True)})
        np.testing.assert_allclose(self.sampler.lateral_axis(pose), [1.0, 0.0, 0.0], atol=1e-12)


class TestJointSource(unittest.TestCase):
    def test_skeletal_rebuilds_orientations(self):
        """Waist frame comes from the torso triangle, hands copy the controllers."""
        sampler = PostureSampler(JointSource.SKELETAL)
        grip = Rotation.from_euler("x", 10, degrees=True)
        pose = make_pose(rotations={
            Joint.WAIST: Rotation.from_euler("y", 90, degrees=True),
            Joint.RIGHT_CONTROLLER: grip,
        })
        prepared = sampler.prepare(pose)
        np.testing.assert_allclose(prepared[Joint.WAIST].forward, [0.0, 0.0, 1.0], atol=1e-12)
        np.testing.assert_allclose(prepared[Joint.WAIST].up, [0.0, 1.0, 0.0], atol=1e-12)
        np.testing.assert_allclose(prepared[Joint.RIGHT_HAND].rotation.as_quat(), grip.as_quat())
        np.testing.assert_allclose(prepared[Joint.RIGHT_HAND].position, pose.position(Joint.RIGHT_HAND))

    def test_skeletal_requires_controllers(self):
        """Without controller orientations the skeletal hands are meaningless: hold, do not accept."""
        sampler = PostureSampler(JointSource.SKELETAL)
        with self.assertLogs("ergoreach.core.posture", level="WARNING") as logs:
            self.assertIsNone(sampler.resolve(make_pose()))
        self.assertTrue(sampler.degraded)
        self.assertIn("left_controller", logs.output[0])

        grip = Rotation.identity()
        tracked = make_pose(rotations={Joint.LEFT_CONTROLLER: grip, Joint.RIGHT_CONTROLLER: grip})
        self.assertIsNotNone(sampler.resolve(tracked))
        self.assertFalse(sampler.degraded)

        # Losing one controller falls back to the last complete pose
        held = sampler.last_good
        self.assertIs(sampler.resolve(make_pose(rotations={Joint.RIGHT_CONTROLLER: grip})), held)

    def test_ik_model_ignores_controllers(self):
        sampler = PostureSampler(JointSource.IK_MODEL)
        pose = make_pose()
        self.assertIs(sampler.resolve(pose), pose)

    def test_source_and_offset_from_config(self):
        sampler = PostureSampler(config=dict(CONFIG, JOINT_SOURCE="skeletal", CONTROLLER_ANGLE_OFFSET=0.0))
        self.assertEqual(sampler.source, JointSource.SKELETAL)
        self.assertEqual(sampler.controller_offset, 0.0)

    def test_ik_model_is_untouched(self):
        sampler = PostureSampler(JointSource.IK_MODEL)
        pose = make_pose(rotations={Joint.WAIST: Rotation.from_euler("y", 90, degrees=True)})
        self.assertIs(sampler.prepare(pose), pose)


class TestLastKnownGood(unittest.TestCase):
    def setUp(self):
        self.sampler = PostureSampler(JointSource.IK_MODEL)

    def test_invalid_before_any_valid(self):
        self.assertIsNone(self.sampler.resolve(make_pose(drop={Joint.HEAD})))
        self.assertIsNone(self.sampler.resolve(None))

    def test_holds_and_recovers(self):
        """Lost joints swap in the last complete snapshot until tracking returns."""
        good = make_pose()
        self.assertIs(self.sampler.resolve(good), good)

        with self.assertLogs("ergoreach.core.posture", level="WARNING"):
            self.assertIs(self.sampler.resolve(make_pose(drop={Joint.LEFT_ELBOW})), good)
        self.assertTrue(self.sampler.degraded)

        nan_pose = make_pose({Joint.RIGHT_WRIST: (float("nan"), 1.1, 0.25)})
        self.assertIs(self.sampler.resolve(nan_pose), good)
        self.assertIs(self.sampler.resolve(make_pose(tracking_valid=False)), good)

        fresh = make_pose({Joint.HEAD: (0.0, 1.75, 0.0)})
        self.assertIs(self.sampler.resolve(fresh), fresh)
        self.assertFalse(self.sampler.degraded)


if __name__ == '__main__':
    unittest.main()
