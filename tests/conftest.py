"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import math
from collections.abc import Callable
from types import SimpleNamespace

import pytest

from local_planner_core import LocalPlannerConfig, LocalPlannerCoordinator, Pose2D

# ---------------------------------------------------------------------------
# Message fakes (duck-typed stand-ins for sensor_msgs / nav_msgs / geometry_msgs)
# ---------------------------------------------------------------------------

SCAN_SAMPLES = 181
SCAN_ANGLE_MIN = -math.pi / 2.0
SCAN_INCREMENT = math.pi / 180.0


def _quaternion(yaw: float) -> SimpleNamespace:
    return SimpleNamespace(x=0.0, y=0.0, z=math.sin(yaw / 2.0), w=math.cos(yaw / 2.0))


def _pose(x: float, y: float, yaw: float) -> SimpleNamespace:
    return SimpleNamespace(
        position=SimpleNamespace(x=x, y=y, z=0.0),
        orientation=_quaternion(yaw),
    )


@pytest.fixture
def make_scan() -> Callable[..., SimpleNamespace]:
    """Build a LaserScan-like message."""

    def _make(
        ranges,
        angle_min: float = SCAN_ANGLE_MIN,
        angle_increment: float = SCAN_INCREMENT,
        range_min: float = 0.05,
        range_max: float = 10.0,
    ) -> SimpleNamespace:
        return SimpleNamespace(
            ranges=list(ranges),
            angle_min=angle_min,
            angle_increment=angle_increment,
            range_min=range_min,
            range_max=range_max,
        )

    return _make


@pytest.fixture
def make_obstacle_scan(make_scan) -> Callable[..., SimpleNamespace]:
    """Scan that only sees the given sensor-frame (angle_deg, range) returns."""

    def _make(*returns: tuple[int, float]) -> SimpleNamespace:
        ranges = [float("inf")] * SCAN_SAMPLES
        for angle_deg, length in returns:
            ranges[angle_deg + 90] = length
        return make_scan(ranges)

    return _make


@pytest.fixture
def empty_scan(make_obstacle_scan) -> SimpleNamespace:
    """Open space: every return is beyond range_max."""
    return make_obstacle_scan()


@pytest.fixture
def make_odom() -> Callable[..., SimpleNamespace]:
    """Build an Odometry-like message (pose nested under pose.pose)."""

    def _make(x: float = 0.0, y: float = 0.0, yaw: float = 0.0) -> SimpleNamespace:
        return SimpleNamespace(pose=SimpleNamespace(pose=_pose(x, y, yaw)))

    return _make


@pytest.fixture
def make_pose_stamped() -> Callable[..., SimpleNamespace]:
    """Build a PoseStamped-like message."""

    def _make(x: float = 0.0, y: float = 0.0, yaw: float = 0.0, frame_id: str = "odom") -> SimpleNamespace:
        return SimpleNamespace(header=SimpleNamespace(frame_id=frame_id), pose=_pose(x, y, yaw))

    return _make


# ---------------------------------------------------------------------------
# Planner fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def cfg() -> LocalPlannerConfig:
    return LocalPlannerConfig()


@pytest.fixture
def coordinator(cfg) -> LocalPlannerCoordinator:
    return LocalPlannerCoordinator(cfg)


@pytest.fixture
def goal_ahead() -> Pose2D:
    return Pose2D(5.0, 0.0, 0.0)
