from __future__ import annotations

import math
from dataclasses import dataclass, field


def wrap_angle(a: float) -> float:
    while a > math.pi:
        a -= 2.0 * math.pi
    while a < -math.pi:
        a += 2.0 * math.pi
    return a


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(value, hi))


def yaw_from_quaternion(x: float, y: float, z: float, w: float) -> float:
    """Yaw of the roll/pitch/yaw decomposition; roll and pitch are dropped."""
    siny = 2.0 * (w * z + x * y)
    cosy = 1.0 - 2.0 * (y * y + z * z)
    return math.atan2(siny, cosy)


@dataclass(frozen=True)
class Pose2D:
    x: float = 0.0
    y: float = 0.0
    theta: float = 0.0

    # cos/sin of theta, recomputed on every construction
    cos_theta: float = field(init=False, repr=False, compare=False)
    sin_theta: float = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "cos_theta", math.cos(self.theta))
        object.__setattr__(self, "sin_theta", math.sin(self.theta))

    @classmethod
    def from_msg_pose(cls, pose) -> "Pose2D":
        q = pose.orientation
        return cls(
            float(pose.position.x),
            float(pose.position.y),
            yaw_from_quaternion(q.x, q.y, q.z, q.w),
        )

    def to_local(self, wx: float, wy: float) -> tuple[float, float]:
        dx = wx - self.x
        dy = wy - self.y
        return (
            self.cos_theta * dx + self.sin_theta * dy,
            -self.sin_theta * dx + self.cos_theta * dy,
        )
