from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

from .errors import TransformUnavailable
from .geometry import Pose2D, wrap_angle, yaw_from_quaternion


@dataclass(frozen=True)
class Transform2D:
    """Planar rigid transform taking points from ``source`` into ``target``."""

    x: float = 0.0
    y: float = 0.0
    yaw: float = 0.0

    @classmethod
    def from_msg(cls, transform) -> "Transform2D":
        t = transform.translation
        q = transform.rotation
        return cls(float(t.x), float(t.y), yaw_from_quaternion(q.x, q.y, q.z, q.w))

    def apply(self, pose: Pose2D) -> Pose2D:
        c = math.cos(self.yaw)
        s = math.sin(self.yaw)
        return Pose2D(
            self.x + c * pose.x - s * pose.y,
            self.y + s * pose.x + c * pose.y,
            wrap_angle(pose.theta + self.yaw),
        )


IDENTITY = Transform2D()


class FrameTransformCache:
    def __init__(self) -> None:
        self._last: dict[tuple[str, str], Transform2D] = {}

    def resolve(
        self,
        target: str,
        source: str,
        lookup: Callable[[str, str], Transform2D],
    ) -> tuple[Transform2D, list[tuple[str, str]]]:
        if not source or source == target:
            return (IDENTITY, [])

        try:
            transform = lookup(target, source)
        except TransformUnavailable as exc:
            cached = self._last.get((target, source))
            if cached is None:
                return (
                    IDENTITY,
                    [("warn", f"Transform {source}->{target} unavailable ({exc}); no cached transform, using identity.")],
                )
            return (
                cached,
                [("warn", f"Transform {source}->{target} unavailable ({exc}); reusing last known transform.")],
            )

        self._last[(target, source)] = transform
        return (transform, [])
