from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .geometry import Pose2D


class PoseTracker:
    """Last-write-wins pose holder; no filtering."""

    def update(self, msg) -> Pose2D:
        # Odometry carries pose.pose, PoseStamped carries pose
        pose = msg.pose.pose if hasattr(msg.pose, "pose") else msg.pose
        return Pose2D.from_msg_pose(pose)


@dataclass(frozen=True)
class Goal:
    target: Pose2D
    start: Pose2D


@dataclass(frozen=True)
class GoalGeometry:
    dx_local: float
    dy_local: float
    distance: float
    bearing: float


class GoalManager:
    def accept(self, target: Pose2D, current: Pose2D) -> Goal:
        return Goal(target=target, start=current)

    def geometry(self, goal: Optional[Goal], current: Pose2D) -> Optional[GoalGeometry]:
        if goal is None:
            return None
        dx_local, dy_local = current.to_local(goal.target.x, goal.target.y)
        return GoalGeometry(
            dx_local=dx_local,
            dy_local=dy_local,
            distance=math.sqrt(dx_local * dx_local + dy_local * dy_local),
            bearing=math.atan2(dy_local, dx_local),
        )

    @staticmethod
    def progress(goal: Optional[Goal], current: Pose2D) -> Optional[float]:
        if goal is None:
            return None
        return math.hypot(current.x - goal.start.x, current.y - goal.start.y)
