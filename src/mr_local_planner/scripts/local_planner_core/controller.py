from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .geometry import clamp, wrap_angle
from .perception import ConeMetrics
from .state_machine import ActionState
from .tracking import GoalGeometry


@dataclass(frozen=True)
class VelocityCommand:
    v: float = 0.0
    w: float = 0.0


STOP = VelocityCommand()


def heading_scale(heading_err: float) -> float:
    """Linear fall-off of forward speed, zero at and beyond 90 degrees."""
    return max(0.0, 1.0 - abs(heading_err) / (0.5 * math.pi))


class MotionController:
    def __init__(self, cfg) -> None:
        self.cfg = cfg

    def compute_cmd(
        self,
        state: ActionState,
        goal: Optional[GoalGeometry],
        metrics: ConeMetrics,
        side: Optional[float] = None,
    ) -> VelocityCommand:
        if goal is None or state in (ActionState.IDLE, ActionState.INIT, ActionState.REACHED):
            return STOP
        if state is ActionState.TRACKING:
            cmd = self.track(goal)
        else:
            cmd = self.avoid(goal, metrics, side)
        return self.limit(cmd)

    def limit(self, cmd: VelocityCommand) -> VelocityCommand:
        v_max = self.cfg.max_linear_speed
        w_max = self.cfg.max_angular_speed
        v = cmd.v if math.isfinite(cmd.v) else 0.0
        w = cmd.w if math.isfinite(cmd.w) else 0.0
        return VelocityCommand(float(clamp(v, -v_max, v_max)), float(clamp(w, -w_max, w_max)))

    def track(self, goal: GoalGeometry) -> VelocityCommand:
        heading_err = goal.bearing
        w = clamp(self.cfg.k_angular * heading_err, -self.cfg.max_angular_speed, self.cfg.max_angular_speed)
        v = clamp(self.cfg.k_linear * goal.distance, 0.0, self.cfg.max_linear_speed)
        return VelocityCommand(v * heading_scale(heading_err), w)

    def proximity(self, min_distance: float) -> float:
        reach = self.cfg.avoidance_exit_distance
        if reach <= 0.0:
            return 0.0
        return clamp(1.0 - min_distance / reach, 0.0, 1.0)

    def repulsion_weight(self, proximity: float) -> float:
        return clamp(
            self.cfg.avoidance_blend_gain * proximity ** self.cfg.avoidance_blend_exponent,
            0.0,
            1.0,
        )

    def choose_side(self, goal: GoalGeometry, metrics: ConeMetrics) -> float:
        """+1.0 to pass the obstacle on the left, -1.0 on the right; head-on ties go left."""
        rx, ry = metrics.repulsion
        cross = rx * math.sin(goal.bearing) - ry * math.cos(goal.bearing)
        return -1.0 if cross > 1e-9 else 1.0

    def avoidance_heading(
        self,
        goal: GoalGeometry,
        metrics: ConeMetrics,
        side: Optional[float] = None,
    ) -> float:
        rx, ry = metrics.repulsion
        norm = math.hypot(rx, ry)
        if norm < 1e-9:
            return goal.bearing
        if side is None:
            side = self.choose_side(goal, metrics)
        rx, ry = rx / norm, ry / norm

        # Drop the part of the goal direction that points into the obstacle,
        # leaving a slide along it; if that slide runs against ``side``, follow
        # the obstacle tangent on ``side`` instead.
        gx, gy = math.cos(goal.bearing), math.sin(goal.bearing)
        inward = gx * rx + gy * ry
        if inward < 0.0:
            gx -= inward * rx
            gy -= inward * ry
            tx, ty = side * ry, -side * rx
            if gx * tx + gy * ty < 1e-9:
                gx, gy = tx, ty

        away = wrap_angle(math.atan2(ry, rx) - side * 0.25 * math.pi)
        weight = self.repulsion_weight(self.proximity(metrics.min_distance))
        dx = (1.0 - weight) * gx + weight * math.cos(away)
        dy = (1.0 - weight) * gy + weight * math.sin(away)
        if math.hypot(dx, dy) < 1e-9:
            return away
        return math.atan2(dy, dx)

    def avoid(
        self,
        goal: GoalGeometry,
        metrics: ConeMetrics,
        side: Optional[float] = None,
    ) -> VelocityCommand:
        heading_err = self.avoidance_heading(goal, metrics, side)
        w = clamp(self.cfg.k_angular * heading_err, -self.cfg.max_angular_speed, self.cfg.max_angular_speed)

        cap = min(self.cfg.avoidance_speed_cap, self.cfg.max_linear_speed)
        v = min(cap, self.cfg.k_linear * goal.distance)
        v *= 1.0 - self.proximity(metrics.min_distance)
        v *= heading_scale(heading_err)
        return VelocityCommand(clamp(v, 0.0, cap), w)
