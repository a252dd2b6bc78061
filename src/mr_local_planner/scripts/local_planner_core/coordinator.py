from __future__ import annotations

import dataclasses
import math
from typing import Optional

from .controller import STOP, MotionController
from .errors import MalformedScan
from .perception import RangeFrameBuilder, ScanAnalyzer
from .state import NavSnapshot, TickInputs, TickResult
from .state_machine import ActionState, ActionStateMachine
from .tracking import GoalManager, PoseTracker


def _age(age: Optional[int]) -> Optional[int]:
    return None if age is None else age + 1


def _round(value: Optional[float], ndigits: int = 2) -> Optional[float]:
    if value is None or not math.isfinite(value):
        return value
    return round(value, ndigits)


class LocalPlannerCoordinator:
    def __init__(self, cfg) -> None:
        self.cfg = cfg.validate()
        self.frame_builder = RangeFrameBuilder(cfg)
        self.scan_analyzer = ScanAnalyzer()
        self.pose_tracker = PoseTracker()
        self.goal_manager = GoalManager()
        self.state_machine = ActionStateMachine(cfg)
        self.controller = MotionController(cfg)

    def apply_config(self, cfg) -> None:
        """Swap in ``cfg`` for the next tick; raises InvalidConfiguration and keeps the old one."""
        cfg.validate()
        self.cfg = cfg
        self.frame_builder.cfg = cfg
        self.state_machine.cfg = cfg
        self.controller.cfg = cfg

    def tick(self, snapshot: NavSnapshot, inputs: TickInputs) -> tuple[NavSnapshot, TickResult]:
        cfg = self.cfg
        events: list[tuple[str, str]] = []

        frame = snapshot.frame
        scan_age = _age(snapshot.scan_age)
        if inputs.scan is not None:
            try:
                frame = self.frame_builder.build(inputs.scan)
                scan_age = 0
            except MalformedScan as exc:
                events.append(("warn", f"Malformed scan skipped, keeping previous frame: {exc}"))

        pose = snapshot.pose
        pose_age = _age(snapshot.pose_age)
        if inputs.pose is not None:
            pose = self.pose_tracker.update(inputs.pose)
            pose_age = 0

        goal = snapshot.goal
        goal_event = inputs.goal is not None
        if goal_event:
            if goal is not None:
                events.append(("info", "Previous goal superseded by new goal."))
            goal = self.goal_manager.accept(inputs.goal, pose)
            events.append(
                (
                    "info",
                    f"Goal received: ({goal.target.x:.2f}, {goal.target.y:.2f}, {goal.target.theta:.2f}), "
                    f"start latched at ({pose.x:.2f}, {pose.y:.2f}).",
                )
            )

        scan_stale = scan_age is None or scan_age > cfg.stale_tick_threshold
        pose_stale = pose_age is None or pose_age > cfg.stale_tick_threshold
        occluded = (
            not scan_stale
            and snapshot.action_state is ActionState.AVOIDING
            and frame is not None
            and frame.valid_count == 0
        )

        metrics = self.scan_analyzer.analyze(frame, cfg)
        min_obstacle = 0.0 if (scan_stale or occluded) else metrics.min_distance

        geometry = self.goal_manager.geometry(goal, pose)
        goal_distance = None
        if geometry is not None:
            # an outdated pose must not complete the goal
            goal_distance = math.inf if pose_stale else geometry.distance
        state = self.state_machine.next_state(
            snapshot.action_state,
            goal_distance,
            min_obstacle,
            goal_event,
        )
        if state is not snapshot.action_state:
            events.append(("info", f"Action state {snapshot.action_state.name} -> {state.name}."))
        if state is ActionState.IDLE:
            goal = None
            geometry = None

        stale = goal is not None and (scan_stale or pose_stale or occluded)
        if stale and not snapshot.stale:
            if occluded:
                reason = "scan has no valid samples while avoiding"
            else:
                reason = f"scan age {scan_age}, pose age {pose_age}, threshold {cfg.stale_tick_threshold}"
            events.append(("warn", f"Stale input ({reason}); holding zero command."))
        elif snapshot.stale and not stale and goal is not None:
            events.append(("info", "Inputs fresh again; resuming control."))

        avoid_side = None if (goal_event or goal is None) else snapshot.avoid_side
        if (
            state is ActionState.AVOIDING
            and avoid_side is None
            and not stale
            and metrics.points_in_cone > 0
        ):
            avoid_side = self.controller.choose_side(geometry, metrics)
            events.append(
                ("info", f"Passing obstacles on the {'left' if avoid_side > 0 else 'right'} for this goal.")
            )

        if stale:
            cmd = STOP
            mode = "stale_input"
        else:
            cmd = self.controller.compute_cmd(state, geometry, metrics, avoid_side)
            mode = state.value
        cmd = self.controller.limit(cmd)

        diagnostics = {
            "mode": mode,
            "state": state.name,
            "goal": None if goal is None else [round(goal.target.x, 2), round(goal.target.y, 2)],
            "dist_goal": None if geometry is None else _round(geometry.distance),
            "bearing": None if geometry is None else _round(geometry.bearing),
            "min_obstacle": _round(min_obstacle),
            "scan_age": scan_age,
            "pose_age": pose_age,
            "dist_from_start": _round(self.goal_manager.progress(goal, pose)),
            "avoid_side": avoid_side,
        }

        next_snapshot = dataclasses.replace(
            snapshot,
            pose=pose,
            frame=frame,
            goal=goal,
            action_state=state,
            scan_age=scan_age,
            pose_age=pose_age,
            stale=stale,
            avoid_side=avoid_side,
        )
        return (
            next_snapshot,
            TickResult(linear_x=cmd.v, angular_z=cmd.w, events=events, diagnostics=diagnostics),
        )
