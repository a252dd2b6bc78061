from __future__ import annotations

import enum
from typing import Optional


class ActionState(enum.Enum):
    IDLE = "idle"
    INIT = "init"
    TRACKING = "tracking"
    AVOIDING = "avoiding"
    REACHED = "reached"


class ActionStateMachine:
    def __init__(self, cfg) -> None:
        self.cfg = cfg

    def next_state(
        self,
        state: ActionState,
        goal_distance: Optional[float],
        min_obstacle_distance: float,
        goal_event: bool,
    ) -> ActionState:
        """Return the state for this tick.

        Depends only on the arguments and the thresholds in ``cfg``, so
        equal inputs always yield the same state.
        """
        if goal_event:
            return ActionState.INIT

        if state is ActionState.IDLE:
            return ActionState.IDLE
        if state is ActionState.INIT:
            return ActionState.TRACKING
        if state is ActionState.REACHED:
            return ActionState.IDLE

        if goal_distance is None:
            # goal lost without a terminal transition
            return ActionState.IDLE

        if state is ActionState.TRACKING and min_obstacle_distance < self.cfg.safety_distance:
            return ActionState.AVOIDING
        if state is ActionState.AVOIDING and min_obstacle_distance > self.cfg.avoidance_exit_distance:
            state = ActionState.TRACKING

        if goal_distance < self.cfg.goal_tolerance:
            return ActionState.REACHED
        return state
