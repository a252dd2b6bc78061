from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .geometry import Pose2D
from .perception import ScanFrame
from .state_machine import ActionState
from .tracking import Goal


@dataclass(frozen=True)
class NavSnapshot:
    """Everything the controller carries from one tick to the next."""

    pose: Pose2D = field(default_factory=Pose2D)
    frame: Optional[ScanFrame] = None
    goal: Optional[Goal] = None
    action_state: ActionState = ActionState.IDLE
    # ticks since the last accepted input, None until the first one
    scan_age: Optional[int] = None
    pose_age: Optional[int] = None
    stale: bool = False
    # +1 passes obstacles on the left, -1 on the right; held until the goal ends
    avoid_side: Optional[float] = None


@dataclass(frozen=True)
class TickInputs:
    scan: Any = None
    pose: Any = None
    goal: Optional[Pose2D] = None


class InputBuffer:
    """Latest-value slots filled by transport callbacks and drained once per tick."""

    def __init__(self) -> None:
        self._scan = None
        self._pose = None
        self._goal: Optional[Pose2D] = None

    def put_scan(self, msg) -> None:
        self._scan = msg

    def put_pose(self, msg) -> None:
        self._pose = msg

    def put_goal(self, goal: Pose2D) -> None:
        self._goal = goal

    def drain(self) -> TickInputs:
        inputs = TickInputs(scan=self._scan, pose=self._pose, goal=self._goal)
        self._scan = None
        self._pose = None
        self._goal = None
        return inputs


@dataclass
class TickResult:
    linear_x: float
    angular_z: float
    events: list[tuple[str, str]] = field(default_factory=list)
    diagnostics: dict = field(default_factory=dict)
