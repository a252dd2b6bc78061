"""Core layered modules for the reactive local planner."""

from .config import LocalPlannerConfig
from .controller import MotionController, VelocityCommand
from .coordinator import LocalPlannerCoordinator
from .errors import InvalidConfiguration, LocalPlannerError, MalformedScan, TransformUnavailable
from .geometry import Pose2D
from .perception import RangeFrameBuilder, ScanFrame
from .state import InputBuffer, NavSnapshot, TickInputs, TickResult
from .state_machine import ActionState, ActionStateMachine
from .tracking import Goal, GoalManager, PoseTracker
from .transforms import FrameTransformCache, Transform2D

__all__ = [
    "ActionState",
    "ActionStateMachine",
    "FrameTransformCache",
    "Goal",
    "GoalManager",
    "InputBuffer",
    "InvalidConfiguration",
    "LocalPlannerConfig",
    "LocalPlannerCoordinator",
    "LocalPlannerError",
    "MalformedScan",
    "MotionController",
    "NavSnapshot",
    "Pose2D",
    "PoseTracker",
    "RangeFrameBuilder",
    "ScanFrame",
    "TickInputs",
    "TickResult",
    "Transform2D",
    "TransformUnavailable",
    "VelocityCommand",
]
