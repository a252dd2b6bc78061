from __future__ import annotations

import dataclasses
import math
from dataclasses import dataclass, field

from .errors import InvalidConfiguration


@dataclass
class LocalPlannerConfig:
    safety_distance: float = 0.5
    hysteresis_margin: float = 0.15
    goal_tolerance: float = 0.2
    k_linear: float = 0.5
    k_angular: float = 1.5
    max_linear_speed: float = 0.5
    max_angular_speed: float = 1.0
    avoidance_speed_cap: float = 0.2
    safety_cone_half_angle_deg: float = 40.0
    stale_tick_threshold: int = 5
    mount_offset_x: float = 0.22
    avoidance_blend_gain: float = 1.5
    avoidance_blend_exponent: float = 1.0
    control_rate: float = 10.0
    odom_frame: str = "odom"
    scan_topic: str = "scan"
    odom_topic: str = "odom"
    goal_topic: str = "move_base_simple/goal"
    cmd_topic: str = "cmd_vel"

    cone_half: float = field(init=False)

    def __post_init__(self) -> None:
        self.cone_half = math.radians(float(self.safety_cone_half_angle_deg))

    @property
    def avoidance_exit_distance(self) -> float:
        return self.safety_distance + self.hysteresis_margin

    def replace(self, **changes) -> "LocalPlannerConfig":
        return dataclasses.replace(self, **changes)

    def validate(self) -> "LocalPlannerConfig":
        for name in _FLOAT_FIELDS | {"stale_tick_threshold"}:
            value = getattr(self, name)
            if not math.isfinite(value):
                raise InvalidConfiguration(f"{name} must be finite, got {value!r}")
        for name in _NON_NEGATIVE_FIELDS:
            if getattr(self, name) < 0.0:
                raise InvalidConfiguration(f"{name} must be non-negative, got {getattr(self, name)!r}")
        if not 0.0 < self.safety_cone_half_angle_deg <= 180.0:
            raise InvalidConfiguration(
                f"safety_cone_half_angle_deg must be in (0, 180], got {self.safety_cone_half_angle_deg!r}"
            )
        if self.stale_tick_threshold < 1:
            raise InvalidConfiguration(
                f"stale_tick_threshold must be at least 1, got {self.stale_tick_threshold!r}"
            )
        if self.control_rate <= 0.0:
            raise InvalidConfiguration(f"control_rate must be positive, got {self.control_rate!r}")
        return self

    @classmethod
    def from_node(cls, node) -> "LocalPlannerConfig":
        defaults = cls()
        for key in PARAMETER_NAMES:
            node.declare_parameter(key, getattr(defaults, key))

        kwargs = {
            key: node.get_parameter(key).value
            for key in PARAMETER_NAMES
        }
        return cls(**coerce_parameters(kwargs))


_FLOAT_FIELDS = {
    "safety_distance",
    "hysteresis_margin",
    "goal_tolerance",
    "k_linear",
    "k_angular",
    "max_linear_speed",
    "max_angular_speed",
    "avoidance_speed_cap",
    "safety_cone_half_angle_deg",
    "mount_offset_x",
    "avoidance_blend_gain",
    "avoidance_blend_exponent",
    "control_rate",
}
# mount_offset_x may point backwards
_NON_NEGATIVE_FIELDS = _FLOAT_FIELDS - {"mount_offset_x"}
_INT_FIELDS = {"stale_tick_threshold"}
_STR_FIELDS = {"odom_frame", "scan_topic", "odom_topic", "goal_topic", "cmd_topic"}

PARAMETER_NAMES = tuple(
    f.name for f in dataclasses.fields(LocalPlannerConfig) if f.init
)
RUNTIME_PARAMETER_NAMES = frozenset(_FLOAT_FIELDS | _INT_FIELDS) - {"control_rate", "mount_offset_x"}


def coerce_parameters(values: dict) -> dict:
    out = {}
    for key, value in values.items():
        try:
            if key in _FLOAT_FIELDS:
                out[key] = float(value)
            elif key in _INT_FIELDS:
                out[key] = int(value)
            elif key in _STR_FIELDS:
                out[key] = str(value)
            else:
                raise InvalidConfiguration(f"Unknown parameter {key!r}")
        except (TypeError, ValueError, OverflowError) as exc:
            raise InvalidConfiguration(f"{key} has an invalid value {value!r}") from exc
    return out


def startup_config(node) -> tuple[LocalPlannerConfig, list[tuple[str, str]]]:
    """Load launch-time parameters, falling back to defaults instead of failing startup.

    Topic and frame names are kept from the node when only the numeric values are bad.
    """
    try:
        cfg = LocalPlannerConfig.from_node(node)
    except InvalidConfiguration as exc:
        return (
            LocalPlannerConfig(),
            [("warn", f"Invalid launch parameters ({exc}); using defaults.")],
        )
    try:
        return (cfg.validate(), [])
    except InvalidConfiguration as exc:
        names = {name: getattr(cfg, name) for name in _STR_FIELDS}
        return (
            LocalPlannerConfig(**names),
            [("warn", f"Invalid launch parameters ({exc}); using defaults.")],
        )
