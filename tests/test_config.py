"""Tests for LocalPlannerConfig loading and validation."""

from __future__ import annotations

import math
from types import SimpleNamespace

import pytest

from local_planner_core import InvalidConfiguration, LocalPlannerConfig, LocalPlannerCoordinator
from local_planner_core.config import PARAMETER_NAMES, RUNTIME_PARAMETER_NAMES, coerce_parameters, startup_config


class FakeNode:
    """Just enough of rclpy.node.Node for declare/get parameter."""

    def __init__(self, overrides: dict | None = None) -> None:
        self.overrides = overrides or {}
        self.declared: dict = {}

    def declare_parameter(self, name, value):
        self.declared[name] = self.overrides.get(name, value)

    def get_parameter(self, name):
        return SimpleNamespace(value=self.declared[name])


def test_defaults_are_valid() -> None:
    cfg = LocalPlannerConfig()
    assert cfg.validate() is cfg
    assert cfg.cone_half == pytest.approx(math.radians(40.0))
    assert cfg.avoidance_exit_distance == pytest.approx(0.65)


def test_from_node_declares_every_parameter() -> None:
    node = FakeNode({"safety_distance": 1, "stale_tick_threshold": 3.0, "scan_topic": "base_scan"})
    cfg = LocalPlannerConfig.from_node(node)

    assert set(node.declared) == set(PARAMETER_NAMES)
    assert "cone_half" not in node.declared
    assert cfg.safety_distance == 1.0 and isinstance(cfg.safety_distance, float)
    assert cfg.stale_tick_threshold == 3 and isinstance(cfg.stale_tick_threshold, int)
    assert cfg.scan_topic == "base_scan"


def test_startup_config_clean_launch() -> None:
    cfg, events = startup_config(FakeNode({"safety_distance": 0.8}))
    assert cfg.safety_distance == 0.8
    assert events == []


def test_startup_config_falls_back_on_invalid_values() -> None:
    node = FakeNode({"max_linear_speed": -1.0, "scan_topic": "base_scan"})
    cfg, events = startup_config(node)

    assert set(node.declared) == set(PARAMETER_NAMES)
    assert cfg.max_linear_speed == LocalPlannerConfig().max_linear_speed
    assert cfg.scan_topic == "base_scan"
    assert [level for level, _ in events] == ["warn"]
    assert "max_linear_speed" in events[0][1]
    LocalPlannerCoordinator(cfg)


def test_startup_config_falls_back_on_garbage_types() -> None:
    cfg, events = startup_config(FakeNode({"k_linear": "fast"}))
    assert cfg == LocalPlannerConfig()
    assert events[0][0] == "warn"


def test_replace_recomputes_derived_fields() -> None:
    cfg = LocalPlannerConfig().replace(safety_cone_half_angle_deg=90.0)
    assert cfg.cone_half == pytest.approx(math.pi / 2)


@pytest.mark.parametrize(
    "changes",
    [
        {"safety_distance": -0.1},
        {"max_linear_speed": -1.0},
        {"max_angular_speed": -0.5},
        {"avoidance_speed_cap": -0.2},
        {"goal_tolerance": float("nan")},
        {"k_linear": float("inf")},
        {"safety_cone_half_angle_deg": 0.0},
        {"safety_cone_half_angle_deg": 200.0},
        {"stale_tick_threshold": 0},
        {"control_rate": 0.0},
    ],
)
def test_invalid_values_rejected(changes: dict) -> None:
    with pytest.raises(InvalidConfiguration):
        LocalPlannerConfig().replace(**changes).validate()


def test_negative_mount_offset_allowed() -> None:
    LocalPlannerConfig(mount_offset_x=-0.1).validate()


def test_coerce_rejects_unknown_and_garbage() -> None:
    with pytest.raises(InvalidConfiguration):
        coerce_parameters({"warp_drive": 1.0})
    with pytest.raises(InvalidConfiguration):
        coerce_parameters({"k_linear": "fast"})
    assert coerce_parameters({"k_linear": 2}) == {"k_linear": 2.0}


def test_runtime_parameters_cover_tunables() -> None:
    assert {
        "safety_distance",
        "goal_tolerance",
        "hysteresis_margin",
        "k_linear",
        "k_angular",
        "max_linear_speed",
        "max_angular_speed",
        "avoidance_speed_cap",
        "safety_cone_half_angle_deg",
        "stale_tick_threshold",
    } <= RUNTIME_PARAMETER_NAMES
    assert "scan_topic" not in RUNTIME_PARAMETER_NAMES


def test_rejected_config_keeps_previous(cfg) -> None:
    coordinator = LocalPlannerCoordinator(cfg)
    with pytest.raises(InvalidConfiguration):
        coordinator.apply_config(cfg.replace(max_linear_speed=-1.0))
    assert coordinator.cfg is cfg
    assert coordinator.controller.cfg is cfg


def test_accepted_config_reaches_components(cfg) -> None:
    coordinator = LocalPlannerCoordinator(cfg)
    updated = cfg.replace(safety_distance=0.9)
    coordinator.apply_config(updated)
    assert coordinator.cfg is updated
    assert coordinator.state_machine.cfg is updated
    assert coordinator.frame_builder.cfg is updated
