#!/usr/bin/env python3
"""
Reactive local planner node.

Drives toward a move_base_simple/goal pose while avoiding obstacles seen in
/scan. Callbacks only buffer the latest message; a fixed-rate timer drains
the buffer and runs one controller tick.

Per tick:
  1. Build the robot-frame scan and refresh the pose
  2. Latch a new goal (start pose = current pose)
  3. Advance IDLE/INIT/TRACKING/AVOIDING/REACHED
  4. Publish Twist to /cmd_vel
"""
from typing import Optional

from rcl_interfaces.msg import SetParametersResult
import rclpy                                      # ROS 2 client library
from rclpy.node import Node                       # base node class
from rclpy.time import Time
from geometry_msgs.msg import PoseStamped, Twist  # message types
from nav_msgs.msg import Odometry                 # odometry message
from sensor_msgs.msg import LaserScan             # laser scan message
from tf2_ros import (
    Buffer,
    ConnectivityException,
    ExtrapolationException,
    LookupException,
    TransformListener,
)

from local_planner_core import (
    FrameTransformCache,
    InputBuffer,
    InvalidConfiguration,
    LocalPlannerCoordinator,
    NavSnapshot,
    Pose2D,
    Transform2D,
    TransformUnavailable,
)
from local_planner_core.config import RUNTIME_PARAMETER_NAMES, coerce_parameters, startup_config


class LocalPlannerNode(Node):
    def __init__(self):
        super().__init__("planner_local")

        self.cfg, startup_events = startup_config(self)
        self._log_events(startup_events)
        self.coordinator = LocalPlannerCoordinator(self.cfg)
        self.snapshot = NavSnapshot()
        self.inputs = InputBuffer()
        self.pending_goal: Optional[PoseStamped] = None
        self.tf_cache = FrameTransformCache()
        self.tf_buffer = Buffer()
        self.tf_listener = TransformListener(self.tf_buffer, self)
        self.tick_count = 0

        # --- subscribers ---------------------------------------------------
        self.create_subscription(LaserScan, self.cfg.scan_topic, self.scan_cb, 10)
        self.create_subscription(Odometry, self.cfg.odom_topic, self.odom_cb, 10)
        self.create_subscription(PoseStamped, self.cfg.goal_topic, self.goal_cb, 10)

        # --- publisher -----------------------------------------------------
        self.cmd_pub = self.create_publisher(Twist, self.cfg.cmd_topic, 1)

        self.add_on_set_parameters_callback(self.parameters_cb)

        # --- timer ---------------------------------------------------------
        self.timer = self.create_timer(1.0 / self.cfg.control_rate, self.control_loop)

        self.get_logger().info(
            f"Local planner started at {self.cfg.control_rate:.1f} Hz "
            f"(safety {self.cfg.safety_distance:.2f} m, goal tol {self.cfg.goal_tolerance:.2f} m)"
        )

    # === callbacks =========================================================
    def scan_cb(self, msg: LaserScan):
        self.inputs.put_scan(msg)

    def odom_cb(self, msg: Odometry):
        self.inputs.put_pose(msg)

    def goal_cb(self, msg: PoseStamped):
        self.pending_goal = msg                      # resolved on the next tick
        self.get_logger().debug(
            f"Goal message in '{msg.header.frame_id}': "
            f"({msg.pose.position.x:.2f}, {msg.pose.position.y:.2f})"
        )

    def parameters_cb(self, params):
        changes = {p.name: p.value for p in params if p.name in RUNTIME_PARAMETER_NAMES}
        fixed = [p.name for p in params if p.name not in RUNTIME_PARAMETER_NAMES and hasattr(self.cfg, p.name)]
        if fixed:
            reason = f"Parameters {fixed} only take effect on restart."
            self.get_logger().warn(reason)
            return SetParametersResult(successful=False, reason=reason)
        if not changes:
            return SetParametersResult(successful=True)

        try:
            candidate = self.cfg.replace(**coerce_parameters(changes))
            self.coordinator.apply_config(candidate)
        except InvalidConfiguration as exc:
            self.get_logger().warn(f"Rejected configuration change: {exc}")
            return SetParametersResult(successful=False, reason=str(exc))

        self.cfg = candidate
        self.get_logger().info(f"Applied configuration change: {changes}")
        return SetParametersResult(successful=True)

    # === control loop ======================================================
    def control_loop(self):
        if self.pending_goal is not None:
            self.inputs.put_goal(self._goal_in_odom(self.pending_goal))
            self.pending_goal = None

        self.snapshot, result = self.coordinator.tick(self.snapshot, self.inputs.drain())
        self._log_events(result.events)

        self.tick_count += 1
        if self.tick_count % max(1, int(self.cfg.control_rate)) == 0:
            self.get_logger().debug(f"diag {result.diagnostics}")

        self._publish(result.linear_x, result.angular_z)

    # === helpers ===========================================================
    def _goal_in_odom(self, msg: PoseStamped) -> Pose2D:
        transform, events = self.tf_cache.resolve(
            self.cfg.odom_frame,
            msg.header.frame_id,
            self._lookup,
        )
        self._log_events(events)
        return transform.apply(Pose2D.from_msg_pose(msg.pose))

    def _lookup(self, target: str, source: str) -> Transform2D:
        try:
            stamped = self.tf_buffer.lookup_transform(target, source, Time())
        except (LookupException, ConnectivityException, ExtrapolationException) as exc:
            raise TransformUnavailable(str(exc)) from exc
        return Transform2D.from_msg(stamped.transform)

    def _log_events(self, events):
        logger = self.get_logger()
        for level, text in events:
            if level == "debug":
                logger.debug(text)
            elif level == "warn":
                logger.warn(text)
            elif level == "error":
                logger.error(text)
            else:
                logger.info(text)

    def _publish(self, lin: float, ang: float):
        msg = Twist()
        msg.linear.x = float(lin)
        msg.linear.y = 0.0
        msg.angular.z = float(ang)
        self.cmd_pub.publish(msg)


def main(args=None):
    rclpy.init(args=args)
    node = LocalPlannerNode()
    try:
        rclpy.spin(node)
    except KeyboardInterrupt:
        pass
    node._publish(0.0, 0.0)                          # leave the base stopped
    node.destroy_node()
    rclpy.shutdown()


if __name__ == "__main__":
    main()
