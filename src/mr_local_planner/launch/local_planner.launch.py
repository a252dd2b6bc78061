#!/usr/bin/env python3
"""
Local Planner Launch - reactive goal tracking with obstacle avoidance.
Remap scan/odom/cmd_vel here when the robot publishes on other names.
"""
from launch import LaunchDescription
from launch.actions import DeclareLaunchArgument
from launch.substitutions import LaunchConfiguration
from launch_ros.actions import Node
from launch_ros.parameter_descriptions import ParameterValue


def generate_launch_description():
    use_sim_time = LaunchConfiguration('use_sim_time')
    safety_distance = LaunchConfiguration('safety_distance')
    max_linear_speed = LaunchConfiguration('max_linear_speed')

    declare_sim_time = DeclareLaunchArgument('use_sim_time', default_value='true')
    declare_safety = DeclareLaunchArgument('safety_distance', default_value='0.5')
    declare_speed = DeclareLaunchArgument('max_linear_speed', default_value='0.5')

    local_planner = Node(
        package='mr_local_planner',
        executable='local_planner_node.py',
        name='planner_local',
        parameters=[{
            'use_sim_time': use_sim_time,
            'safety_distance': ParameterValue(safety_distance, value_type=float),
            'max_linear_speed': ParameterValue(max_linear_speed, value_type=float),
        }],
        remappings=[
            ('scan', '/base_scan'),
        ],
        output='screen',
    )

    return LaunchDescription([
        declare_sim_time,
        declare_safety,
        declare_speed,
        local_planner,
    ])
