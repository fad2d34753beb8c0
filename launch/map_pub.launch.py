from launch import LaunchDescription
from launch_ros.actions import Node
from ament_index_python.packages import get_package_share_directory
import os

def generate_launch_description():
    pkg_share = get_package_share_directory('pgm_map_server')
    cfg = os.path.join(pkg_share, 'config')
    return LaunchDescription([
        Node(
            package='pgm_map_server',
            executable='map_pub',
            name='pgm_map_pub',
            output='screen',
            parameters=[{
                'yaml_path': os.path.join(cfg, 'sample_map.yaml'),
                'image_path': '',        # empty → 'image' key of the YAML
                'frame_id': 'map',
                'topic': '/map',
                'decoder': 'opencv',
                'publish_period': 0.0,   # latched, publish once
            }]
        ),
    ])
