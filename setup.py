from setuptools import setup
package_name = 'pgm_map_server'

setup(
    name=package_name,
    version='0.0.1',
    packages=[package_name],
    data_files=[
        ('share/ament_index/resource_index/packages', ['resource/' + package_name]),
        ('share/' + package_name, ['package.xml']),
        ('share/' + package_name + '/launch', ['launch/map_pub.launch.py']),
        ('share/' + package_name + '/config', ['config/sample_map.yaml', 'config/sample_map.pgm']),
    ],
    install_requires=['setuptools', 'numpy', 'opencv-python-headless', 'Pillow', 'PyYAML'],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    zip_safe=True,
    maintainer='you',
    maintainer_email='you@example.com',
    description='Static map publisher (YAML + PGM → OccupancyGrid)',
    license='Apache-2.0',
    entry_points={'console_scripts': ['map_pub = pgm_map_server.map_pub:main']},
)
