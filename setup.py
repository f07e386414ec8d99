from setuptools import find_packages, setup
import os
from glob import glob

package_name = 'wsm_serial_bridge'

setup(
    name=package_name,
    version='1.1.0',
    packages=find_packages(exclude=['test']),
    data_files=[
        ('share/ament_index/resource_index/packages',
            ['resource/' + package_name]),

        ('share/' + package_name, ['package.xml']),

        (os.path.join('share', package_name, 'launch'),
            glob('launch/*.launch.py')),

        (os.path.join('share', package_name, 'config'),
            glob('config/*.yaml')),
    ],
    install_requires=['setuptools', 'pyserial'],
    zip_safe=True,
    maintainer='m-gnr',
    maintainer_email='m_gnr@icloud.com',
    description='ROS2 serial bridge for the Wireless SpeedoMeter sensor',
    license='MIT',
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'serial_node = wsm_serial_bridge.serial_node:main',
        ],
    },
)
