"""
Setup script for ARP Scan.

Usage:
    pip install .
    pip install -e ".[test]"

Installs the ``arp-scan`` command. Scanning needs root/administrator
privileges and libpcap (or Npcap on Windows) for scapy's raw sockets.
"""
from setuptools import setup

setup(
    name='arp-scan',
    version='1.0.0',
    description='Fast ARP network scanner with label and hosts-file support',
    python_requires='>=3.8',
    packages=[
        # Our packages
        'config',
        'discovery',
        'storage',
    ],
    py_modules=['arp_scan'],
    install_requires=[
        'psutil',
        'scapy',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    entry_points={
        'console_scripts': [
            'arp-scan=arp_scan:main',
        ],
    },
)
