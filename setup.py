"""Setup script for Playback Scrobbler."""

from setuptools import setup, find_packages
from pathlib import Path

# Read requirements
requirements_path = Path(__file__).parent / 'requirements.txt'
with open(requirements_path, 'r', encoding='utf-8') as f:
    requirements = [
        line.strip() for line in f
        if line.strip() and not line.startswith('#')
    ]

# Read README
readme_path = Path(__file__).parent / 'README.md'
with open(readme_path, 'r', encoding='utf-8') as f:
    long_description = f.read()

setup(
    name='playback-scrobbler',
    version='0.1.0',
    description='Background daemon that scrobbles what your local media players are playing',
    long_description=long_description,
    long_description_content_type='text/markdown',
    author='Playback Scrobbler Contributors',
    python_requires='>=3.12',
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=requirements,
    extras_require={
        # needs the libdbus development headers to build
        'dbus': ['dbus-python>=1.3'],
        'test': ['pytest>=7.0', 'pytest-mock>=3.10'],
    },
    entry_points={
        'console_scripts': [
            'playback-scrobbler=playback_scrobbler.cli:app',
        ],
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: End Users/Desktop',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.12',
        'Programming Language :: Python :: 3.13',
        'Topic :: Multimedia :: Sound/Audio',
    ],
)
