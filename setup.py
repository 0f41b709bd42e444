"""Module used for python packaging

Copyright (c) 2018-2020 Machine Zone, Inc. All rights reserved.
"""
import os
import sys

from setuptools import find_packages, setup

# Used when building outside of a git checkout (sdist, tarball)
FALLBACK_VERSION = '1.0.0'


def computeVersion():
    lines = os.popen('git describe --tags 2>/dev/null', 'r').read().splitlines()
    if not lines or not lines[0].startswith('v'):
        return FALLBACK_VERSION

    parts = lines[0].split('-')
    majorMinor = parts[0][1:]
    if len(parts) > 1:
        patch = parts[1]
    else:
        patch = 0

    version = f'{majorMinor}.{patch}'
    return version


if sys.version_info[:2] < (3, 8):
    print("Error: memocache requires Python 3.8")
    sys.exit(1)

ROOT = os.path.realpath(os.path.join(os.path.dirname(__file__)))

VERSION = computeVersion()


dev_requires = ["wheel", "isort", "mypy", "twine", "black", "pre-commit"]
test_requires = ["pytest"]

with open(os.path.join(ROOT, "requirements.txt")) as f:
    install_requires = f.read().splitlines()

setup(
    name="memocache",
    version=VERSION,
    author="Machine Zone, Inc.",
    description="Memoization of pure functions with explicit, collision-safe cache keys.",
    long_description=open(os.path.join(ROOT, "README.md")).read(),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests"]),
    zip_safe=False,
    install_requires=install_requires,
    extras_require={"dev": dev_requires + test_requires, "test": test_requires},
    license="BSD 3",
    include_package_data=True,
    entry_points={
        "console_scripts": [
            "memocache = memocache.runner:main",
        ]
    },
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
    ],
)
