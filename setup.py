# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Setup configuration for npm-sweep, the npm package retirement plan engine
"""

from setuptools import setup, find_packages

setup(
    name="npm-sweep",
    version="1.0.0",
    description="Plan, validate and execute the retirement of npm packages",
    author="Jason Cafarelli",
    packages=find_packages(include=["npm_sweep", "npm_sweep.*"]),
    python_requires=">=3.11",
    install_requires=[
        "httpx>=0.27.0",
        "pydantic>=2.5.0",
        "PyYAML>=6.0",
        "python-dotenv>=1.0.0",
        "aiofiles>=23.2.1",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.23.0",
        ]
    },
)
