#!/usr/bin/python3
# Setup file for wit
# Copyright (C) 2026 The wit developers
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later

from setuptools import setup

setup(
    name="wit",
    version="0.1.0",
    description="Content-addressed object storage for a minimal version control system",
    license="Apache-2.0 OR GPL-2.0-or-later",
    python_requires=">=3.10",
    packages=["wit"],
    package_data={"": ["py.typed"]},
    extras_require={
        "dev": ["ruff==0.14.3", "mypy==1.18.2"],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Operating System :: POSIX",
        "Topic :: Software Development :: Version Control",
    ],
)
