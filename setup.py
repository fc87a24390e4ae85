#!/usr/bin/env python3
"""
Copyright (c) 2017-present, Facebook, Inc.
All rights reserved.

This source code is licensed under the BSD-style license found in the
LICENSE file in the root directory of this source tree.
"""

from setuptools import setup, find_packages

install_requires = [
    "pyparsing>=3.1",
    "mysqlclient",
    "typing_extensions",
]


setup(
    name="schemadiff",
    version="0.0.1",
    packages=find_packages(include=["schemadiff", "schemadiff.*"]),
    description="Partitioning DDL rendering and diffing for MySQL and MariaDB",
    long_description=open("README.rst").read(),
    install_requires=install_requires,
    extras_require={"test": ["pytest"]},
    include_package_data=True,
    zip_safe=False,
    python_requires=">=3.9",
)
