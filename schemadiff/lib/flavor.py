#!/usr/bin/env python3

# pyre-ignore-all-errors
"""
Copyright (c) 2017-present, Facebook, Inc.
All rights reserved.

This source code is licensed under the BSD-style license found in the
LICENSE file in the root directory of this source tree.
"""

from enum import Enum
from typing import Tuple

from typing_extensions import Self

from . import constant
from .error import SchemaDiffError


class Vendor(Enum):
    UNKNOWN = "unknown"
    MYSQL = "mysql"
    PERCONA = "percona"
    MARIADB = "mariadb"


def _parse_version(version_str: str) -> Tuple[int, int, int]:
    """
    Parse the leading numeric part of a version string.
    Examples: "8.0.32", "10.2.14-MariaDB-log", "5.7"
    """
    segments = version_str.split("-")[0].split(".")
    if not segments or len(segments) > 3:
        raise ValueError(version_str)
    numbers = [int(s) for s in segments]
    while len(numbers) < 3:
        numbers.append(0)
    return numbers[0], numbers[1], numbers[2]


class Flavor:
    """
    A database server vendor along with its version. Rendering of DDL differs
    between vendors and versions, so everything rendering partitioning clauses
    takes one of these.
    """

    __slots__ = ("_vendor", "_major", "_minor", "_release")

    def __init__(self, vendor: Vendor, major: int, minor: int = 0, release: int = 0):
        self._vendor = vendor
        self._major = major
        self._minor = minor
        self._release = release

    @classmethod
    def parse(cls, flavor_str: str) -> Self:
        """
        @param flavor_str: "vendor:version" string, for example "mysql:5.7"
        or "mariadb:10.2.14"
        """
        vendor_name, sep, version_str = flavor_str.strip().lower().partition(":")
        try:
            vendor = Vendor(vendor_name)
            if not sep:
                raise ValueError(flavor_str)
            return cls(vendor, *_parse_version(version_str))
        except ValueError:
            raise SchemaDiffError("INVALID_FLAVOR", {"flavor": flavor_str})

    @classmethod
    def from_server(cls, version: str, version_comment: str = "") -> Self:
        """
        @param version: Value of @@version, e.g. 10.2.14-MariaDB-log
        @param version_comment: Value of @@version_comment
        """
        if version.startswith(constant.MARIADB_VERSION_PREFIX) and "MariaDB" in version:
            version = version[len(constant.MARIADB_VERSION_PREFIX) :]
        comment = version_comment.lower()
        if "mariadb" in version.lower() or "mariadb" in comment:
            vendor = Vendor.MARIADB
        elif "percona" in comment:
            vendor = Vendor.PERCONA
        elif "mysql" in comment:
            vendor = Vendor.MYSQL
        else:
            vendor = Vendor.UNKNOWN
        try:
            return cls(vendor, *_parse_version(version))
        except ValueError:
            raise SchemaDiffError("INVALID_FLAVOR", {"flavor": version})

    @property
    def vendor(self) -> Vendor:
        return self._vendor

    @property
    def major(self) -> int:
        """
        Major version is the first segment of a version string.
        E.g. 10 in 10.2.14
        """
        return self._major

    @property
    def minor(self) -> int:
        """
        Minor version is the second segment of a version string.
        E.g. 2 in 10.2.14
        """
        return self._minor

    @property
    def release(self) -> int:
        return self._release

    @property
    def is_mariadb(self) -> bool:
        return self._vendor is Vendor.MARIADB

    def min_version(self, major: int, minor: int = 0, release: int = 0) -> bool:
        """
        Return True if this flavor's version is at least major.minor.release
        """
        return (self._major, self._minor, self._release) >= (major, minor, release)

    def vendor_min_version(
        self, vendor: Vendor, major: int, minor: int = 0, release: int = 0
    ) -> bool:
        """
        Return True if this flavor is the given vendor, at or above the given
        version
        """
        return self._vendor is vendor and self.min_version(major, minor, release)

    def _key(self):
        return (self._vendor, self._major, self._minor, self._release)

    def __eq__(self, other):
        if not isinstance(other, Flavor):
            return NotImplemented
        return self._key() == other._key()

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash(self._key())

    def __str__(self):
        return "{}:{}.{}".format(self._vendor.value, self._major, self._minor)

    def __repr__(self):
        return "Flavor({}:{}.{}.{})".format(
            self._vendor.value, self._major, self._minor, self._release
        )
