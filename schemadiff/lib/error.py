#!/usr/bin/env python3

"""
Copyright (c) 2017-present, Facebook, Inc.
All rights reserved.

This source code is licensed under the BSD-style license found in the
LICENSE file in the root directory of this source tree.
"""

from enum import auto, IntEnum, unique
from typing import NamedTuple, Optional

import MySQLdb

from . import constant


class ErrorDescriptor(NamedTuple):
    code: int
    desc: str


class SchemaDiffError(Exception):
    @unique
    class Errors(IntEnum):
        UNKNOWN_PARTITION_METHOD = 100
        INVALID_SUBPARTITION_METHOD = auto()
        EMPTY_PARTITION_NAME = auto()
        DUPLICATE_PARTITION_NAME = auto()
        UNEXPECTED_PARTITION_VALUES = auto()
        UNEXPECTED_ALGORITHM_CLAUSE = auto()
        INVALID_FLAVOR = auto()
        PARTITION_CLAUSE_PARSE_ERROR = auto()
        INCONSISTENT_PARTITION_ROWS = auto()
        PARTITION_METHOD_MISMATCH = auto()

    ERR_MAPPING: dict[str, ErrorDescriptor] = {
        Errors.UNKNOWN_PARTITION_METHOD.name: ErrorDescriptor(
            code=Errors.UNKNOWN_PARTITION_METHOD.value,
            desc='"{method}" is not a known partitioning method',
        ),
        Errors.INVALID_SUBPARTITION_METHOD.name: ErrorDescriptor(
            code=Errors.INVALID_SUBPARTITION_METHOD.value,
            desc=(
                "{method} cannot be used for sub-partitioning, only HASH or KEY "
                "methods are allowed"
            ),
        ),
        Errors.EMPTY_PARTITION_NAME.name: ErrorDescriptor(
            code=Errors.EMPTY_PARTITION_NAME.value,
            desc="Partition at position {position} has no name",
        ),
        Errors.DUPLICATE_PARTITION_NAME.name: ErrorDescriptor(
            code=Errors.DUPLICATE_PARTITION_NAME.value,
            desc='Partition name "{name}" is used more than once',
        ),
        Errors.UNEXPECTED_PARTITION_VALUES.name: ErrorDescriptor(
            code=Errors.UNEXPECTED_PARTITION_VALUES.value,
            desc=(
                'Partition "{name}" has values "{values}", but {method} '
                "partitioning does not use them"
            ),
        ),
        Errors.UNEXPECTED_ALGORITHM_CLAUSE.name: ErrorDescriptor(
            code=Errors.UNEXPECTED_ALGORITHM_CLAUSE.value,
            desc="ALGORITHM clause is only valid for KEY partitioning, not {method}",
        ),
        Errors.INVALID_FLAVOR.name: ErrorDescriptor(
            code=Errors.INVALID_FLAVOR.value,
            desc='Unable to parse flavor from "{flavor}"',
        ),
        Errors.PARTITION_CLAUSE_PARSE_ERROR.name: ErrorDescriptor(
            code=Errors.PARTITION_CLAUSE_PARSE_ERROR.value,
            desc="Failed to parse partitioning clause: {msg}",
        ),
        Errors.INCONSISTENT_PARTITION_ROWS.name: ErrorDescriptor(
            code=Errors.INCONSISTENT_PARTITION_ROWS.value,
            desc=(
                'Partition "{name}" reports method {method}, but the table is '
                "partitioned by {expected}"
            ),
        ),
        Errors.PARTITION_METHOD_MISMATCH.name: ErrorDescriptor(
            code=Errors.PARTITION_METHOD_MISMATCH.value,
            desc=(
                'Partition "{name}" uses method {method}, but the table is '
                "partitioned by {expected}"
            ),
        ),
    }

    def __init__(self, err_key: str, desc_kwargs=None):
        self.err_key = err_key
        if desc_kwargs:
            self.desc_kwargs = desc_kwargs
        else:
            self.desc_kwargs = {}
        self.err_entry = self.ERR_MAPPING[err_key]

    @property
    def code(self) -> int:
        return self.err_entry.code

    @property
    def desc(self) -> str:
        description = self.err_entry.desc.format(**self.desc_kwargs)
        return "{}: {}: {}".format(self.code, self.err_key, description)

    def __str__(self) -> str:
        return self.desc


def _server_error_number(err) -> Optional[int]:
    """
    Return the server error number carried by a MySQLdb error, or None if
    err did not come from a server
    """
    if not isinstance(err, MySQLdb.MySQLError):
        return None
    if not err.args or not isinstance(err.args[0], int):
        return None
    errnum = err.args[0]
    if constant.CLIENT_ERROR_MIN <= errnum <= constant.CLIENT_ERROR_MAX:
        return None
    return errnum


def is_database_error(err) -> bool:
    """
    Returns True if err came from a database server, typically as a response
    to a query or connection attempt.
    """
    return _server_error_number(err) is not None


def is_syntax_error(err) -> bool:
    return _server_error_number(err) in constant.SYNTAX_ERRORS


def is_access_error(err) -> bool:
    """
    Returns True if err indicates an authentication or authorization problem,
    at connection time or query time: bad credentials, client host, no access
    to the requested default database, missing privilege, etc.
    There is no sense in immediately retrying the connection or query when
    encountering this type of error.
    """
    return _server_error_number(err) in constant.ACCESS_ERRORS
