#!/usr/bin/env python3

# pyre-ignore-all-errors
"""
Copyright (c) 2017-present, Facebook, Inc.
All rights reserved.

This source code is licensed under the BSD-style license found in the
LICENSE file in the root directory of this source tree.
"""

# MariaDB stopped wrapping partitioning clauses in version-gated comments,
# and started quoting partition names, in 10.2
MARIADB_UNWRAPPED_PARTITIONING_VERSION = (10, 2)

# Partitioning was introduced in 5.1, RANGE COLUMNS and LIST COLUMNS in 5.5
PARTITIONING_COMMENT_OPENER = "/*!50100"
COLUMNS_PARTITIONING_COMMENT_OPENER = "/*!50500"
VERSION_GATED_COMMENT_CLOSER = " */"

# MariaDB servers prefix @@version with this for replication compatibility
MARIADB_VERSION_PREFIX = "5.5.5-"

AUTO_PARTITION_NAME_PREFIX = "p"

# Server error numbers
ER_PARSE_ERROR = 1064
ER_SYNTAX_ERROR = 1149
ER_ACCESS_DENIED_ERROR = 1045
ER_BAD_HOST_ERROR = 1042
ER_DBACCESS_DENIED_ERROR = 1044
ER_BAD_DB_ERROR = 1049
ER_HOST_NOT_PRIVILEGED = 1130
ER_HOST_IS_BLOCKED = 1129
ER_SPECIFIC_ACCESS_DENIED_ERROR = 1227

SYNTAX_ERRORS = frozenset((ER_PARSE_ERROR, ER_SYNTAX_ERROR))
ACCESS_ERRORS = frozenset(
    (
        ER_ACCESS_DENIED_ERROR,
        ER_BAD_HOST_ERROR,
        ER_DBACCESS_DENIED_ERROR,
        ER_BAD_DB_ERROR,
        ER_HOST_NOT_PRIVILEGED,
        ER_HOST_IS_BLOCKED,
        ER_SPECIFIC_ACCESS_DENIED_ERROR,
    )
)

# Errors raised by the client library itself (CR_* codes), not by a server
CLIENT_ERROR_MIN = 2000
CLIENT_ERROR_MAX = 2999
