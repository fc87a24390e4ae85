#!/usr/bin/env python3

# pyre-ignore-all-errors
"""
Copyright (c) 2017-present, Facebook, Inc.
All rights reserved.

This source code is licensed under the BSD-style license found in the
LICENSE file in the root directory of this source tree.
"""

fetch_table_partitions = (
    "SELECT p.PARTITION_NAME AS partition_name, "
    "p.SUBPARTITION_NAME AS subpartition_name, "
    "p.PARTITION_METHOD AS partition_method, "
    "p.SUBPARTITION_METHOD AS subpartition_method, "
    "p.PARTITION_EXPRESSION AS partition_expression, "
    "p.SUBPARTITION_EXPRESSION AS subpartition_expression, "
    "p.PARTITION_DESCRIPTION AS partition_description, "
    "p.PARTITION_COMMENT AS partition_comment "
    "FROM information_schema.PARTITIONS p "
    "WHERE p.TABLE_SCHEMA = %s AND p.TABLE_NAME = %s "
    "AND p.PARTITION_NAME IS NOT NULL "
    "ORDER BY p.PARTITION_ORDINAL_POSITION, p.SUBPARTITION_ORDINAL_POSITION"
)

"""
Section for SQL components
Following functions only generates SQL components which can be a part of SQL.
"""


def escape(literal):
    """
    Escape the backtick in table/column/partition name

    @param literal:  name string to escape
    @type  literal:  string

    @return:  escaped string
    @rtype :  string
    """
    return literal.replace("`", "``")


def escape_identifier(name) -> str:
    """
    Quote a name with backticks, the way SHOW CREATE TABLE does
    """
    return "`{}`".format(escape(name))


_CREATE_TABLE_VALUE_ESCAPES = (
    ("\\", "\\\\"),
    ("\0", "\\0"),
    ("'", "''"),
    ("\n", "\\n"),
    ("\r", "\\r"),
)


def escape_value_for_create_table(value) -> str:
    """
    Escape a string literal such as a table, column or partition comment so
    that it matches SHOW CREATE TABLE output. The result is meant to be placed
    between single quotes.
    """
    # Backslash goes first, so escapes added afterwards aren't doubled
    for char, replacement in _CREATE_TABLE_VALUE_ESCAPES:
        value = value.replace(char, replacement)
    return value
