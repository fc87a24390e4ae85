"""
Copyright (c) 2017-present, Facebook, Inc.
All rights reserved.

This source code is licensed under the BSD-style license found in the
LICENSE file in the root directory of this source tree.
"""

from .diff import (
    diff_partitioning,
    ModifyPartitions,
    PartitionAlterClause,
    PartitionAlterType,
    PartitionBy,
    RemovePartitioning,
)
from .introspect import (
    fetch_table_partitioning,
    partition_clause_options,
    PartitionClauseOptions,
    PartitionClauseParser,
    partitioning_from_rows,
)
from .models import (
    Partition,
    partitioning_definition,
    PartitionListMode,
    PartitionMethod,
    TablePartitioning,
    version_gate_wrapper,
)

__all__ = [
    "diff_partitioning",
    "fetch_table_partitioning",
    "ModifyPartitions",
    "Partition",
    "PartitionAlterClause",
    "PartitionAlterType",
    "PartitionBy",
    "partition_clause_options",
    "PartitionClauseOptions",
    "PartitionClauseParser",
    "partitioning_definition",
    "partitioning_from_rows",
    "PartitionListMode",
    "PartitionMethod",
    "RemovePartitioning",
    "TablePartitioning",
    "version_gate_wrapper",
]
