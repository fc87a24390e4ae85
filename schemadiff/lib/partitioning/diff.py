"""
Copyright (c) 2017-present, Facebook, Inc.
All rights reserved.

This source code is licensed under the BSD-style license found in the
LICENSE file in the root directory of this source tree.
"""

import logging
from enum import Enum
from typing import List, Optional, Tuple

from ..flavor import Flavor
from .models import partitioning_definition, TablePartitioning

log = logging.getLogger(__name__)


class BaseAlterType(Enum):
    pass


class PartitionAlterType(BaseAlterType):
    ADD_PARTITIONING = "add_partitioning"
    REMOVE_PARTITIONING = "remove_partitioning"
    CHANGE_PARTITIONING = "change_partitioning"
    MODIFY_PARTITIONS = "modify_partitions"


class PartitionAlterClause(object):
    """
    One piece of an ALTER TABLE statement affecting partitioning. Turning
    these into a complete statement is up to the table diff engine.
    """

    def _attrs(self) -> tuple:
        return ()

    @property
    def alter_type(self) -> PartitionAlterType:
        raise NotImplementedError

    def to_sql(self, flavor: Flavor) -> str:
        raise NotImplementedError

    def __eq__(self, other):
        if type(self) is not type(other):
            return False
        return self._attrs() == other._attrs()

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash((type(self).__name__,) + self._attrs())

    def __repr__(self):
        return "{}({})".format(
            self.__class__.__name__, ", ".join(repr(a) for a in self._attrs())
        )


class PartitionBy(PartitionAlterClause):
    """
    Partitions a table, or re-partitions it when repartition is set. The two
    need different DDL from the table diff engine, since a re-partition
    changes the method or expression rather than just the partition list.
    """

    def __init__(self, partitioning: TablePartitioning, repartition: bool = False):
        self.partitioning = partitioning
        self.repartition = repartition

    def _attrs(self) -> tuple:
        return (self.partitioning, self.repartition)

    @property
    def alter_type(self) -> PartitionAlterType:
        if self.repartition:
            return PartitionAlterType.CHANGE_PARTITIONING
        return PartitionAlterType.ADD_PARTITIONING

    def to_sql(self, flavor: Flavor) -> str:
        return partitioning_definition(self.partitioning, flavor).strip()


class RemovePartitioning(PartitionAlterClause):
    @property
    def alter_type(self) -> PartitionAlterType:
        return PartitionAlterType.REMOVE_PARTITIONING

    def to_sql(self, flavor: Flavor) -> str:
        return "REMOVE PARTITIONING"


class ModifyPartitions(PartitionAlterClause):
    """
    Placeholder for a change to the partition list of a RANGE or LIST
    partitioned table. It carries nothing and renders nothing; it only tells
    the table diff engine that a real, supported difference exists.
    """

    @property
    def alter_type(self) -> PartitionAlterType:
        return PartitionAlterType.MODIFY_PARTITIONS

    def to_sql(self, flavor: Flavor) -> str:
        return ""


def partitions_differ(left: TablePartitioning, right: TablePartitioning) -> bool:
    """
    Compare partition lists position by position. All Partition fields are
    scalars, so plain equality is enough.
    """
    if len(left.partitions) != len(right.partitions):
        return True
    for left_part, right_part in zip(left.partitions, right.partitions):
        if left_part != right_part:
            return True
    return False


def diff_partitioning(
    partitioning: Optional[TablePartitioning], other: Optional[TablePartitioning]
) -> Tuple[List[PartitionAlterClause], bool]:
    """
    Return the clauses transforming partitioning into other, and whether the
    difference is supported at all. Either side may be None, meaning that
    table is not partitioned.
    If supported is False, the clauses are empty even though a difference
    exists, and the caller must not treat that as "nothing to do".
    """
    if partitioning is None and other is None:
        return [], True
    elif partitioning is None:
        return [PartitionBy(other)], True
    elif other is None:
        return [RemovePartitioning()], True

    # Modifications to partitioning method or expression: re-partition
    if (
        partitioning.method is not other.method
        or partitioning.sub_method is not other.sub_method
        or partitioning.expression != other.expression
        or partitioning.sub_expression != other.sub_expression
    ):
        return [PartitionBy(other, repartition=True)], True

    if not partitions_differ(partitioning, other):
        return [], True

    # Changes to the partition list of RANGE or LIST tables yield a no-op
    # placeholder, since an empty clause list means "unsupported" to the
    # table diff engine. Other methods can't express partition list changes.
    if partitioning.method.supports_partition_list_changes:
        return [ModifyPartitions()], True
    log.debug(
        "Partition list change is unsupported for {} partitioning".format(
            partitioning.method
        )
    )
    return [], False
