"""
Copyright (c) 2017-present, Facebook, Inc.
All rights reserved.

This source code is licensed under the BSD-style license found in the
LICENSE file in the root directory of this source tree.
"""

from enum import Enum
from typing import Iterable, NamedTuple, Optional, Tuple

from .. import constant, sql
from ..error import SchemaDiffError
from ..flavor import Flavor, Vendor


class PartitionMethod(Enum):
    RANGE = "RANGE"
    RANGE_COLUMNS = "RANGE COLUMNS"
    LIST = "LIST"
    LIST_COLUMNS = "LIST COLUMNS"
    HASH = "HASH"
    LINEAR_HASH = "LINEAR HASH"
    KEY = "KEY"
    LINEAR_KEY = "LINEAR KEY"

    @classmethod
    def from_string(cls, method_str: str) -> "PartitionMethod":
        """
        Look up a method by its SQL text, as found in
        information_schema.PARTITIONS or SHOW CREATE TABLE
        """
        normalized = " ".join(method_str.upper().split())
        try:
            return cls(normalized)
        except ValueError:
            raise SchemaDiffError("UNKNOWN_PARTITION_METHOD", {"method": method_str})

    @property
    def is_range(self) -> bool:
        return self in (PartitionMethod.RANGE, PartitionMethod.RANGE_COLUMNS)

    @property
    def is_list(self) -> bool:
        return self in (PartitionMethod.LIST, PartitionMethod.LIST_COLUMNS)

    @property
    def is_hash(self) -> bool:
        return self in (PartitionMethod.HASH, PartitionMethod.LINEAR_HASH)

    @property
    def is_key(self) -> bool:
        return self in (PartitionMethod.KEY, PartitionMethod.LINEAR_KEY)

    @property
    def is_columns(self) -> bool:
        return self in (PartitionMethod.RANGE_COLUMNS, PartitionMethod.LIST_COLUMNS)

    @property
    def is_linear(self) -> bool:
        return self in (PartitionMethod.LINEAR_HASH, PartitionMethod.LINEAR_KEY)

    @property
    def uses_values(self) -> bool:
        """Only RANGE and LIST partitions carry a VALUES clause"""
        return self.is_range or self.is_list

    @property
    def supports_partition_list_changes(self) -> bool:
        return self.uses_values

    def __str__(self) -> str:
        return str(self.value)


class PartitionListMode(Enum):
    """
    Controls how the list of partitions is represented in SHOW CREATE TABLE.
    """

    DEFAULT = "default"  # Infer from the partitions themselves
    EXPLICIT = "explicit"  # List each partition individually
    COUNT = "count"  # Just use a count of partitions
    NONE = "none"  # Omit partition list and count, implying just 1 partition


class Partition(NamedTuple):
    """
    A single partition. sub_name is only set for sub-partitioned tables, which
    are not fully supported yet.
    """

    name: str
    method: PartitionMethod
    engine: str
    sub_name: str = ""
    values: str = ""  # only populated for RANGE or LIST
    comment: str = ""
    data_dir: str = ""  # any necessary escaping is already present

    def is_auto_generated(self, position: int) -> bool:
        """
        True if this partition looks like one the server created by itself
        from a PARTITIONS n clause
        """
        return (
            not self.values
            and not self.comment
            and not self.data_dir
            and self.name == "{}{}".format(constant.AUTO_PARTITION_NAME_PREFIX, position)
        )

    def definition(self, flavor: Flavor) -> str:
        """
        This partition's definition clause, for use as part of a DDL
        statement. Only used when the full partition list is rendered.
        """
        name = self.name
        if flavor.vendor_min_version(
            Vendor.MARIADB, *constant.MARIADB_UNWRAPPED_PARTITIONING_VERSION
        ):
            name = sql.escape_identifier(name)

        values = ""
        if self.method is PartitionMethod.RANGE and self.values == "MAXVALUE":
            values = "VALUES LESS THAN MAXVALUE "
        elif self.method.is_range:
            values = "VALUES LESS THAN ({}) ".format(self.values)
        elif self.method.is_list:
            values = "VALUES IN ({}) ".format(self.values)

        data_dir = ""
        if self.data_dir:
            data_dir = "DATA DIRECTORY = '{}' ".format(self.data_dir)

        comment = ""
        if self.comment:
            comment = "COMMENT = '{}' ".format(
                sql.escape_value_for_create_table(self.comment)
            )

        return "PARTITION {} {}{}{}ENGINE = {}".format(
            name, values, data_dir, comment, self.engine
        )


def version_gate_wrapper(flavor: Flavor, method: PartitionMethod) -> Tuple[str, str]:
    """
    Return the opener and closer of the version-gated comment which
    SHOW CREATE TABLE wraps around the partitioning clause
    """
    if flavor.vendor_min_version(
        Vendor.MARIADB, *constant.MARIADB_UNWRAPPED_PARTITIONING_VERSION
    ):
        return "", ""
    if method.is_columns:
        return (
            constant.COLUMNS_PARTITIONING_COMMENT_OPENER,
            constant.VERSION_GATED_COMMENT_CLOSER,
        )
    return (
        constant.PARTITIONING_COMMENT_OPENER,
        constant.VERSION_GATED_COMMENT_CLOSER,
    )


class TablePartitioning:
    """
    Partitioning configuration of a partitioned table. An unpartitioned table
    is represented by None rather than by an instance of this class.

    Instances are immutable snapshots. Sub-partitioning fields may be
    populated, but the rest of this package does not fully support
    sub-partitioning yet: they are only ever compared for equality.
    """

    __slots__ = (
        "_method",
        "_sub_method",
        "_expression",
        "_sub_expression",
        "_partitions",
        "_force_partition_list",
        "_algo_clause",
    )

    def __init__(
        self,
        method: PartitionMethod,
        expression: str,
        partitions: Iterable[Partition],
        sub_method: Optional[PartitionMethod] = None,
        sub_expression: str = "",
        force_partition_list: PartitionListMode = PartitionListMode.DEFAULT,
        algo_clause: str = "",
    ):
        self._method = method
        self._sub_method = sub_method
        self._expression = expression
        self._sub_expression = sub_expression
        self._partitions: Tuple[Partition, ...] = tuple(partitions)
        self._force_partition_list = force_partition_list
        # Full text of optional ALGORITHM clause for KEY or LINEAR KEY
        self._algo_clause = algo_clause
        self._validate()

    def _validate(self) -> None:
        if self._sub_method is not None and not (
            self._sub_method.is_hash or self._sub_method.is_key
        ):
            raise SchemaDiffError(
                "INVALID_SUBPARTITION_METHOD", {"method": self._sub_method}
            )
        if self._algo_clause and not self._method.is_key:
            raise SchemaDiffError(
                "UNEXPECTED_ALGORITHM_CLAUSE", {"method": self._method}
            )
        seen = set()
        for n, p in enumerate(self._partitions):
            if not p.name:
                raise SchemaDiffError("EMPTY_PARTITION_NAME", {"position": n})
            if p.name in seen:
                raise SchemaDiffError("DUPLICATE_PARTITION_NAME", {"name": p.name})
            seen.add(p.name)
            if p.method is not self._method:
                raise SchemaDiffError(
                    "PARTITION_METHOD_MISMATCH",
                    {"name": p.name, "method": p.method, "expected": self._method},
                )
            if p.values and not p.method.uses_values:
                raise SchemaDiffError(
                    "UNEXPECTED_PARTITION_VALUES",
                    {"name": p.name, "values": p.values, "method": p.method},
                )

    @property
    def method(self) -> PartitionMethod:
        return self._method

    @property
    def sub_method(self) -> Optional[PartitionMethod]:
        return self._sub_method

    @property
    def expression(self) -> str:
        return self._expression

    @property
    def sub_expression(self) -> str:
        return self._sub_expression

    @property
    def partitions(self) -> Tuple[Partition, ...]:
        return self._partitions

    @property
    def force_partition_list(self) -> PartitionListMode:
        return self._force_partition_list

    @property
    def algo_clause(self) -> str:
        return self._algo_clause

    def partition_list_mode(self) -> PartitionListMode:
        """
        The way the partition list will be rendered: the forced mode if there
        is one, otherwise a count unless any partition deviates from what the
        server would auto-generate
        """
        if self._force_partition_list is not PartitionListMode.DEFAULT:
            return self._force_partition_list
        for n, p in enumerate(self._partitions):
            if not p.is_auto_generated(n):
                return PartitionListMode.EXPLICIT
        return PartitionListMode.COUNT

    def _partitions_clause(self, flavor: Flavor) -> str:
        mode = self.partition_list_mode()
        if mode is PartitionListMode.EXPLICIT:
            pdefs = [p.definition(flavor) for p in self._partitions]
            return "\n({})".format(",\n ".join(pdefs))
        elif mode is PartitionListMode.COUNT:
            return "\nPARTITIONS {}".format(len(self._partitions))
        elif mode is PartitionListMode.NONE:
            return ""
        # DEFAULT is always resolved by partition_list_mode()
        raise AssertionError("Unresolved partition list mode {}".format(mode))

    def definition(self, flavor: Flavor) -> str:
        """
        The overall partitioning definition for a table, formatted exactly as
        SHOW CREATE TABLE would for the given flavor
        """
        opener, closer = version_gate_wrapper(flavor, self._method)
        return "\n{} PARTITION BY {}{}{}".format(
            opener, self.partition_by(flavor), self._partitions_clause(flavor), closer
        )

    def partition_by(self, flavor: Flavor) -> str:
        """
        The partitioning method and expression, formatted to match
        SHOW CREATE TABLE's extremely arbitrary, completely inconsistent way
        """
        method, expr = "{} ".format(self._method.value), self._expression

        if self._method is PartitionMethod.RANGE_COLUMNS:
            method = "RANGE  COLUMNS"
        elif self._method is PartitionMethod.LIST_COLUMNS:
            method = "LIST  COLUMNS"

        if (
            self._method is PartitionMethod.RANGE_COLUMNS or self._method.is_key
        ) and not flavor.vendor_min_version(
            Vendor.MARIADB, *constant.MARIADB_UNWRAPPED_PARTITIONING_VERSION
        ):
            expr = expr.replace("`", "")

        return "{}{}({})".format(method, self._algo_clause, expr)

    def diff(self, other: Optional["TablePartitioning"]):
        """
        Differences between this partitioning and other, which may be None for
        an unpartitioned table. See diff.diff_partitioning.
        """
        from .diff import diff_partitioning

        return diff_partitioning(self, other)

    def _key(self):
        return (
            self._method,
            self._sub_method,
            self._expression,
            self._sub_expression,
            self._partitions,
            self._force_partition_list,
            self._algo_clause,
        )

    def __eq__(self, other):
        if not isinstance(other, TablePartitioning):
            return NotImplemented
        return self._key() == other._key()

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash(self._key())

    def __str__(self):
        return (
            f"{self.__class__.__name__}: |"
            f"method={self._method}|"
            f"expression={self._expression}|"
            f"sub_method={self._sub_method}|"
            f"partitions={[p.name for p in self._partitions]}"
        )


def partitioning_definition(
    partitioning: Optional[TablePartitioning], flavor: Flavor
) -> str:
    """
    Partitioning clause for a CREATE TABLE statement. Returns an empty string
    for an unpartitioned table.
    """
    if partitioning is None:
        return ""
    return partitioning.definition(flavor)
