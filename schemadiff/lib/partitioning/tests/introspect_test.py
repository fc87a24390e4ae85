#!/usr/bin/env python3
"""
Copyright (c) 2017-present, Facebook, Inc.
All rights reserved.

This source code is licensed under the BSD-style license found in the
LICENSE file in the root directory of this source tree.
"""

import unittest
from unittest.mock import Mock

from schemadiff.lib import sql
from schemadiff.lib.error import SchemaDiffError
from schemadiff.lib.flavor import Flavor, Vendor
from schemadiff.lib.partitioning import (
    fetch_table_partitioning,
    partition_clause_options,
    PartitionClauseParser,
    partitioning_from_rows,
    PartitionListMode,
    PartitionMethod,
)

MYSQL_57 = Flavor(Vendor.MYSQL, 5, 7, 44)
MYSQL_80 = Flavor(Vendor.MYSQL, 8, 0, 32)
MARIADB_103 = Flavor(Vendor.MARIADB, 10, 3, 7)

TABLE_HEADER = (
    "CREATE TABLE `orders` (\n"
    "  `id` int(10) unsigned NOT NULL,\n"
    "  `created_at` date NOT NULL COMMENT 'not a PARTITION BY clause',\n"
    "  PRIMARY KEY (`id`,`created_at`)\n"
    ") ENGINE=InnoDB DEFAULT CHARSET=latin1"
)

CREATE_RANGE = (
    TABLE_HEADER + "\n/*!50100 PARTITION BY RANGE (`id`)\n"
    "(PARTITION p0 VALUES LESS THAN (10) COMMENT = 'first''s' ENGINE = InnoDB,\n"
    " PARTITION p1 VALUES LESS THAN MAXVALUE ENGINE = InnoDB) */"
)

CREATE_RANGE_DATA_DIR = (
    TABLE_HEADER + "\n/*!50100 PARTITION BY RANGE (`id`)\n"
    "(PARTITION p0 VALUES LESS THAN (10) "
    "DATA DIRECTORY = '/var/lib/mysql-part' ENGINE = InnoDB,\n"
    " PARTITION p1 VALUES LESS THAN MAXVALUE ENGINE = InnoDB) */"
)

CREATE_HASH_COUNT = (
    TABLE_HEADER + "\n/*!50100 PARTITION BY HASH (`id`)\nPARTITIONS 4 */"
)

CREATE_HASH_EXPLICIT = (
    TABLE_HEADER + "\n/*!50100 PARTITION BY HASH (`id`)\n"
    "(PARTITION p0 ENGINE = InnoDB,\n"
    " PARTITION p1 ENGINE = InnoDB) */"
)

CREATE_HASH_NONE = TABLE_HEADER + "\n/*!50100 PARTITION BY HASH (`id`) */"

CREATE_KEY_ALGORITHM = (
    TABLE_HEADER + "\n/*!50100 PARTITION BY LINEAR KEY ALGORITHM = 1 (id)\n"
    "PARTITIONS 2 */"
)

CREATE_MARIADB_RANGE_COLUMNS = (
    TABLE_HEADER + "\n PARTITION BY RANGE  COLUMNS(`created_at`)\n"
    "(PARTITION `p2020` VALUES LESS THAN ('2021-01-01') ENGINE = InnoDB,\n"
    " PARTITION `pmax` VALUES LESS THAN (MAXVALUE) ENGINE = InnoDB)"
)


def make_row(name, method, expression="`id`", description=None, comment="", **extra):
    row = {
        "partition_name": name,
        "subpartition_name": None,
        "partition_method": method,
        "subpartition_method": None,
        "partition_expression": expression,
        "subpartition_expression": None,
        "partition_description": description,
        "partition_comment": comment,
    }
    row.update(extra)
    return row


RANGE_ROWS = [
    make_row("p0", "RANGE", description="10", comment="first's"),
    make_row("p1", "RANGE", description="MAXVALUE"),
]


def hash_rows(count, method="HASH", expression="`id`"):
    return [make_row("p{}".format(n), method, expression) for n in range(count)]


class PartitionClauseParserTest(unittest.TestCase):
    def test_scan_range(self):
        result = PartitionClauseParser.scan(CREATE_RANGE)
        self.assertEqual(result["method"], "RANGE")
        self.assertNotIn("num_partitions", result)
        names = [part_def["part_name"] for part_def in result["part_defs"]]
        self.assertEqual(names, ["p0", "p1"])

    def test_scan_single_partition_list(self):
        result = PartitionClauseParser.scan(
            TABLE_HEADER + "\n/*!50100 PARTITION BY LIST (`id`)\n"
            "(PARTITION pOnly VALUES IN (1,2,3) ENGINE = InnoDB) */"
        )
        self.assertEqual(len(result["part_defs"]), 1)
        self.assertEqual(result["part_defs"][0]["part_name"], "pOnly")

    def test_scan_key_algorithm(self):
        result = PartitionClauseParser.scan(CREATE_KEY_ALGORITHM)
        self.assertEqual(result["method"], "LINEAR KEY")
        self.assertEqual(result["algorithm"], "1")
        self.assertEqual(result["num_partitions"], "2")

    def test_scan_mariadb_quoted_names(self):
        result = PartitionClauseParser.scan(CREATE_MARIADB_RANGE_COLUMNS)
        self.assertEqual(result["method"], "RANGE COLUMNS")
        names = [part_def["part_name"] for part_def in result["part_defs"]]
        self.assertEqual(names, ["p2020", "pmax"])

    def test_scan_other_partition_options(self):
        result = PartitionClauseParser.scan(
            TABLE_HEADER + "\n/*!50100 PARTITION BY RANGE (`id`)\n"
            "(PARTITION p0 VALUES LESS THAN (10) MAX_ROWS = 100 ENGINE = MyISAM,\n"
            " PARTITION p1 VALUES LESS THAN MAXVALUE "
            "INDEX DIRECTORY = '/idx' ENGINE = MyISAM) */"
        )
        self.assertEqual(len(result["part_defs"]), 2)

    def test_scan_unpartitioned(self):
        with self.assertRaises(SchemaDiffError) as err_context:
            PartitionClauseParser.scan(TABLE_HEADER)
        self.assertEqual(
            err_context.exception.err_key, "PARTITION_CLAUSE_PARSE_ERROR"
        )

    def test_scan_unsupported_syntax(self):
        with self.assertRaises(SchemaDiffError):
            PartitionClauseParser.scan(
                TABLE_HEADER + "\n/*!50100 PARTITION BY RANGE (`id`)\n"
                "SUBPARTITION BY HASH (`created_at`)\n"
                "SUBPARTITIONS 2\n"
                "(PARTITION p0 VALUES LESS THAN (10) ENGINE = InnoDB) */"
            )


class PartitionClauseOptionsTest(unittest.TestCase):
    def test_hash_count(self):
        options = partition_clause_options(CREATE_HASH_COUNT, PartitionMethod.HASH, 4)
        self.assertEqual(options.list_mode, PartitionListMode.COUNT)
        self.assertEqual(options.algo_clause, "")
        self.assertEqual(options.data_dirs, {})

    def test_hash_explicit(self):
        options = partition_clause_options(
            CREATE_HASH_EXPLICIT, PartitionMethod.HASH, 2
        )
        self.assertEqual(options.list_mode, PartitionListMode.EXPLICIT)

    def test_hash_none(self):
        options = partition_clause_options(CREATE_HASH_NONE, PartitionMethod.HASH, 1)
        self.assertEqual(options.list_mode, PartitionListMode.NONE)

    def test_range_always_default(self):
        options = partition_clause_options(CREATE_RANGE, PartitionMethod.RANGE, 2)
        self.assertEqual(options.list_mode, PartitionListMode.DEFAULT)

    def test_key_algorithm(self):
        options = partition_clause_options(
            CREATE_KEY_ALGORITHM, PartitionMethod.LINEAR_KEY, 2
        )
        self.assertEqual(options.list_mode, PartitionListMode.COUNT)
        self.assertEqual(options.algo_clause, "ALGORITHM = 1 ")

    def test_data_dir(self):
        options = partition_clause_options(
            CREATE_RANGE_DATA_DIR, PartitionMethod.RANGE, 2
        )
        self.assertEqual(options.data_dirs, {"p0": "/var/lib/mysql-part"})

    def test_data_dir_keeps_escaping(self):
        options = partition_clause_options(
            TABLE_HEADER + "\n/*!50100 PARTITION BY LIST (`id`)\n"
            "(PARTITION p0 VALUES IN (1) DATA DIRECTORY = '/data/o''brien' "
            "ENGINE = InnoDB) */",
            PartitionMethod.LIST,
            1,
        )
        self.assertEqual(options.data_dirs, {"p0": "/data/o''brien"})


class PartitioningFromRowsTest(unittest.TestCase):
    def test_no_rows(self):
        self.assertIsNone(partitioning_from_rows([], "InnoDB"))
        self.assertIsNone(partitioning_from_rows([], "InnoDB", TABLE_HEADER))

    def test_range_round_trip(self):
        tp = partitioning_from_rows(RANGE_ROWS, "InnoDB", CREATE_RANGE)
        self.assertEqual(tp.method, PartitionMethod.RANGE)
        self.assertEqual(tp.expression, "`id`")
        self.assertEqual([p.values for p in tp.partitions], ["10", "MAXVALUE"])
        self.assertEqual(tp.partitions[0].comment, "first's")
        self.assertTrue(CREATE_RANGE.endswith(tp.definition(MYSQL_80)))

    def test_range_without_create_statement(self):
        tp = partitioning_from_rows(RANGE_ROWS, "InnoDB")
        self.assertEqual(tp.force_partition_list, PartitionListMode.DEFAULT)
        self.assertEqual(tp, partitioning_from_rows(RANGE_ROWS, "InnoDB", CREATE_RANGE))

    def test_data_dir_round_trip(self):
        rows = [make_row("p0", "RANGE", description="10"), RANGE_ROWS[1]]
        tp = partitioning_from_rows(rows, "InnoDB", CREATE_RANGE_DATA_DIR)
        self.assertEqual(tp.partitions[0].data_dir, "/var/lib/mysql-part")
        self.assertEqual(tp.partitions[1].data_dir, "")
        self.assertTrue(CREATE_RANGE_DATA_DIR.endswith(tp.definition(MYSQL_57)))

    def test_hash_count_round_trip(self):
        tp = partitioning_from_rows(hash_rows(4), "InnoDB", CREATE_HASH_COUNT)
        self.assertEqual(tp.force_partition_list, PartitionListMode.COUNT)
        self.assertEqual([p.values for p in tp.partitions], [""] * 4)
        self.assertTrue(CREATE_HASH_COUNT.endswith(tp.definition(MYSQL_80)))

    def test_hash_explicit_round_trip(self):
        tp = partitioning_from_rows(hash_rows(2), "InnoDB", CREATE_HASH_EXPLICIT)
        self.assertEqual(tp.force_partition_list, PartitionListMode.EXPLICIT)
        self.assertTrue(CREATE_HASH_EXPLICIT.endswith(tp.definition(MYSQL_80)))

    def test_hash_none_round_trip(self):
        tp = partitioning_from_rows(hash_rows(1), "InnoDB", CREATE_HASH_NONE)
        self.assertEqual(tp.force_partition_list, PartitionListMode.NONE)
        self.assertTrue(CREATE_HASH_NONE.endswith(tp.definition(MYSQL_80)))

    def test_key_algorithm_round_trip(self):
        tp = partitioning_from_rows(
            hash_rows(2, method="LINEAR KEY"), "InnoDB", CREATE_KEY_ALGORITHM
        )
        self.assertEqual(tp.method, PartitionMethod.LINEAR_KEY)
        self.assertEqual(tp.algo_clause, "ALGORITHM = 1 ")
        self.assertTrue(CREATE_KEY_ALGORITHM.endswith(tp.definition(MYSQL_80)))

    def test_mariadb_round_trip(self):
        rows = [
            make_row(
                "p2020",
                "RANGE COLUMNS",
                expression="`created_at`",
                description="'2021-01-01'",
            ),
            make_row(
                "pmax",
                "RANGE COLUMNS",
                expression="`created_at`",
                description="MAXVALUE",
            ),
        ]
        tp = partitioning_from_rows(rows, "InnoDB", CREATE_MARIADB_RANGE_COLUMNS)
        self.assertTrue(
            CREATE_MARIADB_RANGE_COLUMNS.endswith(tp.definition(MARIADB_103))
        )

    def test_sub_partitioned_rows_collapse(self):
        rows = []
        for n in range(2):
            for sub in range(2):
                rows.append(
                    make_row(
                        "p{}".format(n),
                        "RANGE",
                        description=str((n + 1) * 10),
                        subpartition_name="p{}sp{}".format(n, sub),
                        subpartition_method="HASH",
                        subpartition_expression="`created_at`",
                    )
                )
        tp = partitioning_from_rows(rows, "InnoDB", "unparsable text is skipped")
        self.assertEqual([p.name for p in tp.partitions], ["p0", "p1"])
        self.assertEqual([p.sub_name for p in tp.partitions], ["p0sp0", "p1sp0"])
        self.assertEqual(tp.sub_method, PartitionMethod.HASH)
        self.assertEqual(tp.sub_expression, "`created_at`")
        self.assertEqual(tp.force_partition_list, PartitionListMode.DEFAULT)

    def test_values_ignored_for_hash(self):
        rows = [make_row("p0", "KEY", description="")]
        tp = partitioning_from_rows(rows, "InnoDB")
        self.assertEqual(tp.partitions[0].values, "")

    def test_inconsistent_methods(self):
        rows = [make_row("p0", "RANGE", description="10"), make_row("p1", "LIST")]
        with self.assertRaises(SchemaDiffError) as err_context:
            partitioning_from_rows(rows, "InnoDB")
        self.assertEqual(
            err_context.exception.err_key, "INCONSISTENT_PARTITION_ROWS"
        )

    def test_unknown_method(self):
        with self.assertRaises(SchemaDiffError) as err_context:
            partitioning_from_rows([make_row("p0", "SYSTEM_TIME")], "InnoDB")
        self.assertEqual(err_context.exception.err_key, "UNKNOWN_PARTITION_METHOD")


class FetchTablePartitioningTest(unittest.TestCase):
    def test_fetch(self):
        conn = Mock()
        conn.query = Mock(return_value=hash_rows(4))
        tp = fetch_table_partitioning(
            conn, "shop", "orders", "InnoDB", CREATE_HASH_COUNT
        )
        conn.query.assert_called_once_with(
            sql.fetch_table_partitions, ("shop", "orders")
        )
        self.assertEqual(len(tp.partitions), 4)
        self.assertEqual(tp.force_partition_list, PartitionListMode.COUNT)

    def test_fetch_unpartitioned(self):
        conn = Mock()
        conn.query = Mock(return_value=())
        self.assertIsNone(fetch_table_partitioning(conn, "shop", "orders", "InnoDB"))
