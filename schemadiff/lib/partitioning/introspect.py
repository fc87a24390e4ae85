"""
Copyright (c) 2017-present, Facebook, Inc.
All rights reserved.

This source code is licensed under the BSD-style license found in the
LICENSE file in the root directory of this source tree.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, NamedTuple, Optional

from pyparsing import (
    alphanums,
    alphas,
    CaselessKeyword,
    Combine,
    DelimitedList,
    Group,
    Literal,
    nested_expr,
    nums,
    Optional as Opt,
    ParseException,
    ParseResults,
    QuotedString,
    Regex,
    Word,
    ZeroOrMore,
)

from .. import sql
from ..error import SchemaDiffError
from .models import Partition, PartitionListMode, PartitionMethod, TablePartitioning

log = logging.getLogger(__name__)


class PartitionClauseParser(object):
    """
    Parses the partitioning clause at the end of a SHOW CREATE TABLE
    statement. information_schema.PARTITIONS has almost everything about a
    partitioned table, except for a few details which only show up there:
    whether the partition list is given as a count or explicitly, the
    ALGORITHM clause of KEY partitioning, and DATA DIRECTORY of partitions.

    Sub-partitioning clauses are not supported.
    """

    _parser = None

    LEFT_PARENTHESES = Literal("(").suppress()
    RIGHT_PARENTHESES = Literal(")").suppress()
    EQUALS = Literal("=").suppress()
    OBJECT_NAME = Word(alphanums + "_" + "$")
    QUOTED_NAME = QuotedString(quote_char="`", esc_quote="``", unquote_results=True)
    # Keep quotes and escaping as is, DATA DIRECTORY is stored pre-escaped
    QUOTED_VALUE = QuotedString(
        quote_char="'",
        esc_quote="''",
        esc_char="\\",
        multiline=True,
        unquote_results=False,
    )

    # Sample: /*!50100 or /*!50500
    VERSION_COMMENT_OPENER = Regex(r"/\*!\d+").suppress()
    COMMENT_CLOSER = Literal("*/").suppress()

    # Match: [LINEAR] HASH | [LINEAR] KEY | RANGE [COLUMNS] | LIST [COLUMNS]
    METHOD = Combine(
        (
            Opt(CaselessKeyword("LINEAR"))
            + (CaselessKeyword("HASH") | CaselessKeyword("KEY"))
        )
        | (
            (CaselessKeyword("RANGE") | CaselessKeyword("LIST"))
            + Opt(CaselessKeyword("COLUMNS"))
        ),
        adjacent=False,
        join_string=" ",
    )("method")

    ALGORITHM = CaselessKeyword("ALGORITHM").suppress() + EQUALS + Word(nums)(
        "algorithm"
    )

    PARTITIONS_COUNT = CaselessKeyword("PARTITIONS").suppress() + Word(nums)(
        "num_partitions"
    )

    # Values themselves come from information_schema, just skip over them
    P_VALUES = (
        CaselessKeyword("VALUES")
        + (
            (
                CaselessKeyword("LESS")
                + CaselessKeyword("THAN")
                + (CaselessKeyword("MAXVALUE") | nested_expr())
            )
            | (CaselessKeyword("IN") + nested_expr())
        )
    ).suppress()

    P_DATA_DIR = (
        CaselessKeyword("DATA").suppress()
        + CaselessKeyword("DIRECTORY").suppress()
        + EQUALS
        + QUOTED_VALUE("data_dir")
    )
    P_INDEX_DIR = (
        CaselessKeyword("INDEX")
        + CaselessKeyword("DIRECTORY")
        + EQUALS
        + QUOTED_VALUE
    ).suppress()
    P_COMMENT = (CaselessKeyword("COMMENT") + EQUALS + QUOTED_VALUE).suppress()
    P_ENGINE = (
        Opt(CaselessKeyword("STORAGE"))
        + CaselessKeyword("ENGINE")
        + EQUALS
        + Word(alphanums + "_")
    ).suppress()
    # Anything else along the lines of MAX_ROWS = 10 or TABLESPACE = `ts`
    P_OTHER = (
        Word(alphas + "_")
        + EQUALS
        + (QUOTED_VALUE | QUOTED_NAME | Word(alphanums + "_"))
    ).suppress()
    PDEF_OPTIONS = ZeroOrMore(P_DATA_DIR | P_INDEX_DIR | P_COMMENT | P_ENGINE | P_OTHER)

    # e.g. PARTITION p99 VALUES LESS THAN (100) ENGINE = InnoDB
    PART_DEF = Group(
        CaselessKeyword("PARTITION").suppress()
        + (QUOTED_NAME | OBJECT_NAME)("part_name")
        + Opt(P_VALUES)
        + PDEF_OPTIONS
    )

    @classmethod
    def generate_rule(cls):
        return (
            Opt(cls.VERSION_COMMENT_OPENER)
            + CaselessKeyword("PARTITION").suppress()
            + CaselessKeyword("BY").suppress()
            + cls.METHOD
            + Opt(cls.ALGORITHM)
            + nested_expr()("p_expr")
            + Opt(cls.PARTITIONS_COUNT)
            + Opt(
                cls.LEFT_PARENTHESES
                + Group(DelimitedList(cls.PART_DEF))("part_defs")
                + cls.RIGHT_PARENTHESES
            )
            + Opt(cls.COMMENT_CLOSER)
        )

    @classmethod
    def get_parser(cls):
        if not cls._parser:
            cls._parser = cls.generate_rule()
        return cls._parser

    @classmethod
    def scan(cls, create_statement: str) -> ParseResults:
        """
        Find and parse the partitioning clause, which always comes last in a
        CREATE TABLE statement
        """
        try:
            matches = list(cls.get_parser().scan_string(create_statement))
        except ParseException as e:
            raise SchemaDiffError(
                "PARTITION_CLAUSE_PARSE_ERROR", {"msg": "{}".format(e)}
            )
        if not matches:
            raise SchemaDiffError(
                "PARTITION_CLAUSE_PARSE_ERROR", {"msg": "no PARTITION BY clause"}
            )
        result, _start, end = matches[-1]
        leftover = create_statement[end:].strip()
        if leftover:
            raise SchemaDiffError(
                "PARTITION_CLAUSE_PARSE_ERROR",
                {"msg": "unsupported syntax near: {}".format(leftover[:64])},
            )
        return result


class PartitionClauseOptions(NamedTuple):
    list_mode: PartitionListMode
    algo_clause: str
    data_dirs: Mapping[str, str]


def partition_clause_options(
    create_statement: str, method: PartitionMethod, partition_count: int
) -> PartitionClauseOptions:
    """
    Extract the partitioning details which are only visible in
    SHOW CREATE TABLE
    """
    result = PartitionClauseParser.scan(create_statement)

    # HASH and KEY typically have a PARTITIONS n clause, but the partitions
    # could also be listed explicitly, or not mentioned at all, depending on
    # how the table was originally created
    list_mode = PartitionListMode.DEFAULT
    if method.is_hash or method.is_key:
        if (
            "num_partitions" in result
            and int(result["num_partitions"]) == partition_count
        ):
            list_mode = PartitionListMode.COUNT
        elif "part_defs" in result:
            list_mode = PartitionListMode.EXPLICIT
        elif partition_count == 1:
            list_mode = PartitionListMode.NONE

    algo_clause = ""
    if method.is_key and "algorithm" in result:
        algo_clause = "ALGORITHM = {} ".format(result["algorithm"])

    data_dirs: Dict[str, str] = {}
    if (
        list_mode in (PartitionListMode.DEFAULT, PartitionListMode.EXPLICIT)
        and "part_defs" in result
    ):
        for part_def in result["part_defs"]:
            data_dir = part_def.get("data_dir")
            if data_dir:
                # strip the surrounding quotes, keep the escaping
                data_dirs[part_def["part_name"]] = data_dir[1:-1]

    return PartitionClauseOptions(
        list_mode=list_mode, algo_clause=algo_clause, data_dirs=data_dirs
    )


def partitioning_from_rows(
    rows: Iterable[Mapping[str, Any]],
    engine: str,
    create_statement: Optional[str] = None,
) -> Optional[TablePartitioning]:
    """
    Build the partitioning of a table from its information_schema.PARTITIONS
    rows, as fetched by sql.fetch_table_partitions.

    @param rows: Rows of a single table, in partition order
    @param engine: Storage engine of the table, used by every partition
    @param create_statement: SHOW CREATE TABLE output of the table. Without
    it, partition list mode and ALGORITHM/DATA DIRECTORY clauses are unknown.

    @return: None if the table is not partitioned
    """
    rows = list(rows)
    if not rows:
        return None

    first = rows[0]
    method = PartitionMethod.from_string(first["partition_method"])
    sub_method = None
    if first.get("subpartition_method"):
        sub_method = PartitionMethod.from_string(first["subpartition_method"])

    # Sub-partitioned tables have one row per sub-partition
    raw_partitions: List[Dict[str, str]] = []
    seen = set()
    for row in rows:
        row_method = PartitionMethod.from_string(row["partition_method"])
        if row_method is not method:
            raise SchemaDiffError(
                "INCONSISTENT_PARTITION_ROWS",
                {
                    "name": row["partition_name"],
                    "method": row_method,
                    "expected": method,
                },
            )
        if row["partition_name"] in seen:
            continue
        seen.add(row["partition_name"])
        raw_partitions.append(
            {
                "name": row["partition_name"],
                "sub_name": row.get("subpartition_name") or "",
                "values": (row.get("partition_description") or "")
                if method.uses_values
                else "",
                "comment": row.get("partition_comment") or "",
            }
        )

    options = PartitionClauseOptions(
        list_mode=PartitionListMode.DEFAULT, algo_clause="", data_dirs={}
    )
    if create_statement and sub_method is None:
        options = partition_clause_options(
            create_statement, method, len(raw_partitions)
        )
    elif create_statement:
        log.debug(
            "Table is sub-partitioned by {}, not reading partitioning details "
            "from its CREATE TABLE statement".format(sub_method)
        )

    partitions = [
        Partition(
            method=method,
            engine=engine,
            data_dir=options.data_dirs.get(raw["name"], ""),
            **raw,
        )
        for raw in raw_partitions
    ]
    return TablePartitioning(
        method=method,
        expression=first.get("partition_expression") or "",
        partitions=partitions,
        sub_method=sub_method,
        sub_expression=first.get("subpartition_expression") or "",
        force_partition_list=options.list_mode,
        algo_clause=options.algo_clause,
    )


def fetch_table_partitioning(
    conn,
    schema: str,
    table: str,
    engine: str,
    create_statement: Optional[str] = None,
) -> Optional[TablePartitioning]:
    """
    Read a table's partitioning through conn, which is expected to have a
    query(sql, args) method returning rows as dicts, the way
    MySQLdb.cursors.DictCursor does
    """
    rows = conn.query(sql.fetch_table_partitions, (schema, table))
    return partitioning_from_rows(rows, engine, create_statement)
