"""
Per-dialect catalog queries.

Every dialect answers the same questions with the same column aliases so the
inspector can map rows uniformly:

- schemas:          schema_name
- tables:           table_name, table_schema, table_type, remarks
- columns:          column_name, type_name, column_size, decimal_digits,
                    is_nullable, column_default, ordinal_position, remarks
- current_schema:   one value
- schema_exists:    any row when the schema (param) exists; only set where the
                    column query errors on an unknown schema instead of
                    returning no rows

``tables_in_schema`` takes (schema,); ``columns`` takes (schema, table), in
each driver's own paramstyle.
"""

from typing import NamedTuple

from dbregistry.models import DialectEnum


class CatalogQueries(NamedTuple):
    schemas: str
    tables: str
    tables_in_schema: str
    columns: str
    current_schema: str
    schema_exists: str | None = None


# --- PostgreSQL (psycopg, %s) ---

_PG_TABLES = """
    SELECT t.table_name, t.table_schema, 'TABLE' AS table_type, d.description AS remarks
    FROM information_schema.tables t
    LEFT JOIN pg_catalog.pg_namespace n ON n.nspname = t.table_schema
    LEFT JOIN pg_catalog.pg_class cl ON cl.relname = t.table_name AND cl.relnamespace = n.oid
    LEFT JOIN pg_catalog.pg_description d
        ON d.objoid = cl.oid AND d.objsubid = 0
        AND d.classoid = 'pg_catalog.pg_class'::regclass
    WHERE t.table_type = 'BASE TABLE'
"""

POSTGRESQL = CatalogQueries(
    schemas="SELECT schema_name FROM information_schema.schemata ORDER BY schema_name",
    tables=_PG_TABLES
    + " AND t.table_schema NOT IN ('pg_catalog', 'information_schema')"
    + " ORDER BY t.table_schema, t.table_name",
    tables_in_schema=_PG_TABLES + " AND t.table_schema = %s ORDER BY t.table_name",
    columns="""
        SELECT c.column_name, c.data_type AS type_name,
               COALESCE(c.character_maximum_length, c.numeric_precision, c.datetime_precision)
                   AS column_size,
               c.numeric_scale AS decimal_digits, c.is_nullable, c.column_default,
               c.ordinal_position, d.description AS remarks
        FROM information_schema.columns c
        LEFT JOIN pg_catalog.pg_namespace n ON n.nspname = c.table_schema
        LEFT JOIN pg_catalog.pg_class cl ON cl.relname = c.table_name AND cl.relnamespace = n.oid
        LEFT JOIN pg_catalog.pg_attribute a ON a.attrelid = cl.oid AND a.attname = c.column_name
        LEFT JOIN pg_catalog.pg_description d
            ON d.objoid = cl.oid AND d.objsubid = a.attnum
            AND d.classoid = 'pg_catalog.pg_class'::regclass
        WHERE c.table_schema = %s AND c.table_name = %s
        ORDER BY c.ordinal_position
    """,
    current_schema="SELECT current_schema()",
)


# --- MySQL (pymysql, %s); MySQL schemas are databases ---

_MYSQL_TABLES = """
    SELECT table_name AS table_name, table_schema AS table_schema, 'TABLE' AS table_type,
           NULLIF(table_comment, '') AS remarks
    FROM information_schema.tables
    WHERE table_type = 'BASE TABLE'
"""

MYSQL = CatalogQueries(
    schemas="SELECT schema_name AS schema_name FROM information_schema.schemata ORDER BY schema_name",
    tables=_MYSQL_TABLES
    + " AND table_schema NOT IN ('mysql', 'information_schema', 'performance_schema', 'sys')"
    + " ORDER BY table_schema, table_name",
    tables_in_schema=_MYSQL_TABLES + " AND table_schema = %s ORDER BY table_name",
    columns="""
        SELECT column_name AS column_name, data_type AS type_name,
               COALESCE(character_maximum_length, numeric_precision, datetime_precision)
                   AS column_size,
               numeric_scale AS decimal_digits, is_nullable AS is_nullable,
               column_default AS column_default, ordinal_position AS ordinal_position,
               NULLIF(column_comment, '') AS remarks
        FROM information_schema.columns
        WHERE table_schema = %s AND table_name = %s
        ORDER BY ordinal_position
    """,
    current_schema="SELECT DATABASE()",
)


# --- SQLite (sqlite3, ?); needs SQLite >= 3.37 for pragma_table_list ---

_SQLITE_TABLES = """
    SELECT name AS table_name, schema AS table_schema, 'TABLE' AS table_type, NULL AS remarks
    FROM pragma_table_list
    WHERE type = 'table' AND name NOT LIKE 'sqlite\\_%' ESCAPE '\\'
"""

SQLITE = CatalogQueries(
    schemas="SELECT name AS schema_name FROM pragma_database_list ORDER BY seq",
    tables=_SQLITE_TABLES + " AND schema <> 'temp' ORDER BY schema, name",
    tables_in_schema=_SQLITE_TABLES + " AND schema = ? ORDER BY name",
    columns="""
        SELECT name AS column_name, type AS type_name, NULL AS column_size,
               NULL AS decimal_digits,
               CASE WHEN "notnull" = 1 THEN 'NO' ELSE 'YES' END AS is_nullable,
               dflt_value AS column_default, cid + 1 AS ordinal_position, NULL AS remarks
        FROM pragma_table_info(?2, ?1)
        ORDER BY cid
    """,
    current_schema="SELECT 'main'",
    schema_exists="SELECT name FROM pragma_database_list WHERE name = ?",
)


# --- Oracle (oracledb, :n); schemas are users, identifiers are upper case ---

_ORACLE_TABLES = """
    SELECT t.table_name AS table_name, t.owner AS table_schema, 'TABLE' AS table_type,
           c.comments AS remarks
    FROM all_tables t
    LEFT JOIN all_tab_comments c ON c.owner = t.owner AND c.table_name = t.table_name
"""

ORACLE = CatalogQueries(
    schemas="SELECT username AS schema_name FROM all_users ORDER BY username",
    tables=_ORACLE_TABLES
    + " WHERE t.owner NOT IN (SELECT username FROM all_users WHERE oracle_maintained = 'Y')"
    + " ORDER BY t.owner, t.table_name",
    tables_in_schema=_ORACLE_TABLES + " WHERE t.owner = :1 ORDER BY t.table_name",
    columns="""
        SELECT c.column_name AS column_name, c.data_type AS type_name,
               COALESCE(c.data_precision, NULLIF(c.char_length, 0), c.data_length) AS column_size,
               c.data_scale AS decimal_digits,
               CASE c.nullable WHEN 'Y' THEN 'YES' ELSE 'NO' END AS is_nullable,
               c.data_default AS column_default, c.column_id AS ordinal_position,
               m.comments AS remarks
        FROM all_tab_columns c
        LEFT JOIN all_col_comments m
            ON m.owner = c.owner AND m.table_name = c.table_name AND m.column_name = c.column_name
        WHERE c.owner = :1 AND c.table_name = :2
        ORDER BY c.column_id
    """,
    current_schema="SELECT SYS_CONTEXT('USERENV', 'CURRENT_SCHEMA') FROM DUAL",
)


# --- SQL Server (pymssql, %s) ---

_MSSQL_TABLES = """
    SELECT table_name AS table_name, table_schema AS table_schema, 'TABLE' AS table_type,
           NULL AS remarks
    FROM information_schema.tables
    WHERE table_type = 'BASE TABLE'
"""

SQLSERVER = CatalogQueries(
    schemas="SELECT name AS schema_name FROM sys.schemas ORDER BY name",
    tables=_MSSQL_TABLES
    + " AND table_schema NOT IN ('sys', 'INFORMATION_SCHEMA')"
    + " ORDER BY table_schema, table_name",
    tables_in_schema=_MSSQL_TABLES + " AND table_schema = %s ORDER BY table_name",
    columns="""
        SELECT column_name AS column_name, data_type AS type_name,
               COALESCE(character_maximum_length, numeric_precision, datetime_precision)
                   AS column_size,
               numeric_scale AS decimal_digits, is_nullable AS is_nullable,
               column_default AS column_default, ordinal_position AS ordinal_position,
               NULL AS remarks
        FROM information_schema.columns
        WHERE table_schema = %s AND table_name = %s
        ORDER BY ordinal_position
    """,
    current_schema="SELECT SCHEMA_NAME()",
)


# --- Trino (trino, ?); scoped to the connection's catalog ---

_TRINO_TABLES = """
    SELECT table_name, table_schema, 'TABLE' AS table_type, CAST(NULL AS VARCHAR) AS remarks
    FROM information_schema.tables
    WHERE table_type = 'BASE TABLE'
"""

TRINO = CatalogQueries(
    schemas="SELECT schema_name FROM information_schema.schemata ORDER BY schema_name",
    tables=_TRINO_TABLES
    + " AND table_schema <> 'information_schema' ORDER BY table_schema, table_name",
    tables_in_schema=_TRINO_TABLES + " AND table_schema = ? ORDER BY table_name",
    columns="""
        SELECT column_name, data_type AS type_name, CAST(NULL AS INTEGER) AS column_size,
               CAST(NULL AS INTEGER) AS decimal_digits, is_nullable, column_default,
               ordinal_position, CAST(NULL AS VARCHAR) AS remarks
        FROM information_schema.columns
        WHERE table_schema = ? AND table_name = ?
        ORDER BY ordinal_position
    """,
    current_schema="SELECT current_schema",
)


CATALOG_QUERIES: dict[DialectEnum, CatalogQueries] = {
    DialectEnum.POSTGRESQL: POSTGRESQL,
    DialectEnum.MYSQL: MYSQL,
    DialectEnum.SQLITE: SQLITE,
    DialectEnum.ORACLE: ORACLE,
    DialectEnum.SQLSERVER: SQLSERVER,
    DialectEnum.TRINO: TRINO,
}


def catalog_queries(dialect: DialectEnum) -> CatalogQueries:
    return CATALOG_QUERIES[dialect]
