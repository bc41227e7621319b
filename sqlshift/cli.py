from __future__ import annotations

import argparse
import os
import sys
from typing import List, Optional, Sequence

from sqlshift import __version__
from sqlshift.services.db.db_service import DBService
from sqlshift.services.db.session import open_session
from sqlshift.services.sql_conversion import ConversionError, ConversionOrchestrator, FileOutcome
from sqlshift.utils.logger import setup_logger

logger = setup_logger('sqlshift.cli')


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='sqlshift',
        description='Convert SQL Server queries to MySQL format and manage MySQL database',
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('convert', help='Convert a SQL file from SQL Server to MySQL format')
    p.add_argument('input', help='Input SQL file path')
    p.add_argument('-o', '--output', help='Output file path (default: <input>_mysql.sql)')
    p.add_argument('-s', '--stats', action='store_true', help='Show conversion statistics')
    p.add_argument('--preview', action='store_true', help='Preview conversion without saving')

    p = sub.add_parser('batch', help='Convert multiple SQL files in a directory')
    p.add_argument('directory', help='Directory containing SQL files')
    p.add_argument('-o', '--output', help='Output directory (default: same as input)')
    p.add_argument('--pattern', default=None, help='File name pattern to match (default: *.sql)')

    sub.add_parser('db:test', help='Test MySQL database connection')
    sub.add_parser('db:create', help="Create the database if it doesn't exist")

    p = sub.add_parser('db:load', help='Execute a converted SQL file against the database')
    p.add_argument('--file', required=True, help='SQL file path')

    sub.add_parser('db:info', help='Show database information')

    p = sub.add_parser('db:query', help='Execute a custom SQL query')
    p.add_argument('sql', help='SQL query to execute')
    p.add_argument('--limit', type=int, default=10, help='Limit number of results (default: 10)')

    p = sub.add_parser('db:count', help='Show row counts for all tables')
    p.add_argument('--table', help='Count rows for specific table only')

    p = sub.add_parser('db:sample', help='Show sample data from tables')
    p.add_argument('table', help='Table name to sample')
    p.add_argument('--limit', type=int, default=5, help='Number of sample rows (default: 5)')

    p = sub.add_parser('db:schema', help='Show schema information for a table')
    p.add_argument('table', help='Table name')

    return parser


def _print_progress(lines: int) -> None:
    sys.stdout.write(f"\rProcessed {lines} lines...")
    sys.stdout.flush()


def _print_rows(rows: List[dict]) -> None:
    if not rows:
        return
    headers = list(rows[0].keys())
    widths = [max(len(str(h)), *(len(str(r.get(h))) for r in rows)) for h in headers]
    print("  ".join(str(h).ljust(w) for h, w in zip(headers, widths)))
    print("  ".join("-" * w for w in widths))
    for row in rows:
        print("  ".join(str(row.get(h)).ljust(w) for h, w in zip(headers, widths)))


def _print_outcome(outcome: FileOutcome) -> None:
    if outcome.preview is not None:
        print(f"\n--- Preview (first {len(outcome.preview)} lines) ---")
        for index, line in enumerate(outcome.preview, 1):
            print(f"{index}: {line}")
        if outcome.preview_truncated:
            print('... (truncated)')
        return

    if outcome.summary is not None:
        print(f"\rProcessed {outcome.summary.lines_processed} lines total.")

    print(f"✓ {outcome.message}")

    if outcome.stats is not None:
        stats = outcome.stats
        print('\n--- Conversion Statistics ---')
        print(f"Original lines: {stats.original_line_count}")
        print(f"Converted lines: {stats.converted_line_count}")
        print(f"Conversions applied: {len(stats.applied)}")
        if stats.applied:
            print('\nConversions made:')
            for match in stats.applied:
                print(f"  • {match.description}: {match.count} matches")


def _cmd_convert(ns: argparse.Namespace) -> int:
    orchestrator = ConversionOrchestrator()
    print(f"Converting {ns.input}...")
    outcome = orchestrator.convert_file(ns.input, ns.output, stats=ns.stats, preview=ns.preview,
                                        progress=_print_progress)
    if not outcome.success:
        print(outcome.message)
        return 0 if ns.preview else 1

    _print_outcome(outcome)
    if ns.stats and outcome.summary is not None:
        print('\n--- Large File Statistics ---')
        print('Detailed statistics not available for streaming mode.')
        print(f"Lines processed: {outcome.summary.lines_processed}")
        print(f"Lines converted: {outcome.summary.lines_changed}")
    return 0


def _cmd_batch(ns: argparse.Namespace) -> int:
    orchestrator = ConversionOrchestrator()
    report = orchestrator.run_batch(ns.directory, ns.output, ns.pattern)
    if not report.outcomes:
        print('No SQL files found in the directory.')
        return 0

    for outcome in report.outcomes.values():
        name = os.path.basename(outcome.source)
        if outcome.success:
            print(f"✓ {name}")
        else:
            print(f"✗ {name}: {outcome.message}")

    print('\nBatch conversion complete:')
    print(f"  Success: {report.success_count}")
    if report.failure_count:
        print(f"  Errors: {report.failure_count}")
    return 0


def _cmd_db(ns: argparse.Namespace) -> int:
    service = DBService()

    if ns.command == 'db:create':
        name = service.create_database()
        print(f"✓ Database '{name}' created or already exists")
        return 0

    with open_session() as session:
        if ns.command == 'db:test':
            if not service.test_connection(session):
                print('✗ Database connection test failed')
                return 1
            info = service.database_info(session)
            print('✓ Database connection test successful')
            print(f"  Database: {info['database']}")
            print(f"  Tables: {info['table_count']}")
            print(f"  Size: {info['size_mb']} MB")

        elif ns.command == 'db:load':
            result = service.execute_sql_file(session, ns.file)
            print('✓ SQL file execution completed:')
            print(f"  - Successfully executed: {result.executed_count} statements")
            if result.error_count:
                print(f"  - Errors encountered: {result.error_count} statements")

        elif ns.command == 'db:info':
            info = service.database_info(session)
            print(f"Database: {info['database']}")
            print(f"Tables: {info['table_count']}")
            print(f"Size: {info['size_mb']} MB")
            tables = service.list_tables(session)
            if tables:
                print('\nTables:')
                for table in tables:
                    print(f"  • {table['table_name']} ({table['table_rows'] or 0} rows)")

        elif ns.command == 'db:query':
            rows = service.query(session, DBService.with_default_limit(ns.sql, ns.limit))
            if rows:
                print(f"✓ Query executed successfully. Found {len(rows)} results:")
                _print_rows(rows)
            else:
                print('Query executed successfully but returned no results.')

        elif ns.command == 'db:count':
            if ns.table:
                print(f"Table: {ns.table}")
                print(f"Rows: {service.count_rows(session, ns.table)}")
            else:
                counts = service.table_row_counts(session)
                print('Row counts for all tables:')
                print('─' * 50)
                for name, count in counts.items():
                    shown = f"{count:,}" if count is not None else 'Error'
                    print(f"{name:<35} {shown:>12}")
                print('─' * 50)
                print(f"Total rows: {sum(c for c in counts.values() if c):,}")

        elif ns.command == 'db:sample':
            rows = service.sample_table(session, ns.table, ns.limit)
            if rows:
                print(f"Sample data from {ns.table} ({len(rows)} rows):")
                _print_rows(rows)
            else:
                print(f"Table {ns.table} is empty.")

        elif ns.command == 'db:schema':
            rows = service.table_schema(session, ns.table)
            if rows:
                print(f"Schema for table: {ns.table}")
                _print_rows(rows)
            else:
                print(f"Table {ns.table} not found.")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    ns = _build_parser().parse_args(argv)
    try:
        if ns.command == 'convert':
            return _cmd_convert(ns)
        if ns.command == 'batch':
            return _cmd_batch(ns)
        return _cmd_db(ns)
    except ConversionError as e:
        logger.error(str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (RuntimeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        logger.error(f"{ns.command} failed: {e}", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
