"""Command-line interface for the OFX statement parser."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from ofx_statement import __version__ as pkg_version
from ofx_statement.config import StatementSettings, default_settings, load_settings
from ofx_statement.detect import gather_jobs
from ofx_statement.errors import OfxError
from ofx_statement.models import StatementDocument
from ofx_statement.output import render_document, write_output
from ofx_statement.parser import parse_file
from ofx_statement.rename import rename_transactions

LOGGER = logging.getLogger('ofx_statement.cli')
if not LOGGER.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    LOGGER.addHandler(handler)
LOGGER.setLevel(logging.INFO)
LOGGER.propagate = False


def _emit(message: str, args: argparse.Namespace, *, verbose_only: bool = False, error: bool = False) -> None:
    """Log ``message`` honoring ``--quiet``/``--verbose`` flags."""

    if verbose_only and not args.verbose:
        return
    if args.quiet and not error:
        return
    level = logging.ERROR if error else logging.INFO
    LOGGER.log(level, message)


def _process_job(path: Path, args: argparse.Namespace, settings: StatementSettings) -> StatementDocument:
    document = parse_file(path, encoding=args.encoding or settings.encoding)
    if args.rename:
        if document.has_transactions():
            rename_transactions(document, settings.rename)
        else:
            _emit(f'Skipping rename for {path.name}: no transactions found.', args, verbose_only=True)
    return document


def _destination(path: Path, args: argparse.Namespace) -> Path | None:
    if args.stdout:
        return None
    if args.output is not None:
        return args.output
    if args.output_dir is not None:
        return Path(args.output_dir) / f'{path.stem}.transactions.csv'
    return path.with_name(f'{path.stem}.transactions.csv')


def _write(path: Path, document: StatementDocument, args: argparse.Namespace, settings: StatementSettings) -> str:
    destination = _destination(path, args)
    if destination is not None:
        destination.parent.mkdir(parents=True, exist_ok=True)
    payload = write_output(document, output_path=destination, delimiter=settings.csv_delimiter)
    if destination is not None:
        _emit(f'Wrote {len(document.transactions)} transactions to {destination}', args, verbose_only=True)
    return payload


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='Parse OFX bank and credit card statements')
    parser.add_argument('targets', nargs='+', type=Path, help='Input files or directories')
    parser.add_argument('-c', '--config', type=Path, help='Path to configuration TOML')
    parser.add_argument('-e', '--encoding', help='Text encoding of the input files (default: sniffed)')
    parser.add_argument('-r', '--rename', action='store_true', help='Rename memos using the [rename] table')
    parser.add_argument('-o', '--output', type=Path, help='Path to write the CSV output')
    parser.add_argument('--output-dir', type=Path, help='Directory to write per-file CSV outputs')
    parser.add_argument('--stdout', action='store_true', help='Print the CSV to stdout instead of writing a file')
    parser.add_argument('--dump', action='store_true', help='Print the header and normalized markup')
    parser.add_argument('-V', '--version', action='version', version=f'%(prog)s {pkg_version}')
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-q', '--quiet', action='store_true', help='Suppress informational output')
    verbosity.add_argument('-v', '--verbose', action='store_true', help='Print verbose progress details')
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = load_settings(args.config) if args.config or args.rename else default_settings()
    jobs = gather_jobs(args.targets)
    if args.output and len(jobs) != 1:
        raise ValueError('--output can only be used when a single file is specified')
    if args.output and args.output_dir:
        raise ValueError('Use either --output or --output-dir, not both')
    if args.stdout and len(jobs) != 1:
        raise ValueError('--stdout can only be used when a single file is specified')
    if args.stdout and (args.output or args.output_dir):
        raise ValueError('--stdout is incompatible with --output or --output-dir')
    if args.rename and not settings.rename:
        raise ValueError('--rename requires a [rename] table in the configuration file')
    failures = 0
    for path in jobs:
        try:
            document = _process_job(path, args, settings)
        except OfxError as exc:
            _emit(f'Error parsing {path}: {exc}', args, error=True)
            failures += 1
            continue
        except OSError as exc:
            _emit(f'Error reading {path}: {exc}', args, error=True)
            failures += 1
            continue
        _emit(f'{path.name}: {document.summary()}', args)
        if args.dump:
            sys.stdout.write(render_document(document) + '\n')
        payload = _write(path, document, args, settings)
        if args.stdout:
            sys.stdout.write(payload)
    if not jobs:
        _emit('No OFX files found.', args)
    return 1 if failures else 0
