"""
cfgpda CLI entry point.

Subcommands:

* ``run GRAMMAR INPUT`` – recognise one input and print the trace.
* ``check GRAMMAR`` – run the example cases embedded in a grammar file.
* ``demo`` – the built-in example grammar on its example input.

GRAMMAR is a path to a YAML, JSON or TOML grammar document, or the name
of a grammar listed under ``[grammars]`` in ``cfgpda.toml``.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from cfgpda import __version__
from cfgpda.cases import run_cases
from cfgpda.config import LOG_LEVEL_ENV, RecognizerConfig, WorkspaceConfig, load_workspace_config
from cfgpda.driver import as_symbols, run
from cfgpda.errors import CFGPDAError
from cfgpda.loader import GrammarDocument
from cfgpda.samples import EXAMPLE_INPUT, example_grammar

from .output import print_case_results, print_grammar, print_run_result

EXIT_ACCEPTED = 0
EXIT_REJECTED = 1
EXIT_ERROR = 2

LEVEL_MAP = {
    'debug': logging.DEBUG,
    'info': logging.INFO,
    'warn': logging.WARNING,
    'warning': logging.WARNING,
    'error': logging.ERROR,
}


def _configure_logging(level_name: Optional[str]) -> None:
    """Configure the ``cfgpda`` logger used by the recognizer modules."""
    numeric_level = LEVEL_MAP.get((level_name or 'warn').lower(), logging.WARNING)

    package_logger = logging.getLogger('cfgpda')
    package_logger.setLevel(numeric_level)

    # Add console handler if not already present
    if not package_logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)
        package_logger.propagate = False


def _build_parser(workspace_root: Path, config_path: Optional[Path]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Recognise strings against a context-free grammar with a pushdown automaton",
        prog="cfgpda",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        '--config',
        default=str(config_path) if config_path else None,
        help='Path to a cfgpda.toml configuration file'
    )
    parser.add_argument(
        '--workspace',
        default=str(workspace_root),
        help='Workspace root directory (defaults to current working directory)'
    )
    parser.add_argument(
        '--log-level',
        choices=['debug', 'info', 'warn', 'error'],
        default=None,
        help=f'Set logging level (or set {LOG_LEVEL_ENV})'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    run_parser = subparsers.add_parser('run', help='Recognise one input against a grammar')
    run_parser.add_argument('grammar', help='Grammar file or configured grammar name')
    run_parser.add_argument('input', help='Input string')
    run_parser.add_argument('--start', default=None, help='Start variable (defaults to the grammar\'s)')
    run_parser.add_argument(
        '--symbols', metavar='SEP', default=None,
        help='Split the input on SEP instead of into single characters'
    )
    run_parser.add_argument('--no-trace', action='store_true', help='Print only the outcome')
    run_parser.add_argument(
        '--max-depth', type=int, default=None,
        help='Evaluator nesting ceiling (sized to the grammar unless --no-validate)'
    )
    run_parser.add_argument(
        '--no-validate', action='store_true',
        help='Skip load-time grammar checks; failures surface as rejections instead'
    )
    run_parser.add_argument('--json', action='store_true', help='Print the result as JSON')
    run_parser.set_defaults(func=cmd_run)

    check_parser = subparsers.add_parser('check', help='Run the cases embedded in a grammar file')
    check_parser.add_argument('grammar', help='Grammar file or configured grammar name')
    check_parser.add_argument('--json', action='store_true', help='Print case results as JSON')
    check_parser.set_defaults(func=cmd_check)

    demo_parser = subparsers.add_parser('demo', help='Run the built-in example grammar')
    demo_parser.add_argument('input', nargs='?', default=EXAMPLE_INPUT, help='Input string')
    demo_parser.add_argument('--show-grammar', action='store_true', help='Print the grammar first')
    demo_parser.set_defaults(func=cmd_demo)

    return parser


def cmd_run(args: argparse.Namespace, workspace: WorkspaceConfig) -> int:
    document = GrammarDocument.from_file(workspace.grammar_path(args.grammar))
    grammar = document.build(
        validate=not args.no_validate, default_start=workspace.recognizer.start
    )
    config = workspace.recognizer.with_overrides(
        max_depth=args.max_depth,
        record_trace=False if args.no_trace else None,
    )
    separator = args.symbols if args.symbols is not None else document.separator
    result = run(grammar, args.start, as_symbols(args.input, separator), config=config)
    print_run_result(result, sys.stdout, show_trace=not args.no_trace, as_json=args.json)
    return EXIT_ACCEPTED if result.accepted else EXIT_REJECTED


def cmd_check(args: argparse.Namespace, workspace: WorkspaceConfig) -> int:
    document = GrammarDocument.from_file(workspace.grammar_path(args.grammar))
    problems = document.validate(default_start=workspace.recognizer.start)
    if problems:
        for problem in problems:
            print(f"error: {problem}", file=sys.stderr)
        return EXIT_ERROR
    results = run_cases(document, workspace.recognizer)
    print_case_results(results, sys.stdout, as_json=args.json)
    return EXIT_ACCEPTED if all(r.passed for r in results) else EXIT_REJECTED


def cmd_demo(args: argparse.Namespace, workspace: WorkspaceConfig) -> int:
    grammar = example_grammar()
    if args.show_grammar:
        print_grammar(grammar, sys.stdout)
    config: RecognizerConfig = workspace.recognizer
    result = run(grammar, None, args.input, config=config)
    print_run_result(result, sys.stdout)
    return EXIT_ACCEPTED if result.accepted else EXIT_REJECTED


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entrypoint with subcommand support.

    Returns the process exit code: 0 when the input is accepted (or every
    case passes), 1 on rejection, 2 on grammar or configuration errors.

    Examples:
        >>> main(['demo'])  # doctest: +SKIP
        - '$' ⊢ AB
        ...
        string accepted!
    """
    if argv is None:
        argv = sys.argv[1:]

    # Pre-parse to get workspace and config before building the full parser
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument('--config')
    pre_parser.add_argument('--workspace')
    pre_args, _ = pre_parser.parse_known_args(argv)

    workspace_root = Path(pre_args.workspace).resolve() if pre_args.workspace else Path.cwd()
    config_path = Path(pre_args.config).resolve() if pre_args.config else None

    parser = _build_parser(workspace_root, config_path)
    args = parser.parse_args(argv)
    if not getattr(args, 'func', None):
        parser.print_help()
        return EXIT_ERROR

    try:
        workspace = load_workspace_config(workspace_root, config_path)
        _configure_logging(args.log_level or workspace.log_level)
        return args.func(args, workspace)
    except CFGPDAError as exc:
        print(f"error: {exc.format()}", file=sys.stderr)
        return EXIT_ERROR


__all__ = ["main", "cmd_run", "cmd_check", "cmd_demo"]
