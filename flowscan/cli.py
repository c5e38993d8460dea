"""
Command Line Interface for FlowScan
"""

import argparse
import sys
import logging
from pathlib import Path
from typing import List, Optional

from . import __version__
from .analyzer import StaticAnalyzer
from .config import load_config
from .dataflow.analyses import ANALYSES, BOUNDARY_POLICIES
from .errors import FlowScanError
from .language_loader import LanguageLoader
from .reporters import get_reporter


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging"""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog='flowscan',
        description='FlowScan - Data-flow analysis for simplified Java and C++ programs',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s Example.java                       # All four analyses, console output
  %(prog)s main.cpp -l cpp -f json -o out.json  # JSON export
  %(prog)s Example.java -a reaching -a live   # Selected analyses only
  cat Example.java | %(prog)s -               # Read from stdin
        """
    )

    parser.add_argument(
        'source',
        nargs='?',
        help="Source file to analyze, or '-' for stdin"
    )

    output_group = parser.add_argument_group('Output Options')
    output_group.add_argument(
        '-o', '--output',
        help='Output file path (default: stdout)'
    )
    output_group.add_argument(
        '-f', '--format',
        choices=['console', 'json'],
        default='console',
        help='Output format (default: console)'
    )
    output_group.add_argument(
        '--no-color',
        action='store_true',
        help='Disable colored output'
    )

    analysis_group = parser.add_argument_group('Analysis Options')
    analysis_group.add_argument(
        '-l', '--language',
        help='Source language (default: from file extension, then config)'
    )
    analysis_group.add_argument(
        '-a', '--analysis',
        action='append',
        dest='analyses',
        choices=list(ANALYSES.keys()),
        help='Analysis to run (can be repeated). Default: all'
    )
    analysis_group.add_argument(
        '-c', '--config',
        help='YAML configuration file'
    )
    analysis_group.add_argument(
        '--max-iterations',
        type=int,
        help='Maximum fixed-point passes per analysis (default: 100)'
    )
    analysis_group.add_argument(
        '--must-boundary',
        choices=list(BOUNDARY_POLICIES),
        help='Open-end value for available/very busy expressions (default: universal)'
    )
    analysis_group.add_argument(
        '--hints',
        action='store_true',
        default=None,
        help='Report redundant and hoistable expressions'
    )
    analysis_group.add_argument(
        '--list-languages',
        action='store_true',
        help='List available language profiles and exit'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Verbose output'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        help='Debug mode (very verbose)'
    )
    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser.parse_args(args)


def list_languages(languages_dir: Optional[Path] = None) -> None:
    """List all available language profiles"""
    loader = LanguageLoader(languages_dir)
    profiles = loader.load_all_profiles()

    print(f"\nAvailable Languages ({len(profiles)} total):\n")
    for profile in sorted(profiles, key=lambda p: p.name):
        aliases = ', '.join(profile.aliases) if profile.aliases else '-'
        extensions = ', '.join(profile.extensions) if profile.extensions else '-'
        print(f"  {profile.name:<10} aliases: {aliases:<20} extensions: {extensions}")


def run_analysis(args: argparse.Namespace) -> int:
    """Run the configured analyses over the source"""
    config = load_config(Path(args.config) if args.config else None)
    config = config.merged(
        max_iterations=args.max_iterations,
        must_boundary=args.must_boundary,
        optimization_hints=args.hints,
        analyses=args.analyses,
    )

    analyzer = StaticAnalyzer(config)

    if args.source == '-':
        report = analyzer.analyze(sys.stdin.read(), args.language)
    else:
        report = analyzer.analyze_file(Path(args.source), args.language)

    reporter_kwargs = {}
    if args.format == 'console':
        reporter_kwargs['use_colors'] = not args.no_color
        reporter_kwargs['verbose'] = args.verbose

    reporter = get_reporter(args.format, **reporter_kwargs)
    reporter.report(report, args.output)

    if report.errors:
        return 2
    if report.has_warnings():
        return 1
    return 0


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parsed_args = parse_args(args)

    setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

    if parsed_args.list_languages:
        try:
            config = load_config(Path(parsed_args.config) if parsed_args.config else None)
        except FlowScanError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        list_languages(config.languages_dir)
        return 0

    if not parsed_args.source:
        print("Error: No source file given", file=sys.stderr)
        return 1

    if parsed_args.source != '-' and not Path(parsed_args.source).exists():
        print(f"Error: Source file does not exist: {parsed_args.source}", file=sys.stderr)
        return 1

    try:
        return run_analysis(parsed_args)
    except KeyboardInterrupt:
        print("\nAnalysis interrupted by user", file=sys.stderr)
        return 130
    except FlowScanError as e:
        if parsed_args.debug:
            raise
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
