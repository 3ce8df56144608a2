#!/usr/bin/env python3
"""
Enterprise Readiness Assessment - CLI Entry Point

Exercises a running service and produces a composite readiness verdict
from three phases:
  Load testing | Vulnerability probing | Compliance control evaluation

IMPORTANT: Probes send attack-shaped requests. Run them only against
services you own or have explicit permission to test.

Usage:
    readiness run -u https://staging.example.com --source-root ../service
    readiness run -u https://staging.example.com --concurrency 50 --html
    readiness stress -u https://staging.example.com --tiers 10 50 100
"""

import argparse
import sys

from readiness import config
from readiness.utils.logger import setup_logger
from readiness.engine.orchestrator import Orchestrator
from readiness.reporter.report import ReportWriter, print_console_report, print_stress_report


# ----------------------------------------------------------------------
# Argument parsing
# ----------------------------------------------------------------------
def _add_target_arguments(parser):
    parser.add_argument(
        '-u', '--url',
        required=True,
        help='Base URL of the target service (required)'
    )
    parser.add_argument(
        '--endpoints', nargs='+', metavar='PATH',
        help='Endpoints to load test (default: built-in list)'
    )
    parser.add_argument(
        '-v', '--verbose', action='store_true',
        help='Enable verbose/debug logging'
    )


def parse_arguments(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog='readiness',
        description='Enterprise readiness assessment',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Full suite with the compliance controls evaluated against ../service
  readiness run -u https://staging.example.com --source-root ../service

  # Heavier load, HTML report, probe errors counted as findings
  readiness run -u https://staging.example.com --concurrency 100 --html --fail-closed

  # Stress profile with custom tiers and no pause between them
  readiness stress -u https://staging.example.com --tiers 10 50 100 --cooldown 0

WARNING: Use only on systems you own or have permission to test!
        """
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    # ---- run ----
    run_parser = subparsers.add_parser('run', help='Run the full readiness suite')
    _add_target_arguments(run_parser)

    load_group = run_parser.add_argument_group('Load Test Options')
    load_group.add_argument(
        '--concurrency', type=int, default=config.DEFAULT_CONCURRENCY,
        help=f'Virtual users per endpoint (default: {config.DEFAULT_CONCURRENCY})'
    )
    load_group.add_argument(
        '--requests', type=int, default=config.DEFAULT_REQUESTS_PER_USER,
        help=f'Requests per virtual user (default: {config.DEFAULT_REQUESTS_PER_USER})'
    )
    load_group.add_argument(
        '--ramp-up', type=float, default=config.DEFAULT_RAMP_UP,
        help=f'Seconds to start all users (default: {config.DEFAULT_RAMP_UP})'
    )
    load_group.add_argument(
        '--duration', type=float, default=config.DEFAULT_TEST_DURATION,
        help=f'Window for requests/second, 0 to measure (default: {config.DEFAULT_TEST_DURATION})'
    )

    probe_group = run_parser.add_argument_group('Probe Options')
    probe_group.add_argument(
        '--fail-closed', action='store_true', default=config.FAIL_CLOSED_ON_ERROR,
        help='Count probe execution errors as findings'
    )

    compliance_group = run_parser.add_argument_group('Compliance Options')
    compliance_group.add_argument(
        '--source-root', default='.',
        help='Source tree of the target service (default: current directory)'
    )

    report_group = run_parser.add_argument_group('Report Options')
    report_group.add_argument(
        '--output-dir', default=str(config.REPORT_DIR),
        help=f'Directory for report artifacts (default: {config.REPORT_DIR})'
    )
    report_group.add_argument(
        '--html', action='store_true',
        help='Also write an HTML report'
    )

    # ---- stress ----
    stress_parser = subparsers.add_parser('stress', help='Run the escalating stress profile')
    _add_target_arguments(stress_parser)
    stress_parser.add_argument(
        '--tiers', type=int, nargs='+', default=list(config.STRESS_TIERS),
        help=f'Concurrency tiers (default: {" ".join(map(str, config.STRESS_TIERS))})'
    )
    stress_parser.add_argument(
        '--cooldown', type=float, default=config.STRESS_COOLDOWN,
        help=f'Pause between tiers in seconds (default: {config.STRESS_COOLDOWN})'
    )
    stress_parser.add_argument(
        '--error-threshold', type=float, default=config.STRESS_ERROR_THRESHOLD,
        help=f'Error rate (%%) that stops the profile (default: {config.STRESS_ERROR_THRESHOLD})'
    )

    return parser.parse_args(argv)


def validate_arguments(args):
    """Validate parsed arguments. Returns True if valid."""
    if not args.url.startswith(('http://', 'https://')):
        print("ERROR: URL must start with http:// or https://")
        return False

    if args.command == 'run':
        if args.concurrency < 0 or args.concurrency > config.MAX_CONCURRENCY:
            print(f"ERROR: Concurrency must be between 0 and {config.MAX_CONCURRENCY}")
            return False
        if args.requests < 0:
            print("ERROR: Requests per user cannot be negative")
            return False
        if args.ramp_up < 0:
            print("ERROR: Ramp-up cannot be negative")
            return False

    if args.command == 'stress':
        if any(tier < 1 or tier > config.MAX_CONCURRENCY for tier in args.tiers):
            print(f"ERROR: Stress tiers must be between 1 and {config.MAX_CONCURRENCY}")
            return False
        if args.cooldown < 0:
            print("ERROR: Cooldown cannot be negative")
            return False

    return True


def print_banner():
    """Print ASCII art banner."""
    banner = r"""
+-----------------------------------------------------------------------+
|                                                                       |
|   Enterprise Readiness Assessment                                     |
|                                                                       |
|   Load Testing | Vulnerability Probing | Compliance Controls          |
|                                                                       |
|   WARNING: For authorized testing only!                               |
|                                                                       |
+-----------------------------------------------------------------------+
    """
    print(banner)


# ----------------------------------------------------------------------
# Commands
# ----------------------------------------------------------------------
def run_suite(args):
    print("\n[*] Assessment Configuration:")
    print(f"    Target URL  : {args.url}")
    print(f"    Concurrency : {args.concurrency} users x {args.requests} requests")
    print(f"    Source Root : {args.source_root}")
    print(f"    Fail Closed : {args.fail_closed}")
    print(f"    Output Dir  : {args.output_dir}")
    print()

    orchestrator = Orchestrator(
        source_root=args.source_root,
        writer=ReportWriter(args.output_dir),
        endpoints=args.endpoints,
        concurrency=args.concurrency,
        requests_per_user=args.requests,
        ramp_up=args.ramp_up,
        duration=args.duration,
        fail_closed=args.fail_closed,
        write_html=args.html,
    )
    report = orchestrator.run_full_suite(args.url)
    print_console_report(report)

    record = orchestrator.last_run
    if record.persisted:
        print("\n[+] Report files generated:")
        print(f"    JSON: {record.artifact}")
        if record.html_artifact:
            print(f"    HTML: {record.html_artifact}")
    else:
        print(f"\n[!] Report was not saved: {record.persistence_error}")


def run_stress(args):
    print("\n[*] Stress Profile Configuration:")
    print(f"    Target URL : {args.url}")
    print(f"    Tiers      : {', '.join(map(str, args.tiers))}")
    print(f"    Threshold  : {args.error_threshold}% errors")
    print()

    orchestrator = Orchestrator(endpoints=args.endpoints)
    stress = orchestrator.run_stress_profile(
        args.url,
        tiers=args.tiers,
        endpoints=args.endpoints,
        error_threshold=args.error_threshold,
        cooldown=args.cooldown,
    )
    print_stress_report(args.url, stress)


# ----------------------------------------------------------------------
# Main
# ----------------------------------------------------------------------
def main(argv=None):
    """Main entry point for the readiness assessment."""
    args = parse_arguments(argv)

    if not validate_arguments(args):
        sys.exit(1)

    logger = setup_logger('readiness', verbose=args.verbose)
    print_banner()

    try:
        if args.command == 'stress':
            run_stress(args)
        else:
            run_suite(args)
        print("\n[+] Done!")

    except KeyboardInterrupt:
        print("\n\n[!] Assessment interrupted by user.")
        logger.info("Assessment interrupted by user (Ctrl+C)")
        sys.exit(130)

    except Exception as e:
        print(f"\n[!] Error: {e}")
        logger.exception("Unhandled exception in main")
        sys.exit(1)


if __name__ == '__main__':
    main()
