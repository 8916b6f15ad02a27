"""
Command-line entry point for pingsweep.

This module parses arguments, loads the configuration, opens the result log
and hands the CIDR list to the Sweeper.
"""
import argparse
import logging
import sys
from typing import Any, Dict, List, Optional

import colorama
from colorama import Fore, Style

from . import configuration
from .errors import ConfigError, LogFileError
from .network import PROBE_METHODS, get_pinger
from .network.discovery import get_local_network
from .parsing import split_cidrs
from .privileges import elevation_hint, is_admin
from .reporting import ResultLog, ResultReporter
from .scanner import Sweeper

EXAMPLE = "pingsweep -c 10.0.0.0/24,192.168.1.0/24 -o scan.log -t 500 -n 200"


def build_parser(config: Dict[str, Any]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pingsweep",
        description="ICMP ping sweep over one or more IPv4 CIDR blocks.",
        epilog=f"Example:\n  {EXAMPLE}",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-c", dest="cidrs", metavar="CIDRS",
                        help='CIDR list, comma separated (e.g. "10.0.0.0/24,192.168.1.0/24")')
    parser.add_argument("-o", dest="log_file", metavar="PATH", default=config['log_file'],
                        help="log file path (default: %(default)s)")
    parser.add_argument("-t", dest="timeout_ms", metavar="MS", type=int, default=config['timeout_ms'],
                        help="ping timeout in milliseconds (default: %(default)s)")
    parser.add_argument("-n", dest="concurrency", metavar="COUNT", type=int, default=config['concurrency'],
                        help="number of concurrent probes (default: %(default)s)")
    parser.add_argument("--local", action="store_true",
                        help="also sweep the IPv4 network of the primary interface")
    parser.add_argument("--method", choices=PROBE_METHODS, default=config['probe_method'],
                        help="ICMP transport (default: %(default)s)")
    parser.add_argument("--config", metavar="PATH",
                        help="YAML configuration file (default: pingsweep.yaml)")
    parser.add_argument("--write-config", action="store_true",
                        help="write the effective settings to the configuration file and exit")
    parser.add_argument("--no-color", dest="color", action="store_false", default=bool(config['color']),
                        help="disable colored output")
    parser.add_argument("--no-progress", dest="show_progress", action="store_false",
                        default=bool(config['show_progress']), help="hide the live progress line")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser


def _pre_parse(argv: List[str]) -> argparse.Namespace:
    """
    Finds --config and -v before full parsing. The config supplies the
    parser's defaults, and logging must be set up before it is loaded.
    """
    pre = argparse.ArgumentParser(add_help=False)
    pre.add_argument("--config")
    pre.add_argument("-v", "--verbose", action="store_true")
    known, _ = pre.parse_known_args(argv)
    return known


def _say(color_enabled: bool, color: str, message: str):
    print(f"{color}{message}{Style.RESET_ALL}" if color_enabled else message)


def _positive_or_default(value: Any, default: int, label: str, color: bool) -> int:
    """Returns value if it is a positive int, otherwise warns and returns default."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        number = 0
    if number <= 0:
        _say(color, Fore.YELLOW, f"Warning: Invalid {label} ({value}), using default {default}")
        return default
    return number


def main(argv: Optional[List[str]] = None) -> int:
    """Runs the sweep and returns the process exit status."""
    argv = list(sys.argv[1:] if argv is None else argv)

    early = _pre_parse(argv)
    logging.basicConfig(
        level=logging.DEBUG if early.verbose else logging.WARNING,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    try:
        config = configuration.load_config(early.config)
    except ConfigError as e:
        print(f"FATAL: {e}", file=sys.stderr)
        return 1

    parser = build_parser(config)
    args = parser.parse_args(argv)

    if args.color:
        colorama.init()

    timeout_ms = _positive_or_default(args.timeout_ms, configuration.DEFAULT_TIMEOUT_MS, "timeout value", args.color)
    concurrency = _positive_or_default(args.concurrency, configuration.DEFAULT_CONCURRENCY, "thread count", args.color)

    if args.write_config:
        effective = dict(config, log_file=args.log_file, timeout_ms=timeout_ms, concurrency=concurrency,
                         probe_method=args.method, color=args.color, show_progress=args.show_progress)
        try:
            configuration.save_config(effective, args.config)
        except ConfigError as e:
            _say(args.color, Fore.RED, f"Error: {e}")
            return 1
        print(f"Configuration written to {args.config or configuration.get_config_path()}")
        return 0

    if not args.cidrs and not args.local:
        _say(args.color, Fore.RED, "Error: Missing required -c parameter")
        parser.print_help()
        return 0

    cidrs = split_cidrs(args.cidrs or "")
    if args.local:
        local = get_local_network()
        if local:
            cidrs.append(local)
        else:
            _say(args.color, Fore.YELLOW, "Warning: Could not determine the local IPv4 network")
    if not cidrs:
        _say(args.color, Fore.RED, "Error: No valid CIDRs provided")
        return 0

    try:
        pinger = get_pinger(args.method)
    except ValueError as e:
        _say(args.color, Fore.RED, f"Error: {e}")
        return 1
    if args.method == "raw" and not is_admin():
        _say(args.color, Fore.YELLOW, f"Warning: Raw ICMP sockets need elevated privileges. {elevation_hint()}")

    result_log = ResultLog(args.log_file, color=args.color)
    try:
        result_log.open()
    except LogFileError as e:
        _say(args.color, Fore.RED, f"Error: {e}")
        return 1

    _say(args.color, Fore.CYAN, "Configuration:")
    print(f"  CIDRs:      {', '.join(cidrs)}")
    print(f"  Log file:   {args.log_file}")
    print(f"  Timeout:    {timeout_ms} ms")
    print(f"  Threads:    {concurrency}")
    print()

    sweeper = Sweeper(
        probe=pinger.ping,
        timeout_ms=timeout_ms,
        concurrency=concurrency,
        reporter=ResultReporter(columns=config['grid_columns'], color=args.color),
        result_log=result_log,
        color=args.color,
        show_progress=args.show_progress,
    )
    try:
        with result_log:
            report = sweeper.run(cidrs)
    except KeyboardInterrupt:
        _say(args.color, Fore.RED, "\nScan interrupted.")
        return 130

    logging.info(f"Sweep finished: {report.alive} alive, {report.dead} dead, {len(report.errors)} inputs skipped.")
    return 0
