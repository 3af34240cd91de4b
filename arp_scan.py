#!/usr/bin/env python3
"""ARP Scan - fast ARP network scanner.

Scans the local network with broadcast ARP requests to discover active
hosts, optionally labeling them from labels.txt and publishing their
hostnames to the system hosts file.

Usage:
    sudo arp-scan [-v] [-f] [-r CIDR] [-l [--add-hosts [--dummy]]]
"""
import argparse
import sys
from pathlib import Path
from typing import List, Optional

from config import STORAGE, default_hosts_path, get_logger, setup_logging
from config.exceptions import ArpScanError, HostsFileError
from discovery.channel import open_channel
from discovery.interface import resolve_interface
from discovery.report import format_results
from discovery.scanner import ArpScanner, parse_range
from storage.hosts_file import HostsFileReconciler, format_preview
from storage.label_store import LabelStore

logger = get_logger(__name__)

EPILOG = """
Output Format:
  Default:
    192.168.0.1\t40:0D:10:88:92:90
  With labels:
    192.168.0.1\t40:0D:10:88:92:90\trouter.local\tRouter
    192.168.0.2\t00:12:41:89:3F:4C\tNAS

Examples:
  arp-scan                          Perform a basic network scan
  arp-scan -v                       Perform a scan with detailed progress information
  arp-scan -f                       Perform a faster scan with shorter timeouts
  arp-scan -r 192.168.1.0/24        Scan a specific network range
  arp-scan -l                       Include labels from labels.txt
  arp-scan -l --add-hosts           Update hosts file with discovered hostnames
  arp-scan -l --add-hosts --dummy   Preview hosts file updates

Label File Format (labels.txt):
  MAC_ADDRESS=LABEL=HOSTNAME
  Example: 40:0D:10:88:92:90=Router=router.local
  Note: HOSTNAME is optional

Notes:
  - Requires administrator/root privileges
  - Automatically detects and uses the primary network interface
  - MAC addresses are displayed in uppercase
  - Fast mode (-f) reduces scan time but may miss slower hosts
  - Custom range option overrides auto-detected network range
  - Unlabeled hosts are added to labels.txt with blank fields when -l is used
  - --add-hosts requires --lookup and hostnames in labels.txt
"""


def _range_arg(text: str):
    try:
        return parse_range(text)
    except ArpScanError as e:
        raise argparse.ArgumentTypeError(e.message) from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="arp-scan",
        description="Scans the local network using ARP requests to discover active hosts.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EPILOG,
    )
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Print detailed progress information")
    parser.add_argument("-f", "--fast", action="store_true",
                        help="Use shorter timeouts for quick-responding networks")
    parser.add_argument("-r", "--range", dest="custom_range", type=_range_arg, metavar="CIDR",
                        help="Scan custom IP range (e.g., 192.168.0.0/24)")
    parser.add_argument("-l", "--lookup", action="store_true",
                        help="Look up labels from the labels file")
    parser.add_argument("--add-hosts", action="store_true",
                        help="Update the hosts file with discovered hostnames")
    parser.add_argument("--dummy", action="store_true",
                        help="Preview hosts file updates without making changes")
    parser.add_argument("--labels-file", type=Path, default=Path(STORAGE.LABELS_FILE),
                        help=f"Label inventory file (default: {STORAGE.LABELS_FILE})")
    parser.add_argument("--hosts-file", type=Path, default=None,
                        help=f"Hosts file to update (default: {default_hosts_path()})")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.add_hosts and not args.lookup:
        parser.error("--add-hosts option requires --lookup")
    return args


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point. Returns the process exit status."""
    args = parse_args(argv)
    setup_logging(debug=args.verbose, console_output=True)
    logger.debug(f"Starting scan with options: {vars(args)}")

    label_store = LabelStore(args.labels_file) if args.lookup else None
    labels = None

    try:
        if label_store is not None:
            labels = label_store.load()
        interface = resolve_interface()
        with open_channel(interface.name) as channel:
            scanner = ArpScanner(
                interface,
                channel,
                fast_mode=args.fast,
                custom_range=args.custom_range,
                label_store=label_store,
                labels=labels,
            )
            hosts = scanner.scan()
    except ArpScanError as e:
        logger.error(f"Scan failed: {e}")
        logger.debug("Scan failure details", exc_info=True)
        return 1

    for line in format_results(hosts, labels):
        print(line)

    if args.add_hosts:
        hosts_path = args.hosts_file or default_hosts_path()
        reconciler = HostsFileReconciler(hosts_path, preview=args.dummy)
        try:
            update = reconciler.reconcile(hosts, labels or {})
        except HostsFileError as e:
            logger.error(f"Hosts file update failed: {e}")
            return 1
        if args.dummy:
            print(format_preview(update))

    return 0


if __name__ == "__main__":
    sys.exit(main())
