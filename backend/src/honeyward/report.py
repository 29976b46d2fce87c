# backend/src/honeyward/report.py
#
# Prints the honeypot security analysis report for a JSON-lines dump
# written by MemoryStore.dump().
#
# Run from backend/ directory:
#   python -m honeyward.report data/records.jsonl
#   python -m honeyward.report data/records.jsonl --csv data/security_logs.csv

import argparse
import sys
from datetime import datetime, timezone

from honeyward.db import ACTIVITY, MemoryStore
from honeyward.services.exporter import export_logs
from honeyward.services.reporting import Reporter


def print_report(reporter: Reporter, top: int = 10):
    s = reporter.summary()

    print("\n" + "=" * 50)
    print("  HoneyWard — Security Analysis Report")
    print("=" * 50)
    print(f"  Unique sessions       : {s['sessions']:,}")
    print(f"  Unique IP addresses   : {s['unique_ips']:,}")
    print(f"  Activities logged     : {s['total_activities']:,}")
    print()
    print(f"  Total incidents       : {s['total_incidents']:,}")
    print(f"  Unresolved            : {s['unresolved_incidents']:,}")
    print()
    print("  Severity breakdown:")
    for severity, count in s["incidents_by_severity"].items():
        print(f"    {severity:<25} {count:>6}")
    print()
    print("  Attack categories:")
    for category, count in s["incidents_by_category"].items():
        if count:
            print(f"    {category:<25} {count:>6}")
    print()
    print("  Top attacking IP addresses:")
    for i, row in enumerate(reporter.top_offenders(top), start=1):
        print(f"    {i:>2}. {row['ip_address']:<22} {row['incidents']:>6} incidents")
    print()
    print("  Most common activities:")
    for i, row in enumerate(reporter.top_actions(top), start=1):
        print(f"    {i:>2}. {row['action']:<22} {row['count']:>6} times")
    print()
    print("  Recent critical incidents:")
    for i, doc in enumerate(reporter.recent_critical(), start=1):
        print(f"    {i:>2}. {doc['category']} from {doc.get('ip_address') or 'unknown'} at {doc['timestamp']}")
    print()
    login = s["login"]
    print("  Authentication:")
    print(f"    Login attempts      : {login['attempts']:,}")
    print(f"    Successful          : {login['successes']:,}")
    print(f"    Failed              : {login['failures']:,}")
    print(f"    Success rate        : {login['success_rate']:.2f}%")
    print()
    print("  Last 24 hours:")
    print(f"    Activities          : {s['activities_24h']:,}")
    print(f"    Incidents           : {s['incidents_24h']:,}")
    print("=" * 50)
    print(f"  Generated at {datetime.now(timezone.utc).isoformat()}\n")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="HoneyWard security report")
    parser.add_argument("records", help="JSON-lines dump from MemoryStore.dump()")
    parser.add_argument("--top", type=int, default=10, help="rows in top-N tables")
    parser.add_argument("--csv", help="also export activity logs to this CSV file")
    args = parser.parse_args(argv)

    try:
        store = MemoryStore.load(args.records)
    except (OSError, ValueError, KeyError) as e:
        print(f"[report] Could not load {args.records}: {e}", file=sys.stderr)
        return 1

    reporter = Reporter(store)
    print_report(reporter, args.top)

    if args.csv:
        export_logs(reporter.logs(limit=store.count(ACTIVITY)), args.csv)

    return 0


if __name__ == "__main__":
    sys.exit(main())
