#!/usr/bin/env python3
"""Run the readiness checks from the command line.

Exit 0 if all required checks pass, 1 otherwise. With --json the summary
is printed as one JSON object, for deploy hooks.
"""
import argparse
import asyncio
import json
import sys

from meetspot.readiness import is_ready, run_all_checks_async


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--json", action="store_true", help="print the summary as JSON")
    args = parser.parse_args()

    checks = asyncio.run(run_all_checks_async())
    ready, summary = is_ready(checks)

    if args.json:
        print(json.dumps({"ready": ready, "checks": summary}))
        return 0 if ready else 1

    for name, msg in summary.items():
        print(f"  {name:<10} {'OK' if checks[name][0] else 'FAIL':<5} {msg}")
    print("")
    print("Readiness: READY" if ready else "Readiness: NOT READY")
    return 0 if ready else 1


if __name__ == "__main__":
    sys.exit(main())
