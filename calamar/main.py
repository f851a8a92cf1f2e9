"""Entry point: search | networks."""

import argparse
import sys

from calamar.contracts.entities_v1 import EntityKind


def main():
    parser = argparse.ArgumentParser(prog="calamar-search")
    sub = parser.add_subparsers(dest="mode")

    search = sub.add_parser("search", help="Search all entity kinds on the selected networks")
    search.add_argument("query", nargs="*")
    search.add_argument("--network", "-n", action="append", default=[], help="Repeatable; default: all")
    search.add_argument("--tab", choices=[k.value for k in EntityKind])
    search.add_argument("--page", type=int, default=1)

    sub.add_parser("networks", help="List selectable networks")

    args = parser.parse_args()
    mode = args.mode or "search"

    if mode == "networks":
        from calamar.interfaces.oneshot import list_networks

        sys.exit(list_networks())

    from calamar.interfaces.oneshot import main as run_oneshot_main

    query_parts = getattr(args, "query", None) or []
    query = " ".join(query_parts).strip() if query_parts else sys.stdin.read().strip()
    tab = EntityKind(args.tab) if getattr(args, "tab", None) else None
    sys.exit(
        run_oneshot_main(
            query=query,
            networks=getattr(args, "network", []),
            tab=tab,
            page=getattr(args, "page", 1),
        )
    )


if __name__ == "__main__":
    main()
