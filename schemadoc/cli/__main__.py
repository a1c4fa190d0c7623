from __future__ import annotations

import argparse
import sys

from . import export_csv, import_sheets

"""``python -m schemadoc.cli {export,import}`` dispatcher."""


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="schemadoc", description="MySQL schema -> CSV -> Google Sheets")
    sub = p.add_subparsers(dest="command", required=True)
    export_csv.build_parser(sub.add_parser("export", help="Export schema metadata to CSV"))
    import_sheets.build_parser(sub.add_parser("import", help="Upload CSV files to Google Sheets"))
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    if args.command == "export":
        return export_csv.run(args)
    return import_sheets.run(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
