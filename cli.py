#!/usr/bin/env python3
import argparse

from warrantylink.orchestrator import run_once


def main():
    parser = argparse.ArgumentParser(description="Warranty linkage CLI")
    parser.add_argument("--config", required=True, help="Path to YAML config")
    parser.add_argument("--input", dest="input_path", type=str, help="Product snapshot (JSON or YAML), overrides input.path")
    parser.add_argument("--include-archived", dest="include_archived", action="store_true", help="Keep archived products")
    parser.add_argument("--exclude-archived", dest="include_archived", action="store_false", help="Drop archived products")
    parser.add_argument("--window-days", dest="window_days", type=int, help="Purchase-date window for keyword links")
    parser.add_argument("--keyword", dest="keywords", action="append", help="Warranty keyword (repeatable, replaces defaults)")
    parser.add_argument("--output-dir", dest="output_dir", type=str, help="Output directory")
    parser.set_defaults(include_archived=None)
    args = parser.parse_args()

    overrides = {
        "input_path": args.input_path,
        "include_archived": args.include_archived,
        "window_days": args.window_days,
        "keywords": args.keywords,
        "output_dir": args.output_dir,
    }

    files = run_once(args.config, overrides=overrides)
    for path in files:
        print(path)


if __name__ == "__main__":
    main()
