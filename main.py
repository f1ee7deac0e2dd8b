#!/usr/bin/env python3
"""
httpdconf - Apache httpd configuration line reader
CLI Entry Point

Reads an httpd configuration tree (Include, Define, IfModule, VirtualHost)
and prints its logical lines or the files it actually includes.

Usage:
    python main.py --config conf/httpd.conf [--server-root /etc/httpd] [--modules-file modules.txt]
    python main.py --config conf/httpd.conf --list files [--duplicates] [--format json]
"""

import argparse
import sys
import json
import logging
from typing import List, Optional

from core.include_expander import CyclicIncludeError  # pyre-ignore
from core.module_catalog import load_module_listing, modules_from_names  # pyre-ignore
from parsers.apache_parser import ApacheParser, default_server_root  # pyre-ignore


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )


def build_parser(
    config_path: str,
    server_root: str = None,  # pyre-ignore
    modules_file: str = None,  # pyre-ignore
    module_names: List[str] = None,  # pyre-ignore
) -> ApacheParser:
    """
    Create an ApacheParser from command line style settings.

    Args:
        config_path: Root configuration file.
        server_root: Server root (default: parent of conf/ when the root
            file lives there, else the directory of the root file).
        modules_file: Saved `httpd -M` or `httpd -l` output.
        module_names: Extra module names, treated as shared modules.
    """
    if not server_root:
        server_root = default_server_root(config_path)

    static_modules, shared_modules = [], []
    if modules_file:
        static_modules, shared_modules = load_module_listing(modules_file)
    if module_names:
        shared_modules = shared_modules + modules_from_names(module_names)

    return ApacheParser(config_path, server_root, static_modules, shared_modules)


def run_listing(
    parser: ApacheParser,
    listing: str = "lines",
    file: str = None,  # pyre-ignore
    include_vhosts: bool = True,
    duplicates: bool = False,
    output_format: str = "text",
) -> str:
    """
    Produce the requested view of the configuration as text.

    Args:
        parser: Configured ApacheParser.
        listing: "lines", "files" or "defines".
        file: Restrict "lines" to one file of the tree.
        include_vhosts: Keep <VirtualHost> content active.
        duplicates: For "files", list a file once per inclusion.
        output_format: "text" or "json".
    """
    logger = logging.getLogger("httpdconf")

    if listing == "files":
        logger.info("Collecting active configuration files...")
        if duplicates:
            files = parser.get_active_conf_file_list_with_duplicates()
        else:
            files = parser.get_active_conf_file_list()
        if output_format == "json":
            return json.dumps({"files": files}, indent=2)
        return "\n".join(files)

    if listing == "defines":
        logger.info("Resolving defines...")
        defines = parser.get_defines()
        if output_format == "json":
            return json.dumps({"defines": {d.name: d.value for d in defines}}, indent=2)
        return "\n".join(f"{d.name}={d.value}" for d in defines)

    logger.info("Reading configuration lines...")
    if file:
        lines = parser.get_file_parsable_lines(file, include_vhosts)
    else:
        lines = parser.get_configuration_parsable_lines(include_vhosts)

    if output_format == "json":
        return json.dumps({"lines": [line.to_dict() for line in lines]}, indent=2)

    rendered = []
    for line in lines:
        marker = "+" if line.active else "-"
        location = f"{line.source_file}:{line.start_line}"
        if line.end_line != line.start_line:
            location += f"-{line.end_line}"
        rendered.append(f"[{marker}] {location}  {line.processed_text}")
    return "\n".join(rendered)


def main(argv: Optional[List[str]] = None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="httpdconf",
        description="httpdconf - Apache httpd configuration line reader",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --config /etc/httpd/conf/httpd.conf --server-root /etc/httpd
  python main.py --config httpd.conf --modules-file modules.txt --exclude-vhosts
  python main.py --config httpd.conf --module ssl_module --list files --format json
  python main.py --config httpd.conf --list lines --file conf.d/ssl.conf
        """
    )

    parser.add_argument(
        "--config", "-c",
        required=True,
        help="Path to the root configuration file"
    )
    parser.add_argument(
        "--server-root", "-r",
        default=None,
        help="Server root for relative Include paths (default: parent of conf/ "
             "when --config lives there, else the directory of --config)"
    )
    parser.add_argument(
        "--modules-file", "-m",
        default=None,
        help="File holding `httpd -M` or `httpd -l` output"
    )
    parser.add_argument(
        "--module",
        action="append",
        default=[],
        help="Module known to the server, e.g. ssl_module (repeatable)"
    )
    parser.add_argument(
        "--list", "-l",
        choices=["lines", "files", "defines"],
        default="lines",
        help="What to print (default: lines)"
    )
    parser.add_argument(
        "--file",
        default=None,
        help="Only print the lines of this file (with --list lines)"
    )
    parser.add_argument(
        "--exclude-vhosts",
        action="store_true",
        help="Mark lines inside <VirtualHost> sections inactive"
    )
    parser.add_argument(
        "--duplicates",
        action="store_true",
        help="List a file once per inclusion (with --list files)"
    )
    parser.add_argument(
        "--format", "-f",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose/debug logging"
    )

    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    try:
        apache_parser = build_parser(
            config_path=args.config,
            server_root=args.server_root,  # pyre-ignore
            modules_file=args.modules_file,  # pyre-ignore
            module_names=args.module,
        )
        output = run_listing(
            apache_parser,
            listing=args.list,
            file=args.file,  # pyre-ignore
            include_vhosts=not args.exclude_vhosts,
            duplicates=args.duplicates,
            output_format=args.format,
        )
    except FileNotFoundError as e:
        print(f"\n  [ERROR] File Error: {e}", file=sys.stderr)
        sys.exit(1)
    except CyclicIncludeError as e:
        print(f"\n  [ERROR] Include Error: {e}", file=sys.stderr)
        sys.exit(1)
    except (ValueError, PermissionError) as e:
        print(f"\n  [ERROR] Read Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"\n  [ERROR] Unexpected Error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)

    print(output)


if __name__ == "__main__":
    main()
