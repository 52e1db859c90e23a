from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import load_data_file
from .environment import Environment
from .errors import MkyUserError, UsageError
from .types import DirectoryType, TemplateId
from .version import tool_version


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose or os.environ.get("MKY_DEBUG") else logging.WARNING
    root = logging.getLogger("mky")
    root.setLevel(level)
    if not root.handlers:
        h = logging.StreamHandler()
        h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        root.addHandler(h)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="mky",
        description="Template compiler and component renderer",
        add_help=True,
    )
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {tool_version()}")
    p.add_argument("--root", default=".", help="project root holding mky.yaml (default: cwd)")
    p.add_argument("--verbose", action="store_true", help="debug logging to stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp_render = sub.add_parser("render", help="Render a template to stdout")
    sp_render.add_argument("target", help="role:name | name (a view)")
    sp_render.add_argument("--data", metavar="FILE", help="YAML/JSON mapping of variables to bind")
    sp_render.add_argument(
        "--set",
        action="append",
        metavar="NAME=VALUE",
        help="bind a single variable (can be repeated, wins over --data)",
    )
    sp_render.add_argument("--layout", help="layout wrapping a rendered view")

    sp_compile = sub.add_parser("compile", help="Print the compiled artifact of a template")
    sp_compile.add_argument("target", help="role:name | name (a view)")

    sp_list = sub.add_parser("list", help="List templates of a role (JSON)")
    sp_list.add_argument("role", choices=[r.value for r in DirectoryType], help="template role")

    sp_cache = sub.add_parser("cache", help="Artifact cache snapshot (JSON)")
    sp_cache.add_argument("--clear", action="store_true", help="purge the cache before the snapshot")

    return p


def _parse_sets(items: Optional[List[str]]) -> Dict[str, str]:
    """Parses NAME=VALUE pairs into a dict."""
    result: Dict[str, str] = {}
    for item in items or []:
        if "=" not in item:
            raise UsageError(f"Invalid --set '{item}'. Expected 'NAME=VALUE'")
        name, value = item.split("=", 1)
        result[name.strip()] = value
    return result


def _parse_target(text: str) -> TemplateId:
    try:
        return TemplateId.parse(text)
    except ValueError as e:
        raise UsageError(str(e)) from e


def _render(env: Environment, ns: argparse.Namespace) -> str:
    variables: Dict[str, Any] = {}
    if ns.data:
        variables.update(load_data_file(Path(ns.data)))
    variables.update(_parse_sets(ns.set))

    target = _parse_target(ns.target)
    if target.role is DirectoryType.VIEW:
        view = env.view(target.name).multiple_bind(variables)
        return view.extends(ns.layout).render()
    if ns.layout:
        raise UsageError("--layout applies to views only")
    if target.role is DirectoryType.COMPONENT:
        return env.component(target.name).multiple_bind(variables).render()
    raise UsageError(f"Cannot render '{target}' directly; layouts are rendered through views")


def _jdumps(data: Any) -> str:
    return json.dumps(data, ensure_ascii=False, indent=2, default=str) + "\n"


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)
    _setup_logging(bool(ns.verbose))

    try:
        env = Environment.load(Path(ns.root))

        if ns.cmd == "render":
            sys.stdout.write(_render(env, ns))
            return 0

        if ns.cmd == "compile":
            artifact = env.cache.resolve(_parse_target(ns.target))
            sys.stdout.write(artifact.code)
            return 0

        if ns.cmd == "list":
            sys.stdout.write(_jdumps({"templates": env.list_templates(ns.role)}))
            return 0

        if ns.cmd == "cache":
            if ns.clear:
                env.cache.purge()
            sys.stdout.write(_jdumps(asdict(env.cache.snapshot())))
            return 0

    except MkyUserError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
