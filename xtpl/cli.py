from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .config import XtplConfig, collect_variables, load_config
from .engine import TemplateProcessor, read_template
from .errors import ConfigError, XtplUserError
from .filters.registry import FilterRegistry, create_default_registry
from .filters_list_schema import FilterInfo, FiltersList
from .jsonic import dumps as jdumps
from .logs import configure_logging
from .template.resolver import EnvironmentView
from .types import ExpandOptions
from .version import tool_version

STDOUT = "-"


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="xtpl",
        description="Expand {{ var.NAME | filter:arg }} placeholders in text files",
        add_help=True,
    )
    p.add_argument("-V", "--version", action="version", version=f"%(prog)s {tool_version()}")
    sub = p.add_subparsers(dest="cmd", required=True)

    sp_expand = sub.add_parser("expand", help="Expand one or more templates")
    sp_expand.add_argument("templates", nargs="+", metavar="TEMPLATE", help="template file(s)")
    sp_expand.add_argument(
        "-o", "--output",
        metavar="PATH|-",
        help="output file (one template), output directory (several), or - for stdout; "
             "default: template path without its .template/.tpl suffix",
    )
    sp_expand.add_argument(
        "--var",
        action="append",
        metavar="NAME=VALUE",
        help="define a variable (repeatable, overrides --vars-file and xtpl.yaml)",
    )
    sp_expand.add_argument(
        "--vars-file",
        action="append",
        metavar="FILE",
        help="YAML file with variables (repeatable, later files win)",
    )
    sp_expand.add_argument("--encoding", help="output encoding (default: by suffix, .reg -> utf-16, else utf-8)")
    case = sp_expand.add_mutually_exclusive_group()
    case.add_argument(
        "--env-case-sensitive", dest="env_case", action="store_const", const=True, default=None,
        help="match env.NAME case-sensitively",
    )
    case.add_argument(
        "--env-case-insensitive", dest="env_case", action="store_const", const=False,
        help="match env.NAME case-insensitively",
    )
    sp_expand.add_argument(
        "--keep-going",
        action="store_true",
        help="report failed templates and continue with the rest (exit code 1)",
    )
    sp_expand.add_argument("--config", metavar="FILE", help="configuration file (default: ./xtpl.yaml if present)")
    sp_expand.add_argument("-v", "--verbose", action="count", default=0, help="more logging (-vv for debug)")

    sp_list = sub.add_parser("list", help="List entities (JSON)")
    sp_list.add_argument("what", choices=["filters"], help="what to list")

    return p


def describe_filters(registry: FilterRegistry) -> FiltersList:
    return FiltersList(filters=[
        FilterInfo(
            name=spec.name,
            category=spec.category,
            usage=spec.usage(),
            min_args=spec.min_args,
            max_args=spec.max_args,
            accepts=spec.accepts,
            summary=spec.summary,
        )
        for spec in registry.specs()
    ])


def _target_for(template: Path, output: Optional[str], several: bool, cfg: XtplConfig) -> Path:
    if output is None:
        target = cfg.output_path_for(template)
    elif several:
        try:
            name = cfg.output_path_for(template).name
        except ConfigError:
            name = template.name
        target = Path(output) / name
    else:
        target = Path(output)
    if target.resolve() == template.resolve():
        raise ConfigError(f"Refusing to overwrite the template itself: {template}")
    return target


def _run_expand(ns: argparse.Namespace) -> int:
    log = configure_logging(ns.verbose)
    cfg = load_config(Path(ns.config) if ns.config else None)
    variables = collect_variables(cfg, [Path(f) for f in ns.vars_file or []], ns.var or [])
    env_case = ns.env_case if ns.env_case is not None else cfg.env_case_sensitive

    options = ExpandOptions(
        input_encoding=cfg.input_encoding,
        output_encoding=cfg.output_encoding,
        env_case_sensitive=env_case,
        logger=log,
    )
    processor = TemplateProcessor(options=options)
    environment = EnvironmentView(case_sensitive=env_case)

    templates: List[Path] = [Path(t) for t in ns.templates]
    several = len(templates) > 1
    if ns.output == STDOUT and several:
        raise ConfigError("-o - accepts a single template")

    failures = 0
    for template in templates:
        try:
            if ns.output == STDOUT:
                text = read_template(template, cfg.input_encoding)
                result = processor.expand(text, variables, environment, template_name=str(template))
                if ns.encoding:
                    encoding = cfg.output_encoding_for(Path(STDOUT), ns.encoding)
                    try:
                        data = result.encode(encoding)
                    except UnicodeEncodeError as e:
                        raise XtplUserError(
                            f"{template}: expanded text cannot be encoded as {encoding}: {e.reason}"
                        ) from e
                    sys.stdout.flush()
                    sys.stdout.buffer.write(data)
                else:
                    sys.stdout.write(result)
            else:
                target = _target_for(template, ns.output, several, cfg)
                encoding = cfg.output_encoding_for(target, ns.encoding)
                processor.expand_file(template, target, variables, environment, output_encoding=encoding)
        except XtplUserError as e:
            if not ns.keep_going:
                raise
            failures += 1
            log.error("%s", e)

    if failures:
        log.warning("%d of %d template(s) failed", failures, len(templates))
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    ns = _build_parser().parse_args(argv)

    try:
        if ns.cmd == "expand":
            return _run_expand(ns)

        if ns.cmd == "list":
            if ns.what == "filters":
                data = describe_filters(create_default_registry())
            else:
                raise ValueError(f"Unknown list target: {ns.what}")
            sys.stdout.write(jdumps(data))
            return 0

    except XtplUserError as e:
        sys.stderr.write(str(e).rstrip() + "\n")
        return 2

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
