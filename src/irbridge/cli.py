"""
irbridge CLI

    irbridge serve [--host H] [--port P]
    irbridge run FILE [--stage lex|ast|ir|optimize|compile] [--url URL]
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from irbridge.api.config import settings
from irbridge.codegen.client import CodegenClient
from irbridge.orchestration import PipelineCoordinator
from irbridge.pipeline.adapter import StageAdapter
from irbridge.pipeline.results import PipelineRun, Telemetry

STAGES = ("lex", "ast", "ir", "optimize", "compile")


class IrbridgeCLIError(Exception):
    """User-facing CLI error."""
    pass


def build_coordinator(url: str, timeout: float) -> PipelineCoordinator:
    return PipelineCoordinator(
        StageAdapter(),
        CodegenClient(url, timeout=timeout),
    )


def run_stage(coordinator: PipelineCoordinator, stage: str, source: str) -> PipelineRun:
    if stage == "lex":
        return coordinator.tokens(source)
    if stage == "ast":
        return coordinator.ast(source)
    if stage == "ir":
        return coordinator.ir(source)
    if stage == "optimize":
        return coordinator.optimized_ir(source)
    return asyncio.run(coordinator.compile_and_run(source))


def cmd_run(args) -> int:
    path = args.file.resolve()
    if not path.exists():
        raise IrbridgeCLIError(f"Source file not found: {path}")

    try:
        source = path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        raise IrbridgeCLIError(f"Source file is not valid UTF-8: {path.name}") from None
    coordinator = build_coordinator(args.url, args.timeout)
    run = run_stage(coordinator, args.stage, source)

    print(run.output, end="" if run.output.endswith("\n") else "\n")
    print()
    for line in Telemetry.from_run(run).lines():
        print(line)

    return 0 if run.success else 1


def cmd_serve(args) -> int:
    import uvicorn

    from irbridge.api.app import create_app

    uvicorn.run(create_app(), host=args.host, port=args.port, log_level=settings.log_level.lower())
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="irbridge",
        description="irbridge: staged C-subset -> LLVM IR -> assembly pipeline",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Logging level (default: %(default)s)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the compilation service")
    serve.add_argument("--host", default=settings.host)
    serve.add_argument("--port", type=int, default=settings.port)
    serve.set_defaults(func=cmd_serve)

    run = sub.add_parser("run", help="Run the pipeline on a source file")
    run.add_argument("file", type=Path, help="Path to C source file")
    run.add_argument("--stage", choices=STAGES, default="compile")
    run.add_argument("--url", default=settings.service_url, help="Compilation service base URL")
    run.add_argument("--timeout", type=float, default=settings.client_timeout)
    run.set_defaults(func=cmd_run)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(args)
    except IrbridgeCLIError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
