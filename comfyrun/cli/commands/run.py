"""Workflow execution CLI commands."""

import argparse
import json
from pathlib import Path

from comfyrun.execution.errors import WorkflowError
from comfyrun.execution.job import DEFAULT_JPEG_QUALITY, DEFAULT_TIMEOUT_MINUTES, JobRequest
from comfyrun.execution.runner import run_workflow
from comfyrun.remote.config import ConfigError, load_server_config


def _positive_int(value):
    """argparse type for counts that must be at least 1."""
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _safe_subfolder(subfolder: str) -> Path:
    # Server-supplied, so never let it climb out of the output directory
    parts = [part for part in subfolder.replace("\\", "/").split("/") if part not in ("", ".", "..")]
    return Path(*parts)


def write_records(records, output_dir: Path) -> list[Path]:
    """Write successful records under output_dir.

    Each file goes to ``{subfolder}/{stem}.{file_type}``, mirroring the
    server's layout. When two records map to the same path in one run (for
    example ``a.png`` and ``a.jpg`` both re-encoded to jpeg) the later ones
    get a ``_1``, ``_2``... suffix instead of overwriting the first.
    """
    written = []
    taken = set()
    for record in records:
        if not record.success:
            continue
        target_dir = output_dir / _safe_subfolder(record.subfolder)
        stem = Path(record.filename).stem
        path = target_dir / f"{stem}.{record.file_type}"
        counter = 1
        while path in taken:
            path = target_dir / f"{stem}_{counter}.{record.file_type}"
            counter += 1
        taken.add(path)

        target_dir.mkdir(parents=True, exist_ok=True)
        path.write_bytes(record.content)
        written.append(path)
    return written


def cmd_run(args):
    """Run a workflow file on the configured server."""
    workflow_path = Path(args.workflow)
    if not workflow_path.exists():
        print(f"Workflow not found: {workflow_path}")
        return 1

    try:
        config = load_server_config()
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    try:
        request = JobRequest.from_params(
            workflow_path.read_text(encoding="utf-8"),
            allowed_file_types=args.allowed_types,
            output_format=args.output_format,
            jpeg_quality=args.jpeg_quality,
            timeout=args.timeout,
        )
        records = run_workflow(config.create_client(), request, max_workers=args.workers)
    except WorkflowError as e:
        print(f"✗ Failed: {e}")
        return 1

    if args.json:
        print(json.dumps([record.to_item() for record in records], indent=2))
    else:
        for record in records:
            if record.success:
                print(f"✓ {record.filename} -> {record.file_type} ({record.mime_type}, {record.file_size})")
            else:
                print(f"✗ {record.filename}: {record.error}")

    if args.output_dir:
        written = write_records(records, Path(args.output_dir))
        if not args.json:
            print(f"Wrote {len(written)} files to {args.output_dir}")

    return 0


def setup_run_commands(subparsers):
    """Setup workflow execution subcommands."""
    run_parser = subparsers.add_parser("run", help="Execute a ComfyUI workflow and collect its outputs")
    run_parser.add_argument("--workflow", required=True, help="Path to the workflow JSON (API format)")
    run_parser.add_argument(
        "--allowed-types",
        nargs="+",
        choices=["png", "jpg", "mp3"],
        default=["png", "jpg"],
        help="File types to collect from the outputs",
    )
    run_parser.add_argument("--output-format", choices=["jpeg", "png"], default="jpeg", help="Format for image outputs")
    run_parser.add_argument("--jpeg-quality", type=int, default=DEFAULT_JPEG_QUALITY, help="JPEG quality (1-100)")
    run_parser.add_argument(
        "--timeout", type=int, default=DEFAULT_TIMEOUT_MINUTES, help="Minutes to wait for the workflow to finish"
    )
    run_parser.add_argument("--workers", type=_positive_int, default=4, help="Number of concurrent downloads")
    run_parser.add_argument("--output-dir", help="Directory to write the collected files to")
    run_parser.add_argument("--json", action="store_true", help="Print the output records as JSON")
    run_parser.set_defaults(func=cmd_run)
