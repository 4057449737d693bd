"""Command-line interface for aasvg compile/render workflows."""
from __future__ import annotations

import argparse
import json
import os
import sys
import traceback
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from .aasvg import RenderOptions, render_with_options
from .raster import render_png
from .resources import load_cheatsheet


@dataclass
class CliError(Exception):
    code: str
    message: str
    hint: Optional[str] = None
    exit_code: int = 1
    file: Optional[str] = None
    retryable: bool = True


class UsageError(Exception):
    pass


class FriendlyArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # pragma: no cover - argparse callback
        raise UsageError(message)


def _add_common_arguments(parser: argparse.ArgumentParser, *, output_kind: str) -> None:
    parser.add_argument("input", nargs="?", help="Input diagram text file (stdin if omitted)")
    parser.add_argument("--text", help="Raw diagram source")
    parser.add_argument("--stdout", action="store_true", help=f"Write {output_kind} to stdout")
    parser.add_argument("-o", "--output", help=f"Output {output_kind} path")
    parser.add_argument("--backdrop", action="store_true", help="Paint a white background")
    parser.add_argument("--no-text", dest="no_text", action="store_true", help="Skip leftover text glyphs")
    parser.add_argument(
        "--spaces",
        type=int,
        default=0,
        help="Group text into runs ending at N consecutive spaces (0: one element per glyph)",
    )
    parser.add_argument("--stretch", action="store_true", help="Fit text runs to their cells")


def _build_parser() -> argparse.ArgumentParser:
    parser = FriendlyArgumentParser(
        prog="aasvg",
        description="Convert ASCII-art diagrams to SVG or PNG.",
    )
    parser.add_argument("--error-format", choices=["text", "json"], default="text")
    parser.add_argument("--debug", action="store_true")

    subparsers = parser.add_subparsers(dest="command")

    compile_parser = subparsers.add_parser("compile", help="Convert a diagram to SVG")
    _add_common_arguments(compile_parser, output_kind="SVG")

    render_parser = subparsers.add_parser("render", help="Rasterize a diagram to PNG")
    _add_common_arguments(render_parser, output_kind="PNG")
    render_parser.add_argument("--scale", type=float, default=1.0)

    subparsers.add_parser("cheatsheet", help="Print the drawing character reference")

    return parser


def _read_input(path: Optional[str], text: Optional[str]) -> tuple[str, Optional[Path]]:
    if path and text is not None:
        raise CliError(
            "E_ARGS",
            "--text cannot be combined with file input",
            hint="Use either FILE or --text.",
            exit_code=2,
        )

    if text is not None:
        return text, None

    if path:
        input_path = Path(path)
        if not input_path.exists():
            raise CliError(
                "E_IO_READ",
                f"input file not found: {input_path}",
                exit_code=2,
                file=str(input_path),
            )
        try:
            return input_path.read_text(encoding="utf-8"), input_path
        except (OSError, UnicodeDecodeError) as exc:
            raise CliError(
                "E_IO_READ",
                f"failed to read input file: {input_path}",
                hint=str(exc),
                exit_code=2,
                file=str(input_path),
            )

    if sys.stdin.isatty():
        raise CliError(
            "E_ARGS",
            "no input provided",
            hint="Use a subcommand with FILE, --text, or pipe stdin.",
            exit_code=2,
        )

    # An empty diagram is still a diagram; it renders to an empty canvas.
    return sys.stdin.read(), None


def _write_text(path: Path, content: str) -> None:
    try:
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise CliError(
            "E_IO_WRITE",
            f"failed to write output file: {path}",
            hint=str(exc),
            exit_code=4,
            file=str(path),
        )


def _write_bytes(path: Path, content: bytes) -> None:
    try:
        path.write_bytes(content)
    except OSError as exc:
        raise CliError(
            "E_IO_WRITE",
            f"failed to write output file: {path}",
            hint=str(exc),
            exit_code=4,
            file=str(path),
        )


def _error_from_exception(exc: Exception) -> CliError:
    if isinstance(exc, CliError):
        return exc
    return CliError(
        "E_INTERNAL",
        str(exc) or exc.__class__.__name__,
        hint="Re-run with --debug to see traceback.",
        exit_code=1,
        retryable=False,
    )


def _emit_error(err: CliError, *, error_format: str) -> None:
    if error_format == "json":
        payload = {
            "ok": False,
            "code": err.code,
            "message": err.message,
            "file": err.file,
            "hint": err.hint,
            "retryable": err.retryable,
        }
        sys.stderr.write(json.dumps(payload) + "\n")
        return

    sys.stderr.write(f"error[{err.code}]: {err.message}\n")
    if err.hint:
        sys.stderr.write(f"hint: {err.hint}\n")


def _check_output_flags(args: argparse.Namespace) -> None:
    if args.stdout and args.output:
        raise CliError(
            "E_ARGS",
            "--stdout and --output are mutually exclusive",
            hint="Choose either --stdout or --output.",
            exit_code=2,
        )


def _options_from_args(args: argparse.Namespace) -> RenderOptions:
    if args.spaces < 0:
        raise CliError(
            "E_ARGS",
            "--spaces must be >= 0",
            hint="Use 0 for one text element per glyph, or 2 to group words.",
            exit_code=2,
        )
    return RenderOptions(
        backdrop=args.backdrop,
        disable_text=args.no_text,
        spaces=args.spaces,
        stretch=args.stretch,
    )


def _handle_compile(args: argparse.Namespace) -> int:
    _check_output_flags(args)
    source, source_path = _read_input(args.input, args.text)
    svg_text = render_with_options(source, _options_from_args(args))

    if args.output:
        output_path = Path(args.output)
    elif args.stdout or source_path is None:
        sys.stdout.write(svg_text)
        sys.stdout.write("\n")
        return 0
    else:
        output_path = source_path.with_suffix(".svg")
    _write_text(output_path, svg_text)
    print(f"Wrote {output_path}")
    return 0


def _handle_render(args: argparse.Namespace) -> int:
    _check_output_flags(args)
    if args.scale <= 0:
        raise CliError(
            "E_ARGS",
            "--scale must be > 0",
            hint="Use a positive scale factor like 1 or 2.",
            exit_code=2,
        )

    source, source_path = _read_input(args.input, args.text)
    png_bytes = render_png(source, scale=args.scale, options=_options_from_args(args))

    if args.output:
        output_path = Path(args.output)
    elif args.stdout or source_path is None:
        sys.stdout.buffer.write(png_bytes)
        return 0
    else:
        output_path = source_path.with_suffix(".png")
    _write_bytes(output_path, png_bytes)
    print(f"Wrote {output_path}")
    return 0


def main(argv: Optional[Iterable[str]] = None) -> int:
    raw_argv = list(argv) if argv is not None else sys.argv[1:]
    parser = _build_parser()

    if not raw_argv:
        err = CliError(
            "E_ARGS",
            "missing subcommand",
            hint="Use one of: compile, render, cheatsheet.",
            exit_code=2,
        )
        _emit_error(err, error_format="text")
        return err.exit_code

    debug_enabled = "--debug" in raw_argv or os.getenv("AASVG_DEBUG") == "1"
    error_format = "text"
    if "--error-format" in raw_argv:
        idx = raw_argv.index("--error-format")
        if idx + 1 < len(raw_argv):
            error_format = raw_argv[idx + 1]

    try:
        args = parser.parse_args(raw_argv)
        error_format = args.error_format

        if args.command == "compile":
            return _handle_compile(args)
        if args.command == "render":
            return _handle_render(args)
        if args.command == "cheatsheet":
            print(load_cheatsheet())
            return 0

        raise CliError(
            "E_ARGS",
            "missing subcommand",
            hint="Use one of: compile, render, cheatsheet.",
            exit_code=2,
        )
    except UsageError as exc:
        err = CliError(
            "E_ARGS",
            str(exc),
            hint="Use subcommands: compile, render, cheatsheet.",
            exit_code=2,
        )
        _emit_error(err, error_format=error_format)
        return err.exit_code
    except Exception as exc:  # pragma: no cover - exercised in integration tests
        err = _error_from_exception(exc)
        _emit_error(err, error_format=error_format)
        if debug_enabled:
            traceback.print_exc(file=sys.stderr)
        return err.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
