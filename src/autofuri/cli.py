from __future__ import annotations

import argparse
import json
import sys
from importlib import metadata
from pathlib import Path

import tomllib
from rich.console import Console
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn

from .core import FuriganaEngine
from .logging_utils import debug_log, set_debug_logging
from .nlp import TokenizerHandle, TokenizerInitTimeout, TokenizerUnavailableError
from .notation import NotationStyle
from .render import annotate_html, render_text, to_markup
from .script import hiragana_to_katakana
from .settings import Settings, SettingsError, load_settings
from .tokens import serialize_resolved_spans
from .tools import describe_unidic

HTML_EXTS = (".html", ".htm", ".xhtml")


def _read_local_version() -> str | None:
    try:
        pyproject_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
    except IndexError:  # pragma: no cover - defensive
        return None
    try:
        with pyproject_path.open("rb") as fh:
            data = tomllib.load(fh)
    except (FileNotFoundError, tomllib.TOMLDecodeError):
        return None
    return data.get("project", {}).get("version")


try:
    __version__ = metadata.version("autofuri")
except metadata.PackageNotFoundError:
    __version__ = _read_local_version() or "0.0.0+unknown"


def _add_version_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"autofuri {__version__}",
    )


def _add_engine_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-n",
        "--notation",
        choices=[style.value for style in NotationStyle],
        default=None,
        help="Manual override notation (default: from settings, 'curly' if unset).",
    )
    parser.add_argument(
        "--config",
        help="Path to a JSON settings file (default: $AUTOFURI_CONFIG).",
    )
    parser.add_argument(
        "--no-tokenizer",
        action="store_true",
        help="Skip MeCab; automatic spans fall back to their own text as the reading.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable verbose debug logging on stderr.",
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Automatic furigana for Japanese text. Use `autofuri <command> --help` for details.",
    )
    _add_version_flag(ap)
    ap.add_argument(
        "command",
        nargs="?",
        choices=["annotate", "html", "tools"],
        help="annotate: convert text; html: add ruby to HTML files; tools: dictionary helpers.",
    )
    return ap


def build_annotate_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Annotate Japanese text with furigana.",
    )
    _add_version_flag(ap)
    ap.add_argument(
        "text",
        nargs="+",
        help="Japanese text to annotate. Wrap the phrase in quotes if it contains spaces.",
    )
    ap.add_argument(
        "-f",
        "--format",
        choices=["html", "json", "markup"],
        default="html",
        help="Output format: ruby HTML (default), resolved spans as JSON, or inline override markup.",
    )
    ap.add_argument(
        "--katakana",
        action="store_true",
        help="Emit readings in katakana instead of hiragana (json and markup formats).",
    )
    _add_engine_options(ap)
    return ap


def build_html_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Add <ruby> furigana to rendered HTML files.",
    )
    _add_version_flag(ap)
    ap.add_argument(
        "input_path",
        help="Path to an .html file or a directory containing .html files.",
    )
    ap.add_argument(
        "-o",
        "--output",
        help="Output path for a single file (default: print to stdout).",
    )
    ap.add_argument(
        "--in-place",
        action="store_true",
        help="Rewrite the input file(s) in place.",
    )
    _add_engine_options(ap)
    return ap


def build_tools_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="autofuri helper utilities")
    _add_version_flag(ap)
    subparsers = ap.add_subparsers(dest="tool_cmd")
    subparsers.add_parser(
        "unidic-status",
        help="Show the currently detected UniDic dictionary path.",
    )
    return ap


def _resolve_settings(args: argparse.Namespace) -> Settings:
    try:
        settings = load_settings(getattr(args, "config", None))
    except SettingsError as exc:
        raise SystemExit(str(exc)) from exc
    if getattr(args, "notation", None):
        settings = settings.replace(notation_style=args.notation)
    return settings


def _build_engine(args: argparse.Namespace) -> FuriganaEngine:
    settings = _resolve_settings(args)
    if getattr(args, "no_tokenizer", False):
        return FuriganaEngine.from_settings(settings)
    handle = TokenizerHandle()
    try:
        handle.get()
    except (TokenizerUnavailableError, TokenizerInitTimeout) as exc:
        raise SystemExit(str(exc)) from exc
    debug_log(f"notation: {settings.notation_style.value}")
    return FuriganaEngine.from_settings(settings, tokenizer=handle)


def _katakana_payload(payload: list[dict[str, object]]) -> list[dict[str, object]]:
    for entry in payload:
        readings = entry.get("reading")
        if isinstance(readings, list):
            entry["reading"] = [hiragana_to_katakana(str(item)) for item in readings]
    return payload


def _run_annotate(args: argparse.Namespace) -> int:
    set_debug_logging(bool(getattr(args, "debug", False)))
    text = " ".join(args.text).strip()
    if not text:
        raise SystemExit("No text provided for annotation.")
    engine = _build_engine(args)

    if args.format == "html":
        print(render_text(text, engine))
        return 0

    spans = engine.annotate(text)
    if args.format == "json":
        payload = serialize_resolved_spans(spans)
        if args.katakana:
            payload = _katakana_payload(payload)
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    reading_filter = hiragana_to_katakana if args.katakana else None
    print(to_markup(text, spans, engine.notation, reading_filter=reading_filter))
    return 0


def _iter_html_inputs(input_path: Path) -> list[Path]:
    if input_path.is_dir():
        return sorted(p for p in input_path.rglob("*") if p.suffix.lower() in HTML_EXTS)
    if input_path.suffix.lower() not in HTML_EXTS:
        raise SystemExit(f"Input must be an .html file or directory: {input_path}")
    return [input_path]


def _run_html(args: argparse.Namespace) -> int:
    set_debug_logging(bool(getattr(args, "debug", False)))
    input_path = Path(args.input_path)
    if not input_path.exists():
        raise SystemExit(f"Input path not found: {input_path}")
    targets = _iter_html_inputs(input_path)
    if not targets:
        raise SystemExit(f"No .html files found in directory: {input_path}")
    if len(targets) > 1 and not args.in_place:
        raise SystemExit("Directories can only be processed with --in-place.")
    if args.output and args.in_place:
        raise SystemExit("--output cannot be combined with --in-place.")

    engine = _build_engine(args)
    if not engine.reading_mode:
        debug_log("reading mode is off; HTML passes through unchanged")
    console = Console(stderr=True)

    if len(targets) == 1:
        target = targets[0]
        result = annotate_html(target.read_text(encoding="utf-8"), engine)
        if args.in_place:
            target.write_text(result, encoding="utf-8")
        elif args.output:
            Path(args.output).write_text(result, encoding="utf-8")
        else:
            sys.stdout.write(result)
        return 0

    progress = Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
        disable=not console.is_terminal,
    )
    with progress:
        task = progress.add_task("Annotating HTML", total=len(targets))
        for target in targets:
            result = annotate_html(target.read_text(encoding="utf-8"), engine)
            target.write_text(result, encoding="utf-8")
            progress.advance(task, 1)
    console.print(f"Annotated {len(targets)} file(s) under {input_path}")
    return 0


def _run_tools(args: argparse.Namespace) -> int:
    if not args.tool_cmd:
        raise SystemExit("A tools subcommand is required. Use --help for options.")

    if args.tool_cmd == "unidic-status":
        console = Console()
        status = describe_unidic()
        if status.available:
            console.print(f"[green]UniDic dictionary:[/green] {status.path}")
        else:
            console.print("[yellow]No UniDic dictionary detected.[/yellow]")
        if status.detail:
            console.print(status.detail)
        return 0

    raise SystemExit(f"Unknown tools subcommand: {args.tool_cmd}")


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if argv and argv[0] == "annotate":
        annotate_args = build_annotate_parser().parse_args(argv[1:])
        return _run_annotate(annotate_args)
    if argv and argv[0] == "html":
        html_args = build_html_parser().parse_args(argv[1:])
        return _run_html(html_args)
    if argv and argv[0] == "tools":
        tools_args = build_tools_parser().parse_args(argv[1:])
        return _run_tools(tools_args)

    parser = build_parser()
    if not argv:
        parser.print_help()
        return 0
    parser.parse_args(argv)
    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
