#!/usr/bin/env python3
from __future__ import annotations
import argparse
import concurrent.futures as cf
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional, Sequence

from errors import DecodeError, install_global_exception_hooks
from io_utils import IMAGE_EXTS, make_output_path, read_bytes, write_bytes
from logconf import setup_logging
from pipelines import list_styles, resolve
from presets import Preset, load_preset, save_preset
from processor import transform
from watcher import FolderWatcher

logger = logging.getLogger("artfx")


def select_inputs(paths: Sequence[str]) -> List[Path]:
    """Expand directories (non-recursive) into their image files."""
    out: List[Path] = []
    for raw in paths:
        p = Path(raw)
        if p.is_dir():
            out.extend(sorted(c for c in p.iterdir() if c.is_file() and c.suffix.lower() in IMAGE_EXTS))
        elif p.is_file():
            out.append(p)
        else:
            logger.warning("Skipping missing input: %s", p)
    return out


def build_preset(args) -> Preset:
    preset = load_preset(args.preset) if getattr(args, "preset", None) else Preset()
    for name in ("tool", "style", "intensity", "prompt", "quality", "seed"):
        val = getattr(args, name, None)
        if val is not None:
            setattr(preset, name, val)
    if getattr(args, "workers", None) is not None:
        preset.concurrency = args.workers
    return preset


def process_file(path: Path, out_dir: Path, preset: Preset) -> Path:
    pipeline = resolve(preset.tool, preset.style, preset.prompt)
    ext = "png" if pipeline.output_format == "PNG" else "jpg"
    dst = Path(make_output_path(str(out_dir), str(path), f"{pipeline.key.tool}-{pipeline.key.style}", ext))
    data = transform(
        read_bytes(str(path)), preset.tool, preset.style, preset.intensity, preset.prompt,
        rng=preset.seed, quality=preset.quality,
    )
    write_bytes(str(dst), data)
    return dst


def cmd_run(args) -> int:
    preset = build_preset(args)
    files = select_inputs(args.inputs)
    if not files:
        logger.warning("No images found.")
        return 1
    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)

    failed = 0
    with cf.ThreadPoolExecutor(max_workers=max(1, preset.concurrency)) as ex:
        futures = {ex.submit(process_file, p, out_dir, preset): p for p in files}
        for fut in cf.as_completed(futures):
            src = futures[fut]
            try:
                logger.info("Wrote %s", fut.result())
            except DecodeError as e:
                failed += 1
                logger.error("Cannot decode %s: %s", src, e)
            except OSError as e:
                failed += 1
                logger.error("I/O error for %s: %s", src, e)
    logger.info("Done -> %s (%d ok, %d failed)", out_dir, len(files) - failed, failed)
    return 1 if failed else 0


def cmd_styles(args) -> int:
    for tool, styles in list_styles().items():
        print(f"{tool}: {', '.join(styles)}")
    return 0


def cmd_watch(args) -> int:
    preset = build_preset(args)
    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)

    def on_files(paths: List[str]):
        for p in paths:
            # give the writer a moment to finish the file
            time.sleep(args.settle)
            logger.info("Wrote %s", process_file(Path(p), out_dir, preset))

    watcher = FolderWatcher(on_files)
    watcher.start(args.directory)
    try:
        while watcher.is_running():
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass
    finally:
        watcher.stop()
    return 0


def cmd_save_preset(args) -> int:
    save_preset(build_preset(args), args.path)
    logger.info("Saved preset %s", args.path)
    return 0


def _add_transform_args(ap: argparse.ArgumentParser) -> None:
    ap.add_argument("--preset", help="JSON preset; flags below override it")
    ap.add_argument("--tool", help="photo-to-art, style-transfer, vintage-filter, sketch-maker, color-enhance, background-remove")
    ap.add_argument("--style", help="tool style (see `styles`); unknown styles use the tool default")
    ap.add_argument("--intensity", type=int, help="1-10, clamped")
    ap.add_argument("--prompt", help="free text; keywords add colour passes")
    ap.add_argument("--seed", type=int, help="seed for texture and grain")
    ap.add_argument("--quality", type=int, help="JPEG quality")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="artfx", description="Artistic pixel filters for photos.")
    ap.add_argument("--log-level", default="INFO")
    ap.add_argument("--log-dir", default=None)
    sub = ap.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="transform image files or folders")
    run.add_argument("inputs", nargs="+")
    run.add_argument("--out", default="_artfx")
    run.add_argument("--workers", type=int, help="files processed in parallel")
    _add_transform_args(run)
    run.set_defaults(func=cmd_run)

    styles = sub.add_parser("styles", help="list tools and styles")
    styles.set_defaults(func=cmd_styles)

    watch = sub.add_parser("watch", help="transform images as they land in a folder")
    watch.add_argument("directory")
    watch.add_argument("--out", default="_artfx")
    watch.add_argument("--settle", type=float, default=0.5, help="seconds to wait before reading a new file")
    _add_transform_args(watch)
    watch.set_defaults(func=cmd_watch)

    sp = sub.add_parser("save-preset", help="write the given flags as a preset file")
    sp.add_argument("path")
    sp.add_argument("--workers", type=int)
    _add_transform_args(sp)
    sp.set_defaults(func=cmd_save_preset)
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(getattr(logging, str(args.log_level).upper(), logging.INFO), args.log_dir)
    install_global_exception_hooks(args.log_dir)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
