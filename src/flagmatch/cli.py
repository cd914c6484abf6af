"""FlagMatch CLI.

This is the entry point used by:
- `python -m flagmatch`
- the console script `flagmatch` (installed via pyproject.toml)

Example
-------
flagmatch --flags "/data/flags" --mystery "/data/inputData" --report "/data/out/matches.csv"

For each mystery image, prints the flag with the same dimensions whose colour
histogram overlaps it the most.
"""

from __future__ import annotations

import argparse
import concurrent.futures
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from tqdm import tqdm

from .imaging import DecodeFailure, DecodeResult, decode_image, iter_images, try_decode
from .matching import MatchResult, find_best_match, iter_candidates
from .reporting import format_result, write_results_csv, write_results_xlsx

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    p = argparse.ArgumentParser(
        prog="flagmatch",
        description=(
            "Identify mystery images by finding the same-sized flag image with "
            "the most similar colour histogram."
        ),
    )
    p.add_argument(
        "--flags",
        required=True,
        type=Path,
        help="Path to the reference (flag) images folder.",
    )
    p.add_argument(
        "--mystery",
        required=True,
        type=Path,
        help="Path to the folder of images to identify.",
    )
    p.add_argument(
        "--recursive",
        action="store_true",
        help="Scan both folders recursively.",
    )
    p.add_argument(
        "--workers",
        type=int,
        default=1,
        help=(
            "Number of worker processes for decoding flag images (default: 1). "
            "Use 0 for one per CPU. Ignored with --no-cache."
        ),
    )
    p.add_argument(
        "--no-cache",
        action="store_true",
        help="Decode every flag again for each mystery image instead of once up front.",
    )
    p.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Optional CSV file to write the results to.",
    )
    p.add_argument(
        "--report-xlsx",
        type=Path,
        default=None,
        help="Optional XLSX file to write the results to (requires openpyxl).",
    )
    p.add_argument(
        "--no-progress",
        action="store_true",
        help="Hide progress bars.",
    )
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log more detail (-v for info, -vv for debug).",
    )
    return p.parse_args(argv)


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _display_name(root: Path, path: Path) -> str:
    """Name an image by its path under `root`, falling back to the basename."""
    try:
        return path.resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return path.name


def _load_flag_worker(item: Tuple[Path, str]) -> DecodeResult:
    """Multiprocessing worker: decode one flag and build its signature.

    This function is top-level so it can be pickled on Windows.
    """
    path, name = item
    res = try_decode(path, name)
    if res.ok:
        res.image.signature  # build now; drops the pixels before pickling
    return res


def _load_flags(items: List[Tuple[Path, str]], workers: int, progress: bool) -> List[DecodeResult]:
    """Decode all flags once, keeping the listing order."""

    if workers == 1:
        return [
            _load_flag_worker(it)
            for it in tqdm(items, desc="Loading flags", unit="img", disable=not progress)
        ]

    max_workers = None if workers == 0 else max(1, workers)
    with concurrent.futures.ProcessPoolExecutor(max_workers=max_workers) as ex:
        # map() yields in submission order, so ties still go to the earlier flag.
        return list(
            tqdm(
                ex.map(_load_flag_worker, items),
                total=len(items),
                desc="Loading flags",
                unit="img",
                disable=not progress,
            )
        )


def _named(root: Path, paths: Iterable[Path]) -> List[Tuple[Path, str]]:
    return [(p, _display_name(root, p)) for p in paths]


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run FlagMatch.

    Returns
    -------
    int
        Process exit code (0 success).
    """
    args = _parse_args(argv)
    _configure_logging(args.verbose)

    flags_dir: Path = args.flags.expanduser().resolve()
    mystery_dir: Path = args.mystery.expanduser().resolve()

    if not flags_dir.is_dir():
        raise SystemExit(f"--flags must be an existing folder: {flags_dir}")
    if not mystery_dir.is_dir():
        raise SystemExit(f"--mystery must be an existing folder: {mystery_dir}")

    flag_items = _named(flags_dir, iter_images(flags_dir, recursive=args.recursive))
    mystery_items = _named(mystery_dir, iter_images(mystery_dir, recursive=args.recursive))
    if not mystery_items:
        raise SystemExit(f"No mystery images found in {mystery_dir}. Check extensions.")
    if not flag_items:
        logger.warning("no flag images found in %s; nothing will match", flags_dir)

    logger.info("%d flag(s), %d mystery image(s)", len(flag_items), len(mystery_items))
    progress = not args.no_progress

    # 1) Flags, decoded once unless asked otherwise
    cached: Optional[List[DecodeResult]] = None
    if not args.no_cache:
        cached = _load_flags(flag_items, workers=int(args.workers), progress=progress)

    # 2) Match each mystery image
    results: List[MatchResult] = []
    for path, name in tqdm(mystery_items, desc="Matching", unit="img", disable=not progress):
        try:
            mystery = decode_image(path, name)
        except DecodeFailure as exc:
            raise SystemExit(f"cannot decode mystery image {path}: {exc.reason}") from exc

        if cached is not None:
            candidates: Iterable[DecodeResult] = cached
        else:
            candidates = iter_candidates([p for p, _ in flag_items], [n for _, n in flag_items])

        res = find_best_match(mystery, candidates)
        results.append(res)
        tqdm.write(format_result(res))

    # 3) Reports
    if args.report is not None:
        write_results_csv(results, args.report.expanduser())
        print(f"Report: {args.report}")

    if args.report_xlsx is not None:
        ok = write_results_xlsx(results, args.report_xlsx.expanduser())
        if not ok:
            print(
                "Note: openpyxl is not installed, so the XLSX report was not created. "
                "Install with: pip install flagmatch[report]"
            )

    matched = sum(1 for r in results if r.matched)
    print(f"\nDone. Matched: {matched} | Not matched: {len(results) - matched}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
