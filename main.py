"""
Entry point and facade for the fragments → layout → XML conversion engine.

This module exposes a stable API and a CLI.

Packages:
- pdfxml.docs: Document model and input readers (pdf2json JSON, PDF via PyMuPDF)
- pdfxml.layout: Quantization, line grouping, heading/list classification, table detection
- pdfxml.pipeline: Profile pipelines and high-level conversion (`convert_document`)
- pdfxml.render: XML serialization
"""

from __future__ import annotations

import json

from pdfxml.config import CONFIG_PATH, LayoutConfig, load_config
from pdfxml.docs import document_from_pdf2json, read_pdf, read_pdf_json
from pdfxml.layout import detect_tables, group_fragments_to_lines, heading_level, is_list_item
from pdfxml.pipeline import Profile, convert_document, convert_file
from pdfxml.render import render_document
from pdfxml.utils import setup_logger

__all__ = [
    # config
    "CONFIG_PATH",
    "LayoutConfig",
    "load_config",
    # readers
    "document_from_pdf2json",
    "read_pdf",
    "read_pdf_json",
    # layout
    "detect_tables",
    "group_fragments_to_lines",
    "heading_level",
    "is_list_item",
    # pipeline
    "Profile",
    "convert_document",
    "convert_file",
    "render_document",
]


def _cli() -> None:
    """CLI for converting a document to structured XML.

    --file / -f: Path to input (pdf2json .json dump or .pdf)
    --profile / -p: basic|enhanced|full (default from config, normally enhanced)
    --out / -o: Output XML path (default: <input>.xml next to the input)
    --workers: Threads for per-page layout (default: 1)
    --config: Path to a layout.json config file
    --log-level: Logging level (default from config, normally INFO)
    --json: Print statistics as JSON instead of key: value lines
    """
    import argparse
    import os

    parser = argparse.ArgumentParser(description="Reconstruct document structure from PDF text fragments and write XML.")
    parser.add_argument("--file", "-f", type=str, required=True, help="Path to input document (.json from pdf2json or .pdf)")
    parser.add_argument("--profile", "-p", type=str, default=None, help="Conversion profile: basic|enhanced|full (unknown values mean enhanced)")
    parser.add_argument("--out", "-o", type=str, default=None, help="Path to save XML (default: <input>.xml)")
    parser.add_argument("--workers", type=int, default=1, help="Threads used to lay out pages (default: 1)")
    parser.add_argument("--config", type=str, default=None, help="Path to layout config JSON (default: config/layout.json)")
    parser.add_argument("--log-level", type=str, default=None, help="Logging level, e.g. DEBUG or INFO")
    parser.add_argument("--json", action="store_true", help="Print result summary as JSON")

    args = parser.parse_args()

    config = load_config(args.config)
    setup_logger("pdfxml", log_file=config.log_file, level=args.log_level or config.log_level)

    out_path = args.out or os.path.splitext(args.file)[0] + ".xml"
    try:
        result = convert_file(
            file_path=args.file,
            profile=args.profile or config.default_profile,
            config=config,
            workers=max(1, args.workers),
            out_path=out_path,
        )
    except (FileNotFoundError, ValueError, RuntimeError) as e:
        print(str(e))
        raise SystemExit(2)

    summary = result.to_dict()
    summary.pop("xml")
    summary["output_path"] = out_path
    if args.json:
        print(json.dumps(summary, ensure_ascii=False, indent=2))
        return

    print(f"Saved XML to: {out_path}")
    print(f"Pages: {result.page_count} ({result.profile.value})")
    for k, v in result.statistics.to_dict().items():
        print(f"{k}: {v}")


if __name__ == "__main__":
    _cli()
