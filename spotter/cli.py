"""
Spotter CLI - Argument parsing and dispatch.

Responsibilities:
- Argument parsing
- Building the pipeline for the selected backend
- Printing reports and errors
- Exit codes
"""

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="spotter",
        description="Spotter audio event analysis command-line interface.",
    )

    subparsers = parser.add_subparsers(dest="command")

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze one audio clip and print the report.",
        description=(
            "Analyze one audio clip and print the report.\n\n"
            "The clip is classified, curated, checked against the danger label set,\n"
            "summarized and rendered as a text report (or JSON with --json)."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    analyze_parser.add_argument(
        "--input",
        metavar="PATH",
        required=True,
        help="Path to input audio file (at most 10 seconds).",
    )
    analyze_parser.add_argument(
        "--name",
        metavar="NAME",
        help="Clip name to report (default: input file name).",
    )
    analyze_parser.add_argument(
        "--threshold",
        metavar="F",
        type=float,
        help="Confidence threshold for detected events.",
    )
    analyze_parser.add_argument(
        "--min-results",
        metavar="N",
        type=int,
        help="Minimum number of events to present (filler tops up).",
    )
    analyze_parser.add_argument(
        "--max-results",
        metavar="N",
        type=int,
        help="Maximum number of events to present.",
    )
    analyze_parser.add_argument(
        "--no-filler",
        action="store_true",
        help="Never add synthetic filler events.",
    )
    analyze_parser.add_argument(
        "--backend",
        choices=["synthetic", "gemini"],
        default="synthetic",
        help="Classifier/advisory/summary backend (default: synthetic).",
    )
    analyze_parser.add_argument(
        "--seed",
        metavar="N",
        type=int,
        help="Seed for filler confidences and telemetry.",
    )
    analyze_parser.add_argument(
        "--report-dir",
        metavar="PATH",
        help="Also write the text report and JSON export into this directory.",
    )
    analyze_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the JSON export instead of the text report.",
    )
    analyze_parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING).",
    )

    return parser


def build_pipeline(config, backend: str, seed: int | None = None):
    """Wire an AnalysisPipeline for the named backend."""
    import numpy as np

    from spotter.pipeline import AnalysisPipeline

    if backend == "gemini":
        from spotter.gemini import GeminiAdvisor, GeminiClassifier, GeminiClient, GeminiSummarizer

        client = GeminiClient(model=config.gemini_model)
        classifier, advisor, summarizer = (
            GeminiClassifier(client), GeminiAdvisor(client), GeminiSummarizer(client)
        )
    else:
        from spotter.gateways import SyntheticClassifier, TemplateAdvisor, TemplateSummarizer

        classifier, advisor, summarizer = (
            SyntheticClassifier(), TemplateAdvisor(), TemplateSummarizer()
        )

    return AnalysisPipeline(
        classifier=classifier,
        advisor=advisor,
        summarizer=summarizer,
        config=config,
        rng=np.random.default_rng(seed),
    )


def cmd_analyze(args: argparse.Namespace) -> int:
    """
    Handle the 'analyze' subcommand.

    Returns exit code.
    """
    from spotter.audio import AudioClip
    from spotter.config import PipelineConfig
    from spotter.errors import SpotterError
    from spotter.report import render_text_report, write_json, write_report
    from spotter.utils import serialize_json

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        return 1
    if not input_path.is_file():
        print(f"Error: Input path is not a file: {input_path}", file=sys.stderr)
        return 1

    overrides = {
        "confidence_threshold": args.threshold,
        "min_results": args.min_results,
        "max_results": args.max_results,
    }
    if args.no_filler:
        overrides["filler_enabled"] = False
    try:
        config = PipelineConfig.from_env()
        config = dataclasses.replace(
            config, **{k: v for k, v in overrides.items() if v is not None}
        )
        config.curation_options()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        clip = AudioClip.from_path(
            input_path, name=args.name, max_payload_bytes=config.max_payload_bytes
        )
        pipeline = build_pipeline(config, args.backend, seed=args.seed)
        result = asyncio.run(pipeline.analyze(clip))
    except SpotterError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(serialize_json(result.to_dict()), end="")
    else:
        print(render_text_report(result), end="")

    if args.report_dir:
        report_dir = Path(args.report_dir)
        write_report(result, report_dir)
        write_json(result, report_dir)

    return 0


def main() -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "analyze":
        exit_code = cmd_analyze(args)
        sys.exit(exit_code)
