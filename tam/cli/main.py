"""Command-line interface for TAM analysis and dot allocation."""

import argparse
import asyncio
import json
import logging
import sys

import uvicorn

from tam.analysis.errors import AnalysisError, InvalidInput
from tam.analysis.pipeline import AnalysisPipeline
from tam.api.app import create_app
from tam.core.config import TamConfig
from tam.core.encoders.compact_encoder import CompactArrayEncoder
from tam.core.formatting import format_number, parse_population_input, segment_share_label
from tam.core.models import SegmentSet
from tam.core.presets import DEFAULT_TAM_DATA
from tam.core.quantizer import allocate, allocation_counts, people_per_dot

logging.basicConfig(
    level=logging.INFO,
    format='%(message)s',
    stream=sys.stderr
)
logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value}")
    return number


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog='tam',
        description='Total addressable market analysis - segment a population and draw it as dots'
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    parser.add_argument('--config', type=str, default=None, help='Path to settings YAML/JSON file')

    subparsers = parser.add_subparsers(
        dest='command',
        help='Available commands',
        required=True
    )

    subparsers.add_parser('providers', help='List providers with configured credentials')

    analyze_parser = subparsers.add_parser('analyze', help='Generate TAM segments for a market')
    analyze_parser.add_argument('query', help='Market description, e.g. "AI coding assistants"')
    analyze_parser.add_argument('--population', type=str, default=None, help='Population base, e.g. 335M (default: world)')
    analyze_parser.add_argument('--provider', type=str, default=None, help='Provider id (default: first available)')
    analyze_parser.add_argument('--model', type=str, default=None, help='Model id (default: provider default)')
    analyze_parser.add_argument('-o', '--output', type=str, default=None, help='Write the segment set JSON here')

    estimate_parser = subparsers.add_parser('estimate', help='Estimate a population size from a description')
    estimate_parser.add_argument('description', help='What to count, e.g. "Nurses in California"')
    estimate_parser.add_argument('--provider', type=str, default=None, help='Provider id (default: first available)')
    estimate_parser.add_argument('--model', type=str, default=None, help='Model id (default: provider default)')

    dots_parser = subparsers.add_parser('dots', help='Allocate grid dots to segments')
    dots_parser.add_argument('segments_file', nargs='?', default=None, help='Segment set JSON (default: built-in world AI usage data)')
    dots_parser.add_argument('--dot-count', type=_positive_int, default=None, help='Number of dots (default: 2500)')
    dots_parser.add_argument('-o', '--output', type=str, default=None, help='Output file (default: stdout)')

    serve_parser = subparsers.add_parser('serve', help='Run the HTTP API')
    serve_parser.add_argument('--host', type=str, default='0.0.0.0')
    serve_parser.add_argument('--port', type=int, default=8000)

    return parser.parse_args(argv)


def load_config(args) -> TamConfig:
    if args.config:
        logger.info(f"Loading settings from {args.config}")
        return TamConfig.from_file(args.config)
    return TamConfig.from_env()


def _write(text: str, output) -> None:
    if output:
        with open(output, 'w') as f:
            f.write(text)
        logger.info(f"Wrote {output}")
    else:
        print(text)


def cmd_providers(args):
    """Handle 'providers' command."""
    pipeline = AnalysisPipeline.from_config(load_config(args))
    providers = [p.to_dict() for p in pipeline.registry.available()]
    print(json.dumps({"providers": providers}, indent=2))


def cmd_analyze(args):
    """Handle 'analyze' command - run the analysis and print a legend."""
    config = load_config(args)
    pipeline = AnalysisPipeline.from_config(config)

    population = None
    if args.population:
        population = parse_population_input(args.population)
        if population <= 0:
            raise InvalidInput(f"Could not parse population: {args.population}")

    result = asyncio.run(pipeline.analyze_market(
        args.query,
        population=population,
        provider=args.provider,
        model=args.model,
    ))
    segment_set = result.to_segment_set()

    logger.info(f"{args.query} - {format_number(segment_set.total_population)} ({result.provider.value}/{result.model})")
    for segment in segment_set.segments:
        share = segment_share_label(segment.count, segment_set.segment_sum())
        logger.info(f"  {segment.color}  {segment.name}: ~{format_number(segment.count)} ({share})")

    _write(CompactArrayEncoder().encode(segment_set.model_dump(by_alias=True)), args.output)


def cmd_estimate(args):
    """Handle 'estimate' command."""
    pipeline = AnalysisPipeline.from_config(load_config(args))
    estimate = asyncio.run(pipeline.resolve_population(
        args.description,
        provider=args.provider,
        model=args.model,
    ))
    print(json.dumps(estimate.model_dump(), indent=2))


def cmd_dots(args):
    """Handle 'dots' command - allocate dots and write counts plus the id sequence."""
    if args.segments_file:
        with open(args.segments_file, 'r') as f:
            segment_set = SegmentSet.model_validate(json.load(f))
        dot_count = args.dot_count or TamConfig.default().analysis.default_dot_count
    else:
        logger.info(f"Using default data: {DEFAULT_TAM_DATA.title}")
        segment_set = DEFAULT_TAM_DATA.segment_set
        dot_count = args.dot_count or DEFAULT_TAM_DATA.dot_count

    counts = allocation_counts(segment_set.segments, segment_set.total_population, dot_count)
    logger.info(f"Each dot = ~{format_number(people_per_dot(segment_set.total_population, dot_count))} people")

    data = {
        "totalPopulation": segment_set.total_population,
        "dotCount": dot_count,
        "segments": [
            {"id": segment.id, "name": segment.name, "color": segment.color, "dots": n}
            for segment, n in counts
        ],
        "dots": [s.id for s in allocate(segment_set.segments, segment_set.total_population, dot_count)],
    }
    _write(CompactArrayEncoder().encode(data), args.output)


def cmd_serve(args):
    """Handle 'serve' command."""
    app = create_app(load_config(args))
    uvicorn.run(app, host=args.host, port=args.port, log_level="info")


def main(argv=None):
    args = parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    commands = {
        'providers': cmd_providers,
        'analyze': cmd_analyze,
        'estimate': cmd_estimate,
        'dots': cmd_dots,
        'serve': cmd_serve,
    }

    try:
        commands[args.command](args)
    except AnalysisError as e:
        logger.error(f"Error: {e.message}")
        categories = getattr(e, "categories", None)
        if categories:
            logger.error(f"Categories: {', '.join(categories)}")
        sys.exit(1)


if __name__ == '__main__':
    main()
