"""
Main entry point for the Fussball Elo rating system.

Usage:
    fussball-elo compute --broad data/broad.json --precise data/precise.json
    fussball-elo report --top 30
    fussball-elo validate --reference clubelo.csv --format clubelo-csv
    fussball-elo import-csv --input-dir raw/csv --output data/broad.json
    fussball-elo import-api --input-dir raw/api --output data/precise.json
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from fussball_elo.calculators.correlation_validator import CorrelationValidator
from fussball_elo.calculators.reference_parsers import PARSERS, parse_reference
from fussball_elo.config.elo_config import EloConfig
from fussball_elo.config.settings import DEFAULT_OUTPUT_DIR, MATCHES_FILE, SNAPSHOT_WINDOW
from fussball_elo.core.data_loader import (
    import_api_directory, import_csv_directory, load_alias_table, save_match_list
)
from fussball_elo.core.exceptions import (
    ConfigInvalidError, FussballEloError, InputMissingError, MalformedRecordError
)
from fussball_elo.outputs.artifact_writer import (
    ArtifactWriter, build_daily_payload, build_ratings_payload,
    build_registry_payload, ranked_pairs, read_ratings_file
)
from fussball_elo.outputs.report_generator import ReportGenerator
from fussball_elo.processors.daily_snapshot import WINDOWS
from fussball_elo.processors.pipeline import PipelineConfig, RatingPipeline
from fussball_elo.utils.logging_config import setup_logging
from fussball_elo.utils.validators import parse_timestamp

logger = logging.getLogger(__name__)

DEFAULT_ALIASES = Path(__file__).parent / 'data' / 'name_aliases.json'


def load_engine_config(args) -> EloConfig:
    """Config file (or defaults) with command line overrides on top."""
    config = EloConfig.from_file(args.config) if args.config else EloConfig()
    config = config.with_overrides(
        k_factor=args.k_factor,
        home_advantage=args.home_advantage,
        season_regression=args.season_regression,
        season_gap_days=args.season_gap_days,
    )
    return config.validate()


def run_compute(args) -> int:
    """Run the full pipeline and write the three artifacts."""
    config = load_engine_config(args)

    computed_at = None
    if args.computed_at:
        try:
            computed_at = parse_timestamp(args.computed_at)
        except MalformedRecordError as e:
            raise ConfigInvalidError(f"--computed-at: {e}") from e

    pipeline = RatingPipeline(config, PipelineConfig(
        snapshot_window=args.snapshot_window,
        strict_leagues=args.strict_leagues,
    ))
    result = pipeline.run_files(args.broad, args.precise)

    # Build every payload before touching the output directory
    ratings = build_ratings_payload(config, result.teams, result.summary.matches_processed, computed_at)
    daily = build_daily_payload(result.snapshots)
    registry = build_registry_payload(result.registry)

    writer = ArtifactWriter(args.out_dir)
    writer.write(ratings, daily, registry)

    if args.save_matches:
        save_match_list(result.matches, Path(args.out_dir) / MATCHES_FILE)

    print(ReportGenerator.generate_run_summary(result.summary))
    return 0


def run_report(args) -> int:
    writer = ArtifactWriter(args.out_dir)
    generator = ReportGenerator(writer.read_ratings(), writer.read_registry())
    print(generator.generate_rankings_report(top_n=args.top))
    return 0


def run_validate(args) -> int:
    ratings_path = Path(args.ratings) if args.ratings else ArtifactWriter(args.out_dir).ratings_path
    current = ranked_pairs(read_ratings_file(ratings_path))

    reference_path = Path(args.reference)
    if not reference_path.exists():
        raise InputMissingError(reference_path)
    reference = parse_reference(reference_path.read_text(encoding='utf-8'), args.format)

    aliases = load_alias_table(args.aliases) if args.aliases else load_alias_table(DEFAULT_ALIASES)
    validator = CorrelationValidator(aliases, top_n=args.top)

    if args.previous:
        comparison = validator.compare_runs(
            ranked_pairs(read_ratings_file(args.previous)), current, reference
        )
        print(ReportGenerator.generate_validation_report(comparison.current, comparison))
    else:
        print(ReportGenerator.generate_validation_report(validator.validate(current, reference)))
    return 0


def run_import_csv(args) -> int:
    aliases = load_alias_table(args.aliases) if args.aliases else None
    matches = import_csv_directory(args.input_dir, aliases)
    save_match_list(matches, args.output)
    return 0


def run_import_api(args) -> int:
    matches = import_api_directory(args.input_dir)
    save_match_list(matches, args.output)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='fussball-elo',
        description='Elo team ratings from merged football match sources',
    )
    parser.add_argument('--log-file', type=str, default=None,
                        help='Also write logs to this file')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable debug logging')

    sub = parser.add_subparsers(dest='command', required=True)

    compute = sub.add_parser('compute', help='Compute ratings and write artifacts')
    compute.add_argument('--broad', required=True, help='Broad (historical) match list JSON')
    compute.add_argument('--precise', required=True, help='Precise (API) match list JSON')
    compute.add_argument('--config', help='Engine configuration JSON')
    compute.add_argument('--out-dir', default=DEFAULT_OUTPUT_DIR)
    compute.add_argument('--snapshot-window', choices=WINDOWS, default=SNAPSHOT_WINDOW)
    compute.add_argument('--strict-leagues', action='store_true',
                         help='Fail when a match league is missing from the league tables')
    compute.add_argument('--computed-at', metavar='ISO',
                         help='Fixed computedAt timestamp for reproducible output')
    compute.add_argument('--save-matches', action='store_true',
                         help=f'Also write the merged match list ({MATCHES_FILE})')
    compute.add_argument('--k-factor', type=float)
    compute.add_argument('--home-advantage', type=float)
    compute.add_argument('--season-regression', type=float)
    compute.add_argument('--season-gap-days', type=int)
    compute.set_defaults(func=run_compute)

    report = sub.add_parser('report', help='Print the rankings report')
    report.add_argument('--out-dir', default=DEFAULT_OUTPUT_DIR)
    report.add_argument('--top', type=int, default=50)
    report.set_defaults(func=run_report)

    validate = sub.add_parser('validate', help='Compare rankings with a reference ranking')
    validate.add_argument('--reference', required=True)
    validate.add_argument('--format', required=True, choices=sorted(PARSERS))
    validate.add_argument('--aliases', help='Engine name -> reference name JSON')
    validate.add_argument('--ratings', help='Ratings file (default: <out-dir>/msi_ratings.json)')
    validate.add_argument('--previous', help='Older ratings file to compare against')
    validate.add_argument('--out-dir', default=DEFAULT_OUTPUT_DIR)
    validate.add_argument('--top', type=int, default=10)
    validate.set_defaults(func=run_validate)

    import_csv = sub.add_parser('import-csv', help='Convert football-data.co.uk CSVs')
    import_csv.add_argument('--input-dir', required=True)
    import_csv.add_argument('--output', required=True)
    import_csv.add_argument('--aliases', help='CSV name -> canonical name JSON')
    import_csv.set_defaults(func=run_import_csv)

    import_api = sub.add_parser('import-api', help='Convert football-data.org JSON dumps')
    import_api.add_argument('--input-dir', required=True)
    import_api.add_argument('--output', required=True)
    import_api.set_defaults(func=run_import_api)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_file, logging.DEBUG if args.verbose else logging.INFO)

    try:
        return args.func(args)
    except FussballEloError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
