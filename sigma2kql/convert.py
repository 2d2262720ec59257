#!/usr/bin/env python3
"""
Sigma to KQL Rule Converter

Command-line interface for converting Sigma detection rules to Kibana Query
Language queries over ECS field names.

Usage:
    sigma2kql --file sigma_rule.yml
    cat sigma_rule.yml | sigma2kql --file -
    sigma2kql --input sigma_rules/ --output kql_queries/ --report report.yml
    sigma2kql --validate sigma_rules/
"""

import argparse
import logging
import sys
from pathlib import Path

from .processors.batch_processor import BatchProcessor
from .processors.rule_converter import RuleConverter
from .utils.file_handler import save_report


def setup_logging(verbose: bool = False, log_file: str = None):
    """
    Configure logging for the converter.
    """
    level = logging.DEBUG if verbose else logging.INFO
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='sigma2kql',
        description='Convert Sigma rules to KQL queries (ECS field names)',
        formatter_class=argparse.RawTextHelpFormatter
    )

    # Input options
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument('--file', '-f', type=str, help="Single Sigma rule file to convert ('-' reads stdin)")
    group.add_argument('--input', '-i', type=str, help='Input directory containing Sigma rules')
    group.add_argument('--validate', type=str, metavar='DIR', help='Validate the Sigma rules in a directory')

    # Output options
    parser.add_argument('--output', '-o', type=str, help='Output directory for .kql queries')
    parser.add_argument('--report', type=str, help='Write a YAML batch report to this file')
    parser.add_argument('--limit', '-l', type=int, default=0, help='Limit number of files to process (0 = no limit)')

    # Logging options
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable verbose logging')
    parser.add_argument('--log-file', type=str, help='Also write log records to this file')

    return parser


def main(argv=None) -> int:
    """
    Main entry point for the Sigma to KQL converter.
    """
    args = build_parser().parse_args(argv)

    setup_logging(args.verbose, args.log_file)
    logger = logging.getLogger(__name__)

    rule_converter = RuleConverter()

    if args.file:
        output_dir = Path(args.output) if args.output else None
        if args.file == '-':
            result = rule_converter.convert_rule_text(sys.stdin.read(), '<stdin>')
        else:
            sigma_file = Path(args.file)
            if not sigma_file.exists():
                logger.error(f"Sigma file not found: {sigma_file}")
                return 1
            result = rule_converter.convert_sigma_rule(sigma_file, output_dir)

        if result['status'] != 'success':
            logger.error(f"Conversion failed: {result['error_kind']}: {result['error']}")
            return 1

        print(result['query'])
        if result.get('output_file'):
            logger.info(f"Output file: {result['output_file']}")
        return 0

    batch_processor = BatchProcessor(rule_converter)

    if args.validate:
        validate_dir = Path(args.validate)
        if not validate_dir.is_dir():
            logger.error(f"Directory not found: {validate_dir}")
            return 1

        results = batch_processor.validate_rules(validate_dir)
        for error in results['errors']:
            logger.error(f"  {error['file']}: {error['error_kind']}: {error['error']}")
        if args.report:
            save_report(results, Path(args.report))
        return 0 if results['invalid'] == 0 else 1

    input_dir = Path(args.input)
    if not input_dir.is_dir():
        logger.error(f"Input directory not found: {input_dir}")
        return 1

    output_dir = Path(args.output) if args.output else None
    results = batch_processor.process_sigma_directory(input_dir, output_dir, args.limit)

    logger.info(f"Total files found: {results['total_found']}")
    logger.info(f"Files processed: {results['processed']}")
    logger.info(f"Successful conversions: {results['successful']}")
    logger.info(f"Failed conversions: {results['failed']}")

    if results['errors']:
        logger.error(f"Errors encountered ({len(results['errors'])}):")
        for error in results['errors'][:5]:
            logger.error(f"  {error['sigma_file']}: {error['error']}")
        if len(results['errors']) > 5:
            logger.error(f"  ... and {len(results['errors']) - 5} more errors")

    if args.report:
        save_report(results, Path(args.report))
    elif not output_dir:
        for result in results['results']:
            if result['status'] == 'success':
                print(f"# {result['sigma_file']}")
                print(result['query'])

    return 0 if results['failed'] == 0 else 1


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
