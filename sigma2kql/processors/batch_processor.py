"""
Batch Rule Processor

Converts or validates every Sigma rule below a directory and reports
per-file results with an overall summary.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from ..core.exceptions import TranslationError
from ..processors.rule_converter import RuleConverter
from ..utils.file_handler import get_sigma_files_from_directory, read_rule_text


class BatchProcessor:
    """
    Processes multiple Sigma rules in batch operations.
    """

    def __init__(self, rule_converter: Optional[RuleConverter] = None):
        self.rule_converter = rule_converter or RuleConverter()

    def process_sigma_directory(self, sigma_dir: Path, output_dir: Optional[Path] = None,
                                limit: int = 0) -> Dict[str, Any]:
        """
        Convert all Sigma rules in a directory.

        Args:
            sigma_dir: Directory containing Sigma rule files
            output_dir: Directory to save .kql queries, mirroring the input layout (optional)
            limit: Maximum number of rules to process (0 = no limit)

        Returns:
            Dictionary with processing results
        """
        sigma_dir = Path(sigma_dir)
        logging.info(f"Starting batch processing of Sigma rules from: {sigma_dir}")

        sigma_files = get_sigma_files_from_directory(sigma_dir)
        total_files = len(sigma_files)

        if total_files == 0:
            logging.warning(f"No Sigma rule files found in: {sigma_dir}")

        if limit > 0:
            sigma_files = sigma_files[:limit]
            logging.info(f"Processing limited to {limit} files")

        results = {
            'total_found': total_files,
            'processed': 0,
            'successful': 0,
            'failed': 0,
            'results': [],
            'errors': []
        }

        for idx, sigma_file in enumerate(sigma_files, 1):
            logging.debug(f"Processing {idx}/{len(sigma_files)}: {sigma_file.name}")
            relative = sigma_file.relative_to(sigma_dir)

            conversion_result = self.rule_converter.convert_sigma_rule(
                sigma_file, output_dir, relative.with_suffix('.kql')
            )
            results['processed'] += 1

            if conversion_result['status'] == 'success':
                results['successful'] += 1
            else:
                results['failed'] += 1
                results['errors'].append(conversion_result)

            results['results'].append(conversion_result)

            if idx % 100 == 0:
                logging.info(f"Progress: {idx}/{len(sigma_files)} files processed")

        results['completion_time'] = datetime.now().isoformat()
        results['success_rate'] = (results['successful'] / results['processed']) * 100 if results['processed'] > 0 else 0

        logging.info(f"Batch processing completed: {results['successful']}/{results['processed']} successful "
                     f"({results['success_rate']:.1f}%)")

        return results

    def validate_rules(self, sigma_dir: Path) -> Dict[str, Any]:
        """
        Check that every Sigma rule in a directory loads, compiles and has a
        parseable condition.
        """
        logging.info(f"Validating Sigma rules in: {sigma_dir}")

        rule_files = get_sigma_files_from_directory(Path(sigma_dir))

        results = {
            'total_files': len(rule_files),
            'valid': 0,
            'invalid': 0,
            'errors': []
        }

        for rule_file in rule_files:
            try:
                self.rule_converter.validate_rule_text(read_rule_text(rule_file))
                results['valid'] += 1
            except TranslationError as e:
                results['invalid'] += 1
                results['errors'].append({
                    'file': str(rule_file),
                    'error_kind': e.kind,
                    'error': e.message
                })
            except (OSError, UnicodeDecodeError) as e:
                results['invalid'] += 1
                results['errors'].append({
                    'file': str(rule_file),
                    'error_kind': 'IOError',
                    'error': str(e)
                })

        logging.info(f"Validation completed: {results['valid']}/{results['total_files']} files valid")

        return results
