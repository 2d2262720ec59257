"""
File Handler Module

Rule file discovery and reading, plus writing of generated queries and
batch reports.
"""

import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

RULE_SUFFIXES = ('.yml', '.yaml')
SKIP_DIRS = {'venv', '.git', '__pycache__'}


def is_sigma_rule(file_path: Path) -> bool:
    """
    Determine if a YAML file looks like a Sigma rule.
    Checks for a detection block plus a title or logsource in the first 50 lines.
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            has_detection = False
            has_identifier = False

            for line_num, line in enumerate(f):
                line_stripped = line.strip().lower()

                if line_stripped.startswith('detection:'):
                    has_detection = True
                elif line_stripped.startswith(('title:', 'logsource:')):
                    has_identifier = True

                if has_detection and has_identifier:
                    return True

                if line_num > 50:
                    break

            return False
    except (OSError, UnicodeDecodeError) as e:
        logging.debug(f"Skipping unreadable file {file_path}: {e}")
        return False


def get_sigma_files_from_directory(directory: Path) -> List[Path]:
    """
    Get all Sigma rule files below a directory, sorted.
    """
    directory = Path(directory)
    all_files = []
    if directory.exists():
        for file_path in directory.rglob('*'):
            if any(part in SKIP_DIRS for part in file_path.relative_to(directory).parts):
                continue
            if file_path.is_file() and file_path.suffix.lower() in RULE_SUFFIXES and is_sigma_rule(file_path):
                all_files.append(file_path)

    return sorted(all_files)


def read_rule_text(file_path: Union[str, Path]) -> str:
    """
    Read rule text from a file, or from stdin when the path is '-'.
    """
    if str(file_path) == '-':
        return sys.stdin.read()
    with open(file_path, 'r', encoding='utf-8') as f:
        return f.read()


def save_query(query: str, output_file: Path) -> Path:
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    with open(output_file, 'w', encoding='utf-8') as f:
        f.write(query + '\n')
    logging.info(f"Saved KQL query to: {output_file}")
    return output_file


def save_report(report: Dict[str, Any], output_file: Path) -> Path:
    """
    Save a batch conversion report as YAML.
    """
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    with open(output_file, 'w', encoding='utf-8') as f:
        yaml.safe_dump(report, f, default_flow_style=False,
                       allow_unicode=True, sort_keys=False, width=120, indent=2)
    logging.info(f"Saved conversion report to: {output_file}")
    return output_file
