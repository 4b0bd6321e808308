"""
Conversion report generator for summarizing a finished job.

This module turns a ConversionResult into a report dictionary and formats it
for console display or JSON export.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

from models import ConversionResult


class ConversionReport:
    """Builds and renders reports of conversion jobs."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize conversion report generator.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger('notion_obsidian_converter.report')

    def generate_report(self, result: ConversionResult) -> Dict[str, Any]:
        """
        Generate the report dictionary of a conversion.

        Args:
            result: Finished conversion

        Returns:
            Report with ``summary``, ``files`` and ``timestamp`` keys
        """
        processed = result.records_total - result.records_failed
        success_rate = processed / result.records_total if result.records_total else 1.0

        report = {
            'summary': {
                'database': result.database_title,
                'format': result.conversion_format,
                'records': result.records_total,
                'records_failed': result.records_failed,
                'files_created': result.files_created,
                'output_path': result.output_path,
                'obsidian_integration': result.obsidian_integration,
                'success_rate': success_rate,
                'duration_seconds': result.duration_seconds,
                'duration_formatted': self._format_duration(result.duration_seconds)
            },
            'files': list(result.files),
            'conversion_id': result.conversion_id,
            'timestamp': datetime.now().isoformat()
        }

        self.logger.info(
            f"Report generated: {result.files_created} files, {result.records_failed} failed records"
        )
        return report

    def format_console_report(self, report: Dict[str, Any]) -> str:
        """
        Format report for console display.

        Args:
            report: Report dictionary from ``generate_report``

        Returns:
            Formatted console string
        """
        summary = report.get('summary', {})
        sections = [
            "=" * 60,
            "CONVERSION REPORT",
            "=" * 60,
            "",
            "Summary:",
            f"  Database:    {summary.get('database', 'unknown')}",
            f"  Format:      {summary.get('format', 'unknown')}",
            f"  Records:     {summary.get('records', 0)}",
            f"  Files:       {summary.get('files_created', 0)}",
            f"  Output:      {summary.get('output_path', '')}",
            f"  Duration:    {summary.get('duration_formatted', '0s')}",
        ]

        if 'success_rate' in summary:
            sections.append(f"  Success:     {summary['success_rate'] * 100:.1f}%")

        if summary.get('records_failed', 0) > 0:
            sections.append(f"  Failed:      {summary['records_failed']} (see log for details)")

        if summary.get('obsidian_integration'):
            sections.append("  Written directly into the Obsidian vault")

        sections.append("")
        sections.append("=" * 60)
        return "\n".join(sections)

    def export_json_report(self, report: Dict[str, Any], filepath: str) -> None:
        """
        Export report to JSON file.

        Args:
            report: Report dictionary
            filepath: Output file path
        """
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(report, f, indent=2, ensure_ascii=False, default=str)

            self.logger.info(f"JSON report exported to {filepath}")

        except OSError as e:
            self.logger.error(f"Failed to export JSON report: {str(e)}")

    @staticmethod
    def _format_duration(seconds: float) -> str:
        """Format duration in human-readable format."""
        if seconds < 60:
            return f"{seconds:.1f}s"
        elif seconds < 3600:
            minutes = int(seconds // 60)
            secs = int(seconds % 60)
            return f"{minutes}m {secs}s"
        else:
            hours = int(seconds // 3600)
            minutes = int((seconds % 3600) // 60)
            secs = int(seconds % 60)
            return f"{hours}h {minutes}m {secs}s"


__all__ = ['ConversionReport']
