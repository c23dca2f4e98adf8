"""Human-readable adoption report."""

import math
from datetime import datetime
from pathlib import PurePosixPath

from .models import AdoptionStatistics


# Number of files listed in the per-file section
TOP_FILES_LIMIT = 10

RULE = "=" * 50


def _format_time(moment: datetime) -> str:
    return moment.strftime('%Y-%m-%d %H:%M:%S')


def _display_name(file_path: str) -> str:
    return PurePosixPath(file_path).name or file_path


def format_report(stats: AdoptionStatistics) -> str:
    """
    Format an adoption statistics snapshot as a plain-text report.

    The per-file section lists at most ``TOP_FILES_LIMIT`` files ranked by
    AI characters, highest first; the rest are left out.
    """
    lines = []

    duration_minutes = (stats.period_end - stats.period_start).total_seconds() / 60

    lines.append(RULE)
    lines.append("AI Code Adoption Report")
    lines.append(RULE)
    lines.append("")

    # Halves round up
    lines.append(f"Period: {math.floor(duration_minutes + 0.5)} minutes")
    lines.append(f"  Start: {_format_time(stats.period_start)}")
    lines.append(f"  End:   {_format_time(stats.period_end)}")
    lines.append("")

    lines.append("Changes")
    lines.append("-" * 30)
    lines.append(f"  AI changes: {stats.total_ai_changes}")
    lines.append(f"    Accepted: {stats.ai_accepted}")
    lines.append(f"    Rejected: {stats.ai_rejected}")
    lines.append(f"  Manual edits: {stats.total_manual_edits}")
    lines.append("")

    total_characters = stats.ai_character_count + stats.manual_character_count
    lines.append("Characters")
    lines.append("-" * 30)
    lines.append(f"  AI generated: {stats.ai_character_count:,}")
    lines.append(f"  Manual: {stats.manual_character_count:,}")
    lines.append(f"  Total: {total_characters:,}")
    lines.append("")

    lines.append(f"AI adoption rate: {stats.adoption_rate:.2f}%")

    if stats.by_file:
        # sorted() is stable, so ties keep first-seen order
        top_files = sorted(
            stats.by_file.values(),
            key=lambda f: f.ai_characters,
            reverse=True,
        )[:TOP_FILES_LIMIT]

        lines.append("")
        lines.append(f"Top Files (by AI characters, up to {TOP_FILES_LIMIT})")
        lines.append("-" * 30)
        for file_stats in top_files:
            lines.append(f"  {_display_name(file_stats.file_path)}")
            lines.append(f"    AI: {file_stats.ai_changes} changes ({file_stats.ai_characters} chars)")
            lines.append(f"    Manual: {file_stats.manual_edits} edits ({file_stats.manual_characters} chars)")
            lines.append(f"    Adoption rate: {file_stats.adoption_rate:.2f}%")

    lines.append("")
    lines.append(RULE)

    return '\n'.join(lines)
