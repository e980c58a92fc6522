"""Summary report generation."""

from pathlib import Path

from decontam.reports.data import ReportData
from decontam.reports.helpers import write_report_header, write_subsection_header
from decontam.utils.helpers import format_time, write_file_safely


def generate_summary_report(data: ReportData, report_dir: Path) -> Path:
    """Generate summary report."""
    filepath = report_dir / "summary.txt"
    total_time = sum(data.stage_times.values())

    def write_summary_content(f):
        write_report_header(f, f"DECONTAM SUMMARY ({data.command})")

        if data.settings:
            write_subsection_header(f, "SETTINGS", width=70)
            for key, value in data.settings.items():
                f.write(f"{key:<35} {value}\n")
            f.write("\n")

        write_subsection_header(f, "STATISTICS", width=70)
        if data.command == "build-matches":
            f.write(f"Training files processed:           {data.files_processed:,}\n")
            f.write(f"Raw matches found:                  {data.matches_found:,}\n\n")
        else:
            f.write(f"Raw matches loaded:                 {data.matches_loaded:,}\n")
            f.write(f"Validation documents:               {data.validation_documents:,}\n")
            f.write(f"Match groups:                       {data.match_groups:,}\n")
            f.write(f"Contaminated validation documents:  {data.contaminated_documents:,}\n")
            f.write(f"Total contaminates:                 {data.total_contaminates:,}\n\n")

        if data.stage_times:
            write_subsection_header(f, "TIMING BREAKDOWN", width=70)
            for stage, duration in data.stage_times.items():
                pct = (duration / total_time * 100) if total_time > 0 else 0
                f.write(f"{stage:<35} {format_time(duration):>12} ({pct:>5.1f}%)\n")
            f.write("-" * 70 + "\n")
            f.write(f"{'Total':<35} {format_time(total_time):>12}\n")

    write_file_safely(filepath, write_summary_content, "writing summary report")
    return filepath
