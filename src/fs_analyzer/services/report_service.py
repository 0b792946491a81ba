from __future__ import annotations

import html
import os
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from fs_analyzer.models.common import CollectorResult
from fs_analyzer.models.filesystem import FilesystemRecord, InodeInfo, ScanData

UNITS = ("B", "KB", "MB", "GB", "TB", "PB", "EB", "ZB", "YB")
BAR_WIDTH = 40
RULE_WIDTH = 110
ROW_FMT = "{:<12} {:<10} {:<12} {:<12} {:<12} {:<8} {:<10} {}"


def format_bytes(n: float, precision: int = 2) -> str:
    """1024-based size, rounded to ``precision`` with trailing zeros trimmed."""
    if n <= 0:
        return "0 B"

    value = float(n)
    idx = 0
    while value >= 1024 and idx < len(UNITS) - 1:
        value /= 1024
        idx += 1

    value = round(value, precision)
    # 1048575 B rounds to 1024 KB; show it as 1 MB
    if value >= 1024 and idx < len(UNITS) - 1:
        value = round(value / 1024, precision)
        idx += 1

    text = f"{value:.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{text} {UNITS[idx]}"


def format_percent(value: float | str) -> str:
    if isinstance(value, str):
        return value
    return f"{value:g}%"


def usage_bar(usage_percent: float, width: int = BAR_WIDTH) -> str:
    used = max(0, min(width, round(usage_percent / 100 * width)))
    return "[" + "█" * used + "░" * (width - used) + "]"


@dataclass(frozen=True)
class ReportBundle:
    text: str
    html: str


class ReportService:
    def build_report(
        self,
        result: CollectorResult[ScanData],
        *,
        now: datetime | None = None,
    ) -> ReportBundle:
        ts = (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
        d = result.data

        lines: list[str] = ["FILE SYSTEM ANALYSIS REPORT", f"Generated: {ts}", "=" * 100, ""]
        for rec in d.mounts.values():
            lines.append(self._section_mount(rec))

        failed = [r for r in d.records.values() if not r.ok]
        if failed:
            lines.extend(f"PATH: {r.path} - ERROR: {r.error}" for r in failed)
            lines.append("")

        lines.append(self._summary_table(d))
        lines.append(self._system_summary(d))
        lines.append("Detected Mount Points: " + ", ".join(d.mounts))
        text_out = "\n".join(lines).rstrip() + "\n"

        return ReportBundle(text=text_out, html=self._wrap_html(text_out))

    def as_dict(self, result: CollectorResult[ScanData]) -> dict[str, Any]:
        d = result.data
        return {
            "ts": result.ts.isoformat(timespec="seconds"),
            "status": result.status.value,
            "warnings": list(result.warnings),
            "records": {p: self._record_dict(r) for p, r in d.records.items()},
            "mounts": {m: self._record_dict(r) for m, r in d.mounts.items()},
            "summary": asdict(d.summary),
            "notes": list(d.notes),
        }

    def default_report_path(self) -> Path:
        base = Path.home() / "fs_analyzer_reports"
        base.mkdir(parents=True, exist_ok=True)
        ts = datetime.now().strftime("%Y%m%d-%H%M%S")
        return base / f"fs_report_{ts}.html"

    def write_report(self, path: str | os.PathLike[str], content: str) -> str:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(content, encoding="utf-8")
        return str(p)

    def _section_mount(self, r: FilesystemRecord) -> str:
        status = r.status.value if r.status else ""
        out = [
            f"MOUNT: {r.mount_point}",
            f"Original Path: {r.path}",
            f"Filesystem: {r.filesystem_type}",
            f"Size: {format_bytes(r.total_bytes)}",
            f"Used: {format_bytes(r.used_bytes)}",
            f"Available: {format_bytes(r.free_bytes)}",
            f"Usage: {r.usage_percent:g}% [{status}]",
        ]
        if r.inodes is not None:
            i = r.inodes
            out.append(f"Inodes: {i.used}/{i.total} ({format_percent(i.usage_percent)} used)")
        out.append(usage_bar(r.usage_percent))
        return "\n".join(out) + "\n"

    def _summary_table(self, d: ScanData) -> str:
        rule = "-" * RULE_WIDTH
        out = [
            "SUMMARY TABLE (Unique Mount Points)",
            rule,
            ROW_FMT.format("Mount", "FS Type", "Size", "Used", "Available", "Use%", "Status", "Inodes"),
            rule,
        ]
        for r in d.mounts.values():
            out.append(
                ROW_FMT.format(
                    r.mount_point,
                    r.filesystem_type[:10],
                    format_bytes(r.total_bytes),
                    format_bytes(r.used_bytes),
                    format_bytes(r.free_bytes),
                    f"{r.usage_percent:g}%",
                    r.status.value if r.status else "",
                    self._inode_cell(r.inodes),
                )
            )
        out.append(rule)
        return "\n".join(out) + "\n"

    def _system_summary(self, d: ScanData) -> str:
        s = d.summary
        return (
            "SYSTEM SUMMARY:\n"
            f"Unique Mount Points: {s.filesystem_count}\n"
            f"Total Space: {format_bytes(s.total_space)}\n"
            f"Total Used: {format_bytes(s.total_used)}\n"
            f"Overall Usage: {s.total_usage_percent:g}%\n"
            f"Status - Critical: {s.critical_count}, Warning: {s.warning_count}, OK: {s.ok_count}\n"
        )

    def _inode_cell(self, inodes: InodeInfo | None) -> str:
        if inodes is None:
            return "N/A"
        return format_percent(inodes.usage_percent)

    def _record_dict(self, r: FilesystemRecord) -> dict[str, Any]:
        d = asdict(r)
        d["status"] = r.status.value if r.status else None
        return d

    def _wrap_html(self, text_out: str) -> str:
        escaped = html.escape(text_out)
        return (
            "<!doctype html>"
            "<html><head><meta charset='utf-8'>"
            "<meta name='viewport' content='width=device-width, initial-scale=1'>"
            "<title>File System Analysis Report</title>"
            "<style>body{font-family:ui-monospace,Menlo,Consolas,monospace;margin:24px;}"
            "pre{white-space:pre-wrap;line-height:1.35;}"
            "</style></head><body>"
            "<h1>File System Analysis Report</h1>"
            f"<pre>{escaped}</pre>"
            "</body></html>"
        )
