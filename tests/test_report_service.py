"""
Tests for byte formatting and report rendering.
"""

import json
from datetime import datetime

import pytest

from fs_analyzer.models.common import CollectorResult, UsageStatus
from fs_analyzer.models.filesystem import (
    FilesystemRecord,
    FilesystemSummary,
    InodeInfo,
    ScanData,
)
from fs_analyzer.services.report_service import ReportService, format_bytes, usage_bar


@pytest.mark.parametrize(
    "n,expected",
    [
        (0, "0 B"),
        (-10, "0 B"),
        (1, "1 B"),
        (1023, "1023 B"),
        (1024, "1 KB"),
        (1024**2 - 1, "1 MB"),
        (1024**3 - 1, "1 GB"),
        (1536, "1.5 KB"),
        (int(1.25 * 1024**2), "1.25 MB"),
        (1024**3 * 3, "3 GB"),
        (1024**6, "1 EB"),
        (1024**8, "1 YB"),
        (1024**9, "1024 YB"),
    ],
)
def test_format_bytes(n, expected):
    assert format_bytes(n) == expected


def test_format_bytes_precision():
    assert format_bytes(1100, precision=0) == "1 KB"
    assert format_bytes(1100, precision=3) == "1.074 KB"


def test_usage_bar():
    assert usage_bar(0) == "[" + "░" * 40 + "]"
    assert usage_bar(50) == "[" + "█" * 20 + "░" * 20 + "]"
    assert usage_bar(100) == "[" + "█" * 40 + "]"


def _scan():
    root = FilesystemRecord(
        path="/",
        total_bytes=1024**3 * 10,
        free_bytes=1024**3 * 4,
        used_bytes=1024**3 * 6,
        usage_percent=60.0,
        filesystem_type="ext4",
        mount_point="/",
        inodes=InodeInfo(total=1000, used=250, free=750, usage_percent=25.0),
        status=UsageStatus.OK,
    )
    win = FilesystemRecord(
        path="D:\\",
        total_bytes=1024**3,
        free_bytes=1024**2 * 100,
        used_bytes=1024**3 - 1024**2 * 100,
        usage_percent=90.23,
        filesystem_type="VeryLongFilesystemName",
        mount_point="D:",
        inodes=InodeInfo.unsupported(),
        status=UsageStatus.CRITICAL,
    )
    missing = FilesystemRecord.failed("/boot", "Invalid or inaccessible path: /boot")
    summary = FilesystemSummary(
        filesystem_count=2,
        total_space=root.total_bytes + win.total_bytes,
        total_used=root.used_bytes + win.used_bytes,
        total_usage_percent=62.75,
        critical_count=1,
        warning_count=0,
        ok_count=1,
    )
    data = ScanData(
        records={"/": root, "D:\\": win, "/boot": missing},
        mounts={"/": root, "D:": win},
        summary=summary,
    )
    return CollectorResult(
        ts=datetime(2024, 5, 1, 12, 0, 0),
        status=UsageStatus.CRITICAL,
        warning_count=1,
        warnings=["Disk usage high: D: 90.23% [CRITICAL]"],
        data=data,
    )


def test_text_report_sections():
    bundle = ReportService().build_report(_scan(), now=datetime(2024, 5, 1, 12, 0, 0))
    text = bundle.text

    assert text.startswith("FILE SYSTEM ANALYSIS REPORT\nGenerated: 2024-05-01 12:00:00\n")
    assert "MOUNT: /\nOriginal Path: /\nFilesystem: ext4\n" in text
    assert "Size: 10 GB\nUsed: 6 GB\nAvailable: 4 GB\nUsage: 60% [OK]\n" in text
    assert "Inodes: 250/1000 (25% used)" in text
    assert "Inodes: N/A/N/A (N/A used)" in text
    assert "Usage: 90.23% [CRITICAL]" in text
    assert "[" + "█" * 24 + "░" * 16 + "]" in text
    assert "PATH: /boot - ERROR: Invalid or inaccessible path: /boot" in text
    assert "SUMMARY TABLE (Unique Mount Points)" in text
    assert "Unique Mount Points: 2" in text
    assert "Overall Usage: 62.75%" in text
    assert "Status - Critical: 1, Warning: 0, OK: 1" in text
    assert text.rstrip().endswith("Detected Mount Points: /, D:")


def test_summary_table_rows():
    text = ReportService().build_report(_scan()).text
    rows = [ln for ln in text.splitlines() if ln.startswith("/ ") or ln.startswith("D: ")]

    assert len(rows) == 2
    root_row = rows[0].split()
    assert root_row == ["/", "ext4", "10", "GB", "6", "GB", "4", "GB", "60%", "OK", "25%"]
    # filesystem type is cut to ten characters
    assert "VeryLongFi " in rows[1]
    assert rows[1].endswith("N/A")


def test_html_wraps_escaped_text():
    bundle = ReportService().build_report(_scan())

    assert bundle.html.startswith("<!doctype html>")
    assert "<pre>FILE SYSTEM ANALYSIS REPORT" in bundle.html
    assert "D:\\" in bundle.html


def test_as_dict_is_json_serializable():
    d = ReportService().as_dict(_scan())
    decoded = json.loads(json.dumps(d))

    assert decoded["status"] == "CRITICAL"
    assert decoded["mounts"]["D:"]["status"] == "CRITICAL"
    assert decoded["mounts"]["/"]["inodes"]["used"] == 250
    assert decoded["records"]["/boot"]["error"].startswith("Invalid")
    assert decoded["records"]["/boot"]["status"] is None
    assert decoded["summary"]["filesystem_count"] == 2


def test_write_report(tmp_path):
    out = tmp_path / "nested" / "report.txt"
    written = ReportService().write_report(out, "hello\n")

    assert written == str(out)
    assert out.read_text(encoding="utf-8") == "hello\n"


def test_default_report_path(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    p = ReportService().default_report_path()

    assert p.parent == tmp_path / "fs_analyzer_reports"
    assert p.name.startswith("fs_report_") and p.suffix == ".html"
