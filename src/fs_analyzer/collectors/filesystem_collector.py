from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

from fs_analyzer.collectors.attribute_resolver import AttributeResolver, select_resolver
from fs_analyzer.collectors.capacity_probe import CapacityProbe
from fs_analyzer.collectors.command_runner import CommandRunner
from fs_analyzer.collectors.path_discoverer import PathDiscoverer
from fs_analyzer.exceptions import CapacityUnavailable, InvalidPath
from fs_analyzer.models.common import CollectorResult, UsageStatus
from fs_analyzer.models.filesystem import FilesystemRecord, FilesystemSummary, ScanData
from fs_analyzer.services.config_service import AnalyzerConfig
from fs_analyzer.services.record_cache import RecordCache

logger = logging.getLogger(__name__)


class FilesystemAnalyzer:
    """Probes the scan paths, caches one record per path and rolls them up.

    Every instance owns its own cache. Deduplication keeps the first record
    seen for a mount point, in scan-path order, so the order of
    ``config.scan_paths`` (or of the platform default list) decides which
    requested path represents a shared mount.
    """

    def __init__(
        self,
        config: AnalyzerConfig | None = None,
        *,
        discoverer: PathDiscoverer | None = None,
        probe: CapacityProbe | None = None,
        resolver: AttributeResolver | None = None,
        runner: CommandRunner | None = None,
    ) -> None:
        self.config = config or AnalyzerConfig()
        self.discoverer = discoverer or PathDiscoverer()
        self.probe = probe or CapacityProbe()
        self.resolver = resolver or select_resolver(runner, self.config.timeout_seconds)
        self.cache = RecordCache()
        self.scan_paths = self.discoverer.scan_paths(self.config.scan_paths)

    def classify(self, usage_percent: float) -> UsageStatus:
        if usage_percent >= self.config.critical_threshold:
            return UsageStatus.CRITICAL
        if usage_percent >= self.config.warning_threshold:
            return UsageStatus.WARNING
        return UsageStatus.OK

    def get_record(self, path: str) -> FilesystemRecord:
        cached = self.cache.get(path)
        if cached is not None:
            return cached

        with self.cache.lock_for(path):
            cached = self.cache.get(path)
            if cached is not None:
                return cached
            record = self._build_record(path)
            # failed probes are retried on the next lookup
            if record.ok:
                self.cache.put(path, record)
        return record

    def clear_cache(self, path: str | None = None) -> None:
        self.cache.invalidate(path)

    def all_records(self) -> dict[str, FilesystemRecord]:
        paths = self.scan_paths
        workers = min(self.config.workers, len(paths))
        if workers <= 1:
            return {p: self.get_record(p) for p in paths}

        with ThreadPoolExecutor(max_workers=workers) as ex:
            records = list(ex.map(self.get_record, paths))
        return dict(zip(paths, records))

    def unique_by_mount_point(
        self, records: dict[str, FilesystemRecord] | None = None
    ) -> dict[str, FilesystemRecord]:
        if records is None:
            records = self.all_records()

        unique: dict[str, FilesystemRecord] = {}
        for rec in records.values():
            if not rec.ok or rec.mount_point in unique:
                continue
            unique[rec.mount_point] = rec
        return unique

    def summary(self, mounts: dict[str, FilesystemRecord] | None = None) -> FilesystemSummary:
        if mounts is None:
            mounts = self.unique_by_mount_point()

        ok_mounts = [m for m in mounts.values() if m.ok]
        total_space = sum(m.total_bytes for m in ok_mounts)
        total_used = sum(m.used_bytes for m in ok_mounts)
        critical = sum(1 for m in ok_mounts if m.status is UsageStatus.CRITICAL)
        warning = sum(1 for m in ok_mounts if m.status is UsageStatus.WARNING)
        pct = round(total_used / total_space * 100, 2) if total_space > 0 else 0.0

        return FilesystemSummary(
            filesystem_count=len(ok_mounts),
            total_space=total_space,
            total_used=total_used,
            total_usage_percent=pct,
            critical_count=critical,
            warning_count=warning,
            ok_count=len(ok_mounts) - critical - warning,
        )

    def collect(self) -> CollectorResult[ScanData]:
        ts = datetime.now()
        warnings: list[str] = []
        notes: list[str] = []

        records = self.all_records()
        mounts = self.unique_by_mount_point(records)
        summary = self.summary(mounts)

        for rec in records.values():
            if not rec.ok:
                warnings.append(f"{rec.path}: {rec.error}")
                continue
            first = mounts[rec.mount_point]
            if first.path != rec.path:
                notes.append(f"{rec.path} shares mount point {rec.mount_point} with {first.path}")

        for m in mounts.values():
            if m.status in (UsageStatus.WARNING, UsageStatus.CRITICAL):
                warnings.append(f"Disk usage high: {m.mount_point} {m.usage_percent:g}% [{m.status.value}]")

        if summary.critical_count:
            status = UsageStatus.CRITICAL
        elif warnings:
            status = UsageStatus.WARNING
        else:
            status = UsageStatus.OK

        data = ScanData(records=records, mounts=mounts, summary=summary, notes=notes)
        return CollectorResult(
            ts=ts,
            status=status,
            warning_count=len(warnings),
            warnings=warnings,
            data=data,
        )

    def _build_record(self, path: str) -> FilesystemRecord:
        try:
            cap = self.probe.probe(path)
        except (InvalidPath, CapacityUnavailable) as e:
            logger.warning("%s", e)
            return FilesystemRecord.failed(path, str(e))

        total, free = cap.total_bytes, cap.free_bytes
        if free > total:
            logger.warning("%s reports free (%s) above total (%s); clamping free to total", path, free, total)
            free = total

        used = total - free
        usage_percent = round(used / total * 100, 2) if total > 0 else 0.0
        attrs = self.resolver.resolve(path)

        return FilesystemRecord(
            path=path,
            total_bytes=total,
            free_bytes=free,
            used_bytes=used,
            usage_percent=usage_percent,
            filesystem_type=attrs.filesystem_type,
            mount_point=attrs.mount_point,
            inodes=attrs.inodes,
            status=self.classify(usage_percent),
        )
