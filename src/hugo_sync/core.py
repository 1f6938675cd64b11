from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from .config import AppConfig
from .constants import NOTICE_DURATION_MS
from .host import VaultHost
from .images import IMAGE_EXISTS, ImageCopier, ImageResolver
from .logging import BatchSummary, RunLogEntry, RunLogger, StageTimings, append_summary_row
from .messages import format_sync_result, get_messages
from .models import (
    BatchSyncResult,
    ConversionResult,
    Document,
    DocumentSyncResult,
    ImageCopyInstruction,
    ImageLayout,
)
from .transform import DocumentTransformer, utc_now
from .utils import generate_run_id, strip_markdown_suffix

RUN_LOG_FAILED = "RUN_LOG_FAILED"


class SyncError(RuntimeError):
    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


@dataclass(slots=True)
class _SyncContext:
    run_id: str
    logger: RunLogger
    output_path: Path
    copied: list[Path] = field(default_factory=list)
    skipped: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


class SyncService:
    def __init__(
        self,
        config: AppConfig,
        host: VaultHost,
        *,
        clock: Callable[[], datetime] = utc_now,
        image_clock: Callable[[], float] = time.time,
    ) -> None:
        self._config = config
        self._host = host
        self._resolver = ImageResolver(config, host, clock=image_clock)
        self._transformer = DocumentTransformer(config, self._resolver, clock=clock)
        self._copier = ImageCopier(host)

    @property
    def transformer(self) -> DocumentTransformer:
        return self._transformer

    def output_path(self, document: Document) -> Path:
        hugo = self._config.hugo
        content_dir = hugo.path / hugo.content_path
        if hugo.image_layout is ImageLayout.STATIC:
            return content_dir / document.name
        suffix = Path(document.name).suffix or ".md"
        return content_dir / strip_markdown_suffix(document.name) / f"index{suffix}"

    def convert_document(self, document: Document) -> ConversionResult:
        """Read and convert a note without touching the Hugo tree."""

        content = self._read(document)
        return self._transformer.convert(content, document.name, document_path=document.path)

    def sync_document(
        self,
        document: Document,
        *,
        run_id: str | None = None,
        logger: RunLogger | None = None,
    ) -> DocumentSyncResult:
        context = _SyncContext(
            run_id=run_id or generate_run_id("sync"),
            logger=logger or self._run_logger(),
            output_path=self.output_path(document),
        )
        start = time.perf_counter()
        try:
            result, timings = self._sync_internal(document, context)
        except Exception as exc:
            try:
                self._log_failure(document, context, exc)
            except OSError as log_exc:
                raise SyncError(RUN_LOG_FAILED, f"{exc} (run log not written: {log_exc})") from exc
            raise

        elapsed = time.perf_counter() - start
        warnings = list(result.warnings) + context.warnings
        try:
            self._append_success_log(document, context, warnings, timings)
        except OSError:
            # the page and images are already in place
            warnings.append(RUN_LOG_FAILED)
        return DocumentSyncResult(
            document=document,
            output_path=context.output_path,
            copied=context.copied,
            skipped=context.skipped,
            warnings=warnings,
            summary=f"Synced {document.name} -> {context.output_path} in {elapsed:.2f}s",
        )

    def _sync_internal(self, document: Document, context: _SyncContext) -> tuple[ConversionResult, StageTimings]:
        read_start = time.perf_counter()
        content = self._read(document)
        read_ms = (time.perf_counter() - read_start) * 1000

        convert_start = time.perf_counter()
        result = self._transformer.convert(content, document.name, document_path=document.path)
        convert_ms = (time.perf_counter() - convert_start) * 1000

        copy_start = time.perf_counter()
        for instruction in result.images:
            self._copy_image(instruction, context)
        copy_ms = (time.perf_counter() - copy_start) * 1000

        write_start = time.perf_counter()
        self._write_output(context.output_path, result.text)
        write_ms = (time.perf_counter() - write_start) * 1000

        return result, StageTimings(read_ms=read_ms, convert_ms=convert_ms, copy_ms=copy_ms, write_ms=write_ms)

    def _read(self, document: Document) -> str:
        try:
            return self._host.read_text(document)
        except (OSError, UnicodeDecodeError) as exc:
            raise SyncError("READ_FAILED", f"Cannot read {document.path}: {exc}") from exc

    def _copy_image(self, instruction: ImageCopyInstruction, context: _SyncContext) -> None:
        try:
            copied = self._copier.copy(instruction)
        except FileNotFoundError:
            # the source vanished after resolution
            context.skipped.append(instruction.source)
            return
        except OSError as exc:
            raise SyncError("COPY_FAILED", f"Cannot copy {instruction.name}: {exc}") from exc
        if copied:
            context.copied.append(instruction.destination)
        else:
            context.skipped.append(instruction.destination)
            context.warnings.append(IMAGE_EXISTS)

    def _write_output(self, output_path: Path, text: str) -> None:
        try:
            self._host.make_dirs(output_path.parent)
            self._host.write_text(output_path, text)
        except OSError as exc:
            raise SyncError("WRITE_FAILED", f"Cannot write {output_path}: {exc}") from exc

    def _run_logger(self) -> RunLogger:
        runtime = self._config.runtime
        return RunLogger(runtime.log_dir / runtime.log_file)

    def _log_failure(self, document: Document, context: _SyncContext, exc: Exception) -> None:
        code = exc.code if isinstance(exc, SyncError) else type(exc).__name__
        context.logger.append(
            RunLogEntry(
                run_id=context.run_id,
                source=document.path,
                status="failure",
                output_path=str(context.output_path),
                copied=[str(path) for path in context.copied],
                skipped=[str(path) for path in context.skipped],
                warnings=list(context.warnings),
                error=f"{code}: {exc}",
                timings=StageTimings(0, 0, 0, 0),
            )
        )

    def _append_success_log(
        self,
        document: Document,
        context: _SyncContext,
        warnings: list[str],
        timings: StageTimings,
    ) -> None:
        context.logger.append(
            RunLogEntry(
                run_id=context.run_id,
                source=document.path,
                status="success",
                output_path=str(context.output_path),
                copied=[str(path) for path in context.copied],
                skipped=[str(path) for path in context.skipped],
                warnings=warnings,
                error=None,
                timings=timings,
            )
        )

    def sync_selected(self) -> BatchSyncResult:
        return self.sync_documents(self._host.selected_documents())

    def sync_documents(self, documents: Sequence[Document]) -> BatchSyncResult:
        language = self._config.convert.language
        summary = BatchSummary()
        if not documents:
            message = get_messages(language).no_files_selected
            self._host.notify(message, None)
            return BatchSyncResult(runs=[], summary=summary, message=message)

        run_id = generate_run_id("sync")
        logger = self._run_logger()
        results: list[DocumentSyncResult] = []
        errors: list[str] = []
        for document in documents:
            try:
                result = self.sync_document(document, run_id=run_id, logger=logger)
            except Exception as exc:
                summary.failures += 1
                errors.append(f"{document.name}: {exc}")
                continue
            results.append(result)
            summary.successes += 1
            summary.count_warnings(result.warnings)

        summary.total = len(documents)
        try:
            self._write_batch_summary(summary)
        except OSError as exc:
            errors.append(f"{self._config.runtime.summary_csv}: {exc}")
        message = format_sync_result(summary, errors, language)
        self._host.notify(message, NOTICE_DURATION_MS)
        return BatchSyncResult(runs=results, summary=summary, errors=errors, message=message)

    def _write_batch_summary(self, summary: BatchSummary) -> None:
        runtime = self._config.runtime
        append_summary_row(runtime.log_dir / runtime.summary_csv, summary.as_row(generate_run_id("batch")))


__all__ = [
    "RUN_LOG_FAILED",
    "SyncError",
    "SyncService",
]
