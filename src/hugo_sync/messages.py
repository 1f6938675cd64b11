"""User-facing strings for the sync command."""

from __future__ import annotations

from dataclasses import dataclass

from .logging import BatchSummary


@dataclass(frozen=True, slots=True)
class Messages:
    command_name: str
    no_files_selected: str
    sync_result: str
    sync_errors: str


LANGUAGES: dict[str, Messages] = {
    "en": Messages(
        command_name="Sync selected file(s) to Hugo",
        no_files_selected="No files selected for syncing",
        sync_result="Sync complete. Total: {0}, Success: {1}, Failed: {2}",
        sync_errors="Errors occurred during sync",
    ),
    "zh": Messages(
        command_name="将选中的文件同步到 Hugo",
        no_files_selected="没有选择要同步的文件",
        sync_result="同步完成。总计: {0}, 成功: {1}, 失败: {2}",
        sync_errors="同步过程中发生错误",
    ),
}


def get_messages(language: str) -> Messages:
    return LANGUAGES.get(language, LANGUAGES["en"])


def format_sync_result(summary: BatchSummary, errors: list[str], language: str = "en") -> str:
    messages = get_messages(language)
    text = messages.sync_result.format(summary.total, summary.successes, summary.failures)
    if errors:
        text += "\n\n" + messages.sync_errors + ":\n" + "\n".join(errors)
    return text


__all__ = ["LANGUAGES", "Messages", "format_sync_result", "get_messages"]
