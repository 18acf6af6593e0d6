"""Localized UI strings.

Templates use ``{{name}}`` placeholders which are replaced literally, so
values containing regex metacharacters or ``$`` sequences are inserted as is.
"""

from __future__ import annotations

import os
from typing import Any, Mapping

DEFAULT_LOCALE = "en_US"
LOCALE_ENV = "DRIVEIMAGE_LOCALE"

MESSAGES: dict[str, dict[str, str]] = {
    "en_US": {
        "menuTitle": "Insert Image from Drive",
        "menuInsertImage": "Insert Image",
        "menuSetup": "Setup",
        "menuCheckSettings": "Check Settings",
        "errorInitialSettingNotComplete": (
            'Initial settings is not complete. Try running menu "Insert Image from Drive" > "Setup"'
        ),
        "alertMessageOnCompleteTitle": "Image Insert Complete",
        "alertMessageOnComplete": (
            "Reload the spreadsheet if the images are not visible.\n\n"
            "Getting image from Drive folder: {{getBlobsCompleteSec}} secs\n"
            "Whole process completed in {{insertImageCompleteSec}} secs\n\n"
        ),
        "alertMessageAdd": "{{key}}: {{value}} files with the same name\n",
        "errorMoreThanOneColumnSelected": "More than one column is selected. Check the selected range.",
        "errorMoreThanOneRowSelected": "More than one row is selected. Check the selected range.",
        "errorEmptyCellsSelected": "Empty cells. Check the selected range.",
        "errorUnknownError": (
            "Unknown Error:\n\nSelected Range: {{selectedRangeA1Notation}}\n"
            "options.selectionVertical = {{optionsSelectionVertical}}\n"
            "rangeNumRows = {{rangeNumRows}}\nrangeNumColumns = {{rangeNumColumns}}"
        ),
        "errorExistingContentInInsertCellRange": "Existing Content in Insert Cell Range: Check the selected range.",
        "errorDestinationOutOfBounds": (
            "The cells to insert the images into are outside the sheet ({{destinationA1Notation}}). "
            "Check the selected range and insertPosNext."
        ),
        "alertAlreadySetupMessage": (
            "Initial settings are already complete. Do you want to overwrite the settings?\n\n"
        ),
        "promptCurrentValue": "\n\nCurrent Value: {{value}}",
        "errorCanceled": "Canceled.",
        "promptFolderId": (
            "Google Drive folder ID to get the images from. "
            "Enter \"root\" if you want to designated your Google Drive's root folder."
        ),
        "promptFileExt": 'File extension of the image file(s) without the period. e.g., NOT ".jpg" but "jpg"',
        "promptSelectionVertical": (
            'selectionVertical: Enter "true" or "false". When true, the script will assume that '
            "the cells are selected vertically, i.e., in a single column."
        ),
        "promptInsertPosNext": (
            'insertPosNext: Enter "true" or "false". When true, the images will be inserted in the '
            "next row or column, depending on the value of selectionVertical."
        ),
        "alertSetupComplete": "Complete: setup of script properties",
        "alertCurrentSettingsTitle": "Current Settings",
        "errorUnexpected": "Unexpected error:\n\n{{trace}}",
    },
    "ja_JP": {
        "menuTitle": "Googleドライブから画像挿入",
        "menuInsertImage": "画像挿入",
        "menuSetup": "初期設定",
        "menuCheckSettings": "設定確認",
        "errorInitialSettingNotComplete": (
            "初期設定が完了していません。メニュー「Googleドライブから画像挿入」から「初期設定」を実行してください。"
        ),
        "alertMessageOnCompleteTitle": "画像挿入 完了",
        "alertMessageOnComplete": (
            "挿入された画像が見えない場合は、スプレッドシートのウェブページを更新してください。\n\n"
            "Googleドライブからの画像取得：{{getBlobsCompleteSec}}秒\n"
            "処理全体は{{insertImageCompleteSec}}秒で完了\n\n"
        ),
        "alertMessageAdd": "{{key}}: 同じ名前の画像ファイルが{{value}}個、見つかりました。\n",
        "errorMoreThanOneColumnSelected": "複数の列が選択されています。選択範囲をご確認ください。",
        "errorMoreThanOneRowSelected": "複数の行が選択されています。選択範囲をご確認ください。",
        "errorEmptyCellsSelected": "選択範囲が空白です。ご確認ください。",
        "errorUnknownError": (
            "不明なエラー：\n\n選択範囲：{{selectedRangeA1Notation}}\n"
            "options.selectionVertical = {{optionsSelectionVertical}}\n"
            "rangeNumRows = {{rangeNumRows}}\nrangeNumColumns = {{rangeNumColumns}}"
        ),
        "errorExistingContentInInsertCellRange": (
            "処理が中断されました。\n画像を挿入する予定の範囲にデータが存在します。範囲をご確認ください。"
        ),
        "errorDestinationOutOfBounds": (
            "画像を挿入する予定の範囲（{{destinationA1Notation}}）がシートの外側です。"
            "選択範囲とinsertPosNextをご確認ください。"
        ),
        "alertAlreadySetupMessage": "初期設定はすでに完了しています。既存の設定を上書きしますか？\n\n",
        "promptCurrentValue": "\n\n現在の値: {{value}}",
        "errorCanceled": "キャンセルされました。",
        "promptFolderId": (
            "画像が保存されているGoogleドライブのフォルダID。「マイドライブ」直下を指定したい場合は「root」と入力してください。"
        ),
        "promptFileExt": "画像ファイルの拡張子。ピリオド（.）は除いてください。\n例）「jpg」→○、「.jpg」→×",
        "promptSelectionVertical": (
            "selectionVertical：選択範囲の縦横方向を指定。「true」（縦方向）または「false」（横方向）を入力。"
        ),
        "promptInsertPosNext": (
            "insertPosNext：画像を挿入する位置を指定。「true」（選択範囲の方向によって右列または下行）"
            "または「false」（選択範囲の方向によって左列または上行）を入力。"
        ),
        "alertSetupComplete": "設定完了。",
        "alertCurrentSettingsTitle": "現在の設定",
        "errorUnexpected": "予期しないエラー：\n\n{{trace}}",
    },
}


def resolve_locale(requested: str | None = None) -> str:
    """Pick the locale from an explicit value, the environment, or the default."""

    candidate = requested or os.getenv(LOCALE_ENV) or DEFAULT_LOCALE
    normalized = candidate.replace("-", "_")
    return normalized if normalized in MESSAGES else DEFAULT_LOCALE


def replace_placeholders(text: str, values: Mapping[str, Any]) -> str:
    """Replace every ``{{name}}`` occurrence with ``str(value)``."""

    for name, value in values.items():
        text = text.replace("{{" + name + "}}", str(value))
    return text


class LocalizedMessage:
    """Message table bound to one locale, falling back to ``en_US``."""

    def __init__(self, locale: str | None = DEFAULT_LOCALE) -> None:
        self.locale = locale if locale in MESSAGES else DEFAULT_LOCALE
        self.messages = MESSAGES[self.locale]

    def get(self, key: str) -> str:
        try:
            return self.messages[key]
        except KeyError:
            return MESSAGES[DEFAULT_LOCALE][key]

    def render(self, key: str, /, **values: Any) -> str:
        return replace_placeholders(self.get(key), values)

    def on_complete(self, fetch_seconds: float, total_seconds: float) -> str:
        return self.render(
            "alertMessageOnComplete",
            getBlobsCompleteSec=fetch_seconds,
            insertImageCompleteSec=total_seconds,
        )

    def duplicate_line(self, key: str, count: int) -> str:
        return self.render("alertMessageAdd", key=key, value=count)

    def unknown_error(self, a1_notation: str, vertical: bool, num_rows: int, num_columns: int) -> str:
        return self.render(
            "errorUnknownError",
            selectedRangeA1Notation=a1_notation,
            optionsSelectionVertical=str(vertical).lower(),
            rangeNumRows=num_rows,
            rangeNumColumns=num_columns,
        )

    def current_value(self, value: Any) -> str:
        return self.render("promptCurrentValue", value=value)


__all__ = [
    "DEFAULT_LOCALE",
    "LOCALE_ENV",
    "MESSAGES",
    "LocalizedMessage",
    "replace_placeholders",
    "resolve_locale",
]
