"""
SRD Importer - 例外定義

責務:
  - 行単位のパースエラー（イテレータの (record, error) ペアで返却される）
  - 構築時・設定時のエラー（raise される）
"""
from typing import List, Optional


class SrdError(Exception):
    """SRD取り込みに関する全エラーの基底クラス"""


# ═══════════════════════════════════════
# 行・ブロック単位のエラー
# ═══════════════════════════════════════

class MalformedRowError(SrdError):
    """列数が不足している行"""

    def __init__(self, row: List[str], expected: int = 7):
        self.row = row
        self.expected = expected
        super().__init__(
            f"expected {expected} or {expected + 1} fields, got {len(row)}, row: {row}"
        )


class MissingFieldError(SrdError):
    """必須セルが空の行"""

    def __init__(self, field: str, row: List[str]):
        self.field = field
        self.row = row
        super().__init__(f"missing value for {field}, row: {row}")


class InvalidNumberError(SrdError):
    """飛行高度・ノート番号が数値として解釈できない"""

    def __init__(self, token: str, row: List[str], field: Optional[str] = None):
        self.token = token
        self.row = row
        self.field = field
        where = f" in {field}" if field else ""
        super().__init__(f"invalid number {token!r}{where}, row: {row}")


class InvalidNoteIdError(SrdError):
    """ノートのヘッダ行からIDを取得できない"""

    def __init__(self, header: str):
        self.header = header
        super().__init__(f"expected note id, got {header!r}")


class MissingNoteTextError(SrdError):
    """本文が1行もないノート"""

    def __init__(self, rows: List[List[str]]):
        self.rows = rows
        super().__init__(f"expected note text, got {rows}")


# ═══════════════════════════════════════
# 構築時・実行時のエラー
# ═══════════════════════════════════════

class SheetNotFoundError(SrdError):
    """ワークブックに必要なシートがない"""

    def __init__(self, name: str, index: int):
        self.name = name
        self.index = index
        super().__init__(f"{name} sheet, {index} not found")


class InvalidAiracIdentError(SrdError, ValueError):
    """AIRACサイクル識別子の形式不正"""

    def __init__(self, ident: str):
        self.ident = ident
        super().__init__(f"invalid AIRAC cycle identifier: {ident!r}")


class UnknownFileExtensionError(SrdError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"unknown file extension, must be .xls or .xlsx: {path}")


class UpToDateError(SrdError):
    """読み込み済みサイクルが最新（強制ダウンロードなし）"""


class DownloadError(SrdError):
    def __init__(self, url: str, status: int):
        self.url = url
        self.status = status
        super().__init__(f"unable to download SRD from {url}, status code was {status}")


class AlreadyRunningError(SrdError):
    """別プロセスがロックを保持している"""


class ConfigError(SrdError):
    """環境変数の不足・不正"""


class InvalidWorkbookError(SrdError):
    """ワークブックとして開けないファイル"""

    def __init__(self, path: str, reason: str):
        self.path = path
        super().__init__(f"failed to open workbook {path}: {reason}")
