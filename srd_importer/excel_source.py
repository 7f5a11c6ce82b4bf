"""
SRD Importer - Excelワークブック読み込み

責務:
  - .xlsx を openpyxl（read_only）、.xls を xlrd で開き、
    シートの行を文字列セルのリストとして返す
  - シート番号 ↔ シート名の対応づけ

セル値の正規化（両形式共通）:
  - None → ""
  - 整数値の float（350.0）→ "350"
  - 行末の空セルは取り除く
"""
import logging
import zipfile
from pathlib import Path
from typing import Iterator, List

import openpyxl
import xlrd
from openpyxl.utils.exceptions import InvalidFileException

from errors import InvalidWorkbookError, SheetNotFoundError, UnknownFileExtensionError

logger = logging.getLogger(__name__)

SHEET_ROUTES = 1
SHEET_NOTES = 2

SHEET_NAMES = {
    SHEET_ROUTES: "Routes",
    SHEET_NOTES: "Notes",
}


def _cell_to_str(value) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _row_to_cells(values) -> List[str]:
    cells = [_cell_to_str(v) for v in values]
    while cells and cells[-1] == "":
        cells.pop()
    return cells


class _Workbook:
    """シート名の一覧と行の読み出しを形式ごとのサブクラスが提供する"""

    def __init__(self, path):
        self._path = Path(path)
        if not self._path.is_file():
            raise InvalidWorkbookError(str(self._path), "file not found")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def close(self):
        raise NotImplementedError

    def _sheet_names(self) -> List[str]:
        raise NotImplementedError

    def _sheet_values(self, name: str) -> Iterator:
        raise NotImplementedError

    def has_sheet(self, sheet: int) -> bool:
        name = SHEET_NAMES.get(sheet)
        return name is not None and name in self._sheet_names()

    def sheet_rows(self, sheet: int) -> Iterator[List[str]]:
        """
        シートの行を1行ずつ返す。呼び出すたびに先頭から読み直す。
        消費側が止めればそれ以降の行は読まない。
        """
        if not self.has_sheet(sheet):
            raise SheetNotFoundError(SHEET_NAMES.get(sheet, "Unknown"), sheet)

        for values in self._sheet_values(SHEET_NAMES[sheet]):
            yield _row_to_cells(values)


class ExcelWorkbook(_Workbook):
    """.xlsx（openpyxl、読み取り専用・計算済みの値）"""

    def __init__(self, path):
        super().__init__(path)
        try:
            self._workbook = openpyxl.load_workbook(
                str(self._path), read_only=True, data_only=True,
            )
        except (InvalidFileException, zipfile.BadZipFile, KeyError) as e:
            logger.error(f"ワークブックを開けません: {self._path}")
            raise InvalidWorkbookError(str(self._path), str(e))
        logger.debug(f"ワークブック読み込み: {self._path} (シート={self._workbook.sheetnames})")

    def close(self):
        self._workbook.close()

    def _sheet_names(self) -> List[str]:
        return self._workbook.sheetnames

    def _sheet_values(self, name: str) -> Iterator:
        return self._workbook[name].iter_rows(values_only=True)


class LegacyExcelWorkbook(_Workbook):
    """.xls（xlrd、シートは必要になった時点で読み込む）"""

    def __init__(self, path):
        super().__init__(path)
        try:
            self._book = xlrd.open_workbook(str(self._path), on_demand=True)
        except (xlrd.XLRDError, xlrd.compdoc.CompDocError) as e:
            logger.error(f"ワークブックを開けません: {self._path}")
            raise InvalidWorkbookError(str(self._path), str(e))
        logger.debug(f"ワークブック読み込み: {self._path} (シート={self._book.sheet_names()})")

    def close(self):
        self._book.release_resources()

    def _sheet_names(self) -> List[str]:
        return self._book.sheet_names()

    def _sheet_values(self, name: str) -> Iterator:
        sheet = self._book.sheet_by_name(name)
        for index in range(sheet.nrows):
            yield sheet.row_values(index)


READERS = {
    ".xlsx": ExcelWorkbook,
    ".xls": LegacyExcelWorkbook,
}


def open_workbook(path) -> _Workbook:
    """拡張子で読み込み方法を選ぶ（.xlsx / .xls）"""
    suffix = Path(path).suffix.lower()
    reader = READERS.get(suffix)
    if reader is None:
        logger.error(f"未対応の拡張子: {suffix}")
        raise UnknownFileExtensionError(str(path))
    return reader(path)
