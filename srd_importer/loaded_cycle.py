"""
SRD Importer - 取り込み済みサイクルの記録

作業ディレクトリの ukcp-srd-import-loaded-cycle に、最後に取り込んだ
AIRACサイクルの識別子を1語だけ保存する。
"""
import logging
from pathlib import Path

from airac import AiracCycle

logger = logging.getLogger(__name__)

LOADED_CYCLE_FILENAME = "ukcp-srd-import-loaded-cycle"


class LoadedCycle:
    def __init__(self, directory):
        self._path = Path(directory) / LOADED_CYCLE_FILENAME
        self._path.touch(mode=0o600, exist_ok=True)
        words = self._path.read_text(encoding="utf-8").split()
        self._ident = words[0] if words else ""

    @property
    def ident(self) -> str:
        return self._ident

    @property
    def path(self) -> Path:
        return self._path

    def is_(self, ident: str) -> bool:
        return self._ident == ident

    def set(self, cycle: AiracCycle):
        """ファイルを切り詰めて識別子を書き直す"""
        self._path.write_text(cycle.ident, encoding="utf-8")
        self._ident = cycle.ident
        logger.debug(f"取り込み済みサイクルを記録: {cycle.ident} → {self._path}")
