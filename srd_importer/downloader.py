"""
SRD Importer - SRDファイルのダウンロード

責務:
  - AIRACサイクルに対応するダウンロードURLの組み立て
  - 取り込み済みサイクルとの比較（最新ならHTTP通信をしない）
  - aiohttp による非同期ダウンロードと作業ディレクトリへの保存

保存手順:
  一時ファイルへストリーム書き込み → 完了後に ukcp-srd-import-loaded-download.xlsx へ置換。
  途中で失敗しても前回のダウンロードファイルは壊れない。
"""
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

import aiohttp

from airac import AiracCycle
from errors import DownloadError, UpToDateError
from loaded_cycle import LoadedCycle

logger = logging.getLogger(__name__)

DOWNLOAD_URL_TEMPLATE = (
    "https://www.nm.eurocontrol.int/RAD/additional doc/external_links/"
    "uk_srd/UK_Ireland_SRD_{ident}_notes.xlsx"
)
LATEST_DOWNLOAD_FILENAME = "ukcp-srd-import-loaded-download.xlsx"
REQUEST_TIMEOUT = 120            # HTTP要求タイムアウト（秒）
CHUNK_SIZE = 64 * 1024

HEADERS = {
    "User-Agent": "ukcp-srd-import/1.0",
    "Accept": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet, */*",
}


def download_url(cycle: AiracCycle) -> str:
    return DOWNLOAD_URL_TEMPLATE.format(ident=cycle.ident)


class SrdDownloader:
    def __init__(
        self,
        cycle: AiracCycle,
        loaded: LoadedCycle,
        file_dir,
        url: Optional[str] = None,
    ):
        self._cycle = cycle
        self._loaded = loaded
        self._file_dir = Path(file_dir)
        self._url = url or download_url(cycle)

    @property
    def latest_file_location(self) -> Path:
        return self._file_dir / LATEST_DOWNLOAD_FILENAME

    async def download(self, force: bool = False, session: Optional[aiohttp.ClientSession] = None):
        """
        SRDファイルを取得して保存する。
        - 取り込み済みサイクルと同じ & force なし → UpToDateError（通信しない）
        - HTTP 200 以外 → DownloadError
        """
        logger.info(f"取り込み済みサイクル: {self._loaded.ident or '(なし)'}")
        logger.info(f"最新サイクル: {self._cycle.ident}")

        if self._loaded.is_(self._cycle.ident) and not force:
            raise UpToDateError(f"SRD is up to date (cycle {self._cycle.ident})")

        if session is None:
            timeout = aiohttp.ClientTimeout(total=REQUEST_TIMEOUT)
            async with aiohttp.ClientSession(timeout=timeout) as own_session:
                await self._fetch(own_session)
        else:
            await self._fetch(session)

        logger.info(f"サイクル {self._cycle.ident} のダウンロード完了: {self.latest_file_location}")

    async def _fetch(self, session: aiohttp.ClientSession):
        logger.info(f"ダウンロード開始: {self._url}")
        async with session.get(self._url, headers=HEADERS) as resp:
            if resp.status != 200:
                raise DownloadError(self._url, resp.status)

            self._file_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix="ukcp-srd-import-download", dir=self._file_dir,
            )
            try:
                with os.fdopen(fd, "wb") as tmp:
                    async for chunk in resp.content.iter_chunked(CHUNK_SIZE):
                        tmp.write(chunk)
                os.replace(tmp_name, self.latest_file_location)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.remove(tmp_name)
                raise
