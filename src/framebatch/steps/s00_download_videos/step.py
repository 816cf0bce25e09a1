"""Step 00: Download videos listed in a URL file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import ClassVar

from framebatch.core.contracts import WorkItem
from framebatch.core.discovery import parse_url_list
from framebatch.core.scheduler import run_chunked
from framebatch.core.step_base import BaseStep
from framebatch.exceptions import FetchError
from framebatch.utils.naming import unique_names
from ._fetch import FetchResult, fetch, filename_from_url, ytdlp_available
from .config import DownloadVideosConfig
from .contracts import DownloadVideosInput, DownloadVideosOutput, FetchFailure

logger = logging.getLogger(__name__)


def _short(url: str, width: int = 60) -> str:
    return url if len(url) <= width else url[:width] + "..."


class DownloadVideosStep(BaseStep[DownloadVideosInput, DownloadVideosOutput, DownloadVideosConfig]):
    name: ClassVar[str] = "download_videos"
    input_type: ClassVar = DownloadVideosInput
    output_type: ClassVar = DownloadVideosOutput
    config_type: ClassVar = DownloadVideosConfig

    @property
    def download_dir(self) -> Path:
        if self.config.download_dir is not None:
            return Path(self.config.download_dir)
        return self.output_root.resolve().parent / "downloads"

    def validate_inputs(self, inputs: DownloadVideosInput) -> bool:
        if not inputs.url_file.is_file():
            logger.error(f"URL file not found: {inputs.url_file}")
            return False
        return True

    def run(self, inputs: DownloadVideosInput) -> DownloadVideosOutput:
        urls = parse_url_list(inputs.url_file)
        unique_urls = list(dict.fromkeys(urls))
        if len(unique_urls) < len(urls):
            logger.warning(f"Ignoring {len(urls) - len(unique_urls)} repeated URL(s)")
        urls = unique_urls
        download_dir = self.download_dir
        if not urls:
            logger.warning(f"No valid URLs found in {inputs.url_file}")
            return DownloadVideosOutput(download_dir=download_dir)

        download_dir.mkdir(parents=True, exist_ok=True)
        has_ytdlp = ytdlp_available()
        if not has_ytdlp:
            logger.warning("yt-dlp not found; only direct video URLs can be downloaded")
        logger.info(f"Found {len(urls)} URL(s) in {inputs.url_file.name}")

        # URLs with the same file name would otherwise share one local file
        names = dict(zip(urls, unique_names([filename_from_url(url) for url in urls])))

        def _fetch(url: str, _index: int) -> FetchResult | FetchFailure:
            try:
                return fetch(
                    url,
                    download_dir,
                    timeout=self.config.timeout,
                    has_ytdlp=has_ytdlp,
                    ytdlp_format=self.config.ytdlp_format,
                    name=names[url],
                )
            except (FetchError, OSError) as exc:
                return FetchFailure(url=url, error=str(exc))

        results = run_chunked(urls, _fetch, min(self.config.concurrency, len(urls)), label="Download")

        output = DownloadVideosOutput(download_dir=download_dir)
        for url, result in zip(urls, results):
            if isinstance(result, FetchFailure):
                logger.warning(f"Failed: {_short(url)} ({result.error})")
                output.failures.append(result)
                continue
            if result.cached:
                output.cached += 1
                logger.info(f"Cached: {result.name}")
            else:
                output.downloaded += 1
                logger.info(f"Downloaded: {result.name}")
            output.items.append(
                WorkItem(
                    source_path=result.path.resolve(),
                    display_name=result.name,
                    size_bytes=result.path.stat().st_size if result.path.exists() else 0,
                    source_url=url,
                )
            )

        logger.info(
            f"Download summary: {output.downloaded} downloaded, {output.cached} cached, "
            f"{len(output.failures)} failed"
        )
        return output
