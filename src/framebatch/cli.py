"""CLI entry point for framebatch.

Usage:
    framebatch extract -i videos/ -o frames/          # Local videos
    framebatch extract -u urls.txt -o frames/ --fps 1  # Download, then extract
    framebatch upload frames/ --drive-credentials sa.json --drive-folder ID
    framebatch run                                     # YAML-driven pipeline
    framebatch run-step extract_frames -i '{"items": []}'
    framebatch info                                    # Show pipeline info
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from framebatch.core.contracts import WorkItem
from framebatch.core.discovery import DEFAULT_EXTENSIONS, parse_url_list
from framebatch.core.logging import setup_logging
from framebatch.core.pipeline_runner import build_step, load_pipeline_config, run_pipeline
from framebatch.core.scheduler import resolve_concurrency
from framebatch.exceptions import ConfigError, FrameBatchError, ToolNotFoundError
from framebatch.steps.s00_download_videos.config import DownloadVideosConfig
from framebatch.steps.s00_download_videos.contracts import DownloadVideosInput
from framebatch.steps.s00_download_videos.step import DownloadVideosStep
from framebatch.steps.s00_download_videos._fetch import ytdlp_available
from framebatch.steps.s01_discover_videos.config import DiscoverVideosConfig
from framebatch.steps.s01_discover_videos.contracts import DiscoverVideosInput
from framebatch.steps.s01_discover_videos.step import DiscoverVideosStep
from framebatch.steps.s02_extract_frames.config import ExtractFramesConfig
from framebatch.steps.s02_extract_frames.contracts import ExtractFramesInput, ExtractFramesOutput
from framebatch.steps.s02_extract_frames.step import ExtractFramesStep
from framebatch.steps.s03_upload_frames.config import UploadFramesConfig
from framebatch.steps.s03_upload_frames.contracts import UploadFramesInput, UploadFramesOutput
from framebatch.steps.s03_upload_frames.step import UploadFramesStep
from framebatch.utils.ffmpeg import ffmpeg_available
from framebatch.utils.io import format_file_size
from framebatch.utils.report import (
    render_config,
    render_listing,
    render_outcome,
    render_summary,
    render_upload_summary,
)

app = typer.Typer(name="framebatch", help="Parallel batch video frame extraction")
console = Console()

DEFAULT_CONFIG = Path("configs/pipeline.yaml")


@contextmanager
def _fatal_errors() -> Iterator[None]:
    """Turn configuration and precondition errors into exit code 1."""
    try:
        yield
    except ValidationError as exc:
        console.print(f"[red]✖ Invalid configuration:[/red]\n{exc}", highlight=False)
        raise typer.Exit(1)
    except FrameBatchError as exc:
        console.print(f"[red]✖ Error: {exc}[/red]", highlight=False)
        raise typer.Exit(1)


def _log_level(log_level: str, quiet: bool, verbose: bool) -> str:
    if quiet:
        return "WARNING"
    if verbose and log_level.upper() == "INFO":
        return "DEBUG"
    return log_level


def _upload_step(
    output_root: Path,
    credentials: Path | None,
    folder_id: str | None,
    delete_after_upload: bool,
) -> UploadFramesStep | None:
    """Build the upload step, or None when Drive upload was not requested."""
    if credentials is None:
        if folder_id or delete_after_upload:
            raise ConfigError("--drive-credentials is required to upload to Google Drive")
        return None
    if not folder_id:
        raise ConfigError("--drive-folder is required when uploading to Google Drive")
    config = UploadFramesConfig(
        credentials_file=credentials,
        parent_folder_id=folder_id,
        delete_after_upload=delete_after_upload,
    )
    return UploadFramesStep(config=config, output_root=output_root)


def _run_upload(step: UploadFramesStep, output_root: Path) -> None:
    console.print("\n[blue]Uploading to Google Drive...[/blue]")
    output = step.execute(UploadFramesInput(frames_root=output_root))
    render_upload_summary(console, output.outcome, deleting=step.config.delete_after_upload)


@app.command()
def extract(
    output: Path = typer.Option(..., "--output", "-o", help="Output directory for frames"),
    input_dir: Optional[Path] = typer.Option(None, "--input", "-i", help="Directory of videos"),
    urls: Optional[Path] = typer.Option(None, "--urls", "-u", help="Text file of video URLs, one per line"),
    download_dir: Optional[Path] = typer.Option(
        None, "--download-dir", help="Where downloaded videos go (default: <output parent>/downloads)"
    ),
    quality: int = typer.Option(2, "--quality", "-q", help="PNG compression level (0=best, 9=fastest)"),
    pattern: str = typer.Option("frame_%06d.png", "--format", "-f", help="Frame filename pattern"),
    extensions: str = typer.Option(DEFAULT_EXTENSIONS, "--extensions", "-e", help="Comma-separated video extensions"),
    fps: Optional[float] = typer.Option(None, "--fps", help="Frames per second to extract (default: all)"),
    start: Optional[str] = typer.Option(None, "--start", help="Start time (seconds or HH:MM:SS)"),
    end: Optional[str] = typer.Option(None, "--end", help="End time (seconds or HH:MM:SS)"),
    concurrency: str = typer.Option("auto", "--concurrency", "-c", help="Parallel videos, or 'auto'"),
    force: bool = typer.Option(False, "--force", help="Re-extract videos that already have frames"),
    drive_credentials: Optional[Path] = typer.Option(
        None, "--drive-credentials", help="Service account JSON; enables Google Drive upload"
    ),
    drive_folder: Optional[str] = typer.Option(None, "--drive-folder", help="Google Drive parent folder ID"),
    delete_after_upload: bool = typer.Option(
        False, "--delete-after-upload", help="Delete local frames that were uploaded"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="List what would be processed and stop"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show extractor diagnostics"),
    quiet: bool = typer.Option(False, "--quiet", help="Only warnings and the final summary"),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level"),
) -> None:
    """Extract frames from local videos or from videos listed in a URL file."""
    setup_logging(_log_level(log_level, quiet, verbose))

    with _fatal_errors():
        if input_dir is None and urls is None:
            raise ConfigError("either --input or --urls must be provided")

        extract_config = ExtractFramesConfig(
            quality=quality,
            filename_pattern=pattern,
            start_time=start,
            end_time=end,
            fps=fps,
            force=force,
            verbose=verbose,
            concurrency=concurrency,
        )
        upload_step = _upload_step(output, drive_credentials, drive_folder, delete_after_upload)

        if not ffmpeg_available():
            raise ToolNotFoundError(
                "ffmpeg is not installed or not found in PATH "
                "(macOS: brew install ffmpeg, Debian/Ubuntu: sudo apt install ffmpeg)"
            )
        if not quiet:
            console.print("[green]✔ ffmpeg found[/green]")
        if urls is not None and not ytdlp_available():
            console.print("[yellow]⚠ yt-dlp not found (only direct video URLs supported)[/yellow]")

        output.mkdir(parents=True, exist_ok=True)

        if urls is not None:
            source_step = DownloadVideosStep(
                config=DownloadVideosConfig(download_dir=download_dir),
                output_root=output,
            )
            source_desc = {"URL file": urls, "Download dir": source_step.download_dir}
        else:
            source_step = DiscoverVideosStep(
                config=DiscoverVideosConfig(extensions=extensions),
                output_root=output,
            )
            source_desc = {
                "Input directory": input_dir,
                "Video extensions": ", ".join(source_step.config.extensions),
            }

        if not quiet:
            render_config(
                console,
                {
                    **source_desc,
                    "Output directory": output,
                    "Quality level": f"{quality} (0=best, 9=fastest)",
                    "Filename pattern": pattern,
                    "FPS": fps,
                    "Start time": start,
                    "End time": end,
                    "Concurrency": "auto (based on CPU cores)" if concurrency == "auto" else concurrency,
                    "Google Drive": f"folder {drive_folder}" if upload_step else None,
                    "Delete local": "yes (after upload)" if upload_step and delete_after_upload else None,
                },
                dry_run=dry_run,
            )

        if dry_run:
            _dry_run(urls, input_dir, source_step)
            return

        if urls is not None:
            console.print("[blue]Downloading videos from URLs...[/blue]")
            downloaded = source_step.execute(DownloadVideosInput(url_file=urls))
            items = downloaded.items
            if not items:
                console.print("[yellow]⚠ No videos were successfully downloaded[/yellow]")
                return
        else:
            items = source_step.execute(DiscoverVideosInput(input_dir=input_dir)).items
            if not items:
                console.print("[yellow]⚠ No video files found[/yellow]")
                return

        extract_step = ExtractFramesStep(config=extract_config, output_root=output)
        if not quiet:
            extract_step.on_outcome = lambda outcome: render_outcome(console, outcome, verbose)
            console.print(
                f"\n[blue]Extracting frames from {len(items)} video(s) "
                f"with concurrency {resolve_concurrency(concurrency, len(items))}...[/blue]"
            )
        result = extract_step.execute(ExtractFramesInput(items=items)).result
        render_summary(console, result)

        if upload_step is not None:
            _run_upload(upload_step, output)


def _dry_run(urls: Path | None, input_dir: Path | None, source_step) -> None:
    console.print("[yellow]⚠ Dry run mode - no downloads or extractions will occur[/yellow]")
    if urls is not None:
        entries = [u if len(u) <= 60 else u[:60] + "..." for u in parse_url_list(urls)]
        render_listing(console, "URLs to download:", entries)
        return
    items: list[WorkItem] = source_step.run(DiscoverVideosInput(input_dir=input_dir)).items
    render_listing(
        console,
        "Videos to process:",
        [f"{item.source_path.name} ({format_file_size(item.size_bytes)})" for item in items],
    )


@app.command()
def upload(
    frames_root: Path = typer.Argument(..., help="Directory holding one frames folder per video"),
    drive_credentials: Path = typer.Option(..., "--drive-credentials", help="Service account JSON"),
    drive_folder: str = typer.Option(..., "--drive-folder", help="Google Drive parent folder ID"),
    delete_after_upload: bool = typer.Option(
        False, "--delete-after-upload", help="Delete local frames that were uploaded"
    ),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level"),
) -> None:
    """Upload existing frame folders to Google Drive."""
    setup_logging(log_level)
    with _fatal_errors():
        step = _upload_step(frames_root, drive_credentials, drive_folder, delete_after_upload)
        _run_upload(step, frames_root)


@app.command()
def run(
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show extractor diagnostics"),
) -> None:
    """Run the full pipeline."""
    setup_logging()

    def _attach_progress(entry, step) -> None:
        if isinstance(step, ExtractFramesStep):
            step.on_outcome = lambda outcome: render_outcome(console, outcome, verbose)

    with _fatal_errors():
        results = run_pipeline(config, configure_step=_attach_progress)

    for output in results.values():
        if isinstance(output, ExtractFramesOutput):
            render_summary(console, output.result)
        elif isinstance(output, UploadFramesOutput) and output.enabled:
            render_upload_summary(console, output.outcome)


@app.command()
def run_step(
    step_name: str = typer.Argument(..., help="Step name (e.g. extract_frames)"),
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    input_json: str = typer.Option(None, "--input", "-i", help="Input as JSON string"),
) -> None:
    """Run a single pipeline step."""
    setup_logging()

    with _fatal_errors():
        pipeline_cfg = load_pipeline_config(config)
        entry = next((s for s in pipeline_cfg.steps if s.name == step_name), None)
        if entry is None:
            console.print(f"[red]Step '{step_name}' not found in pipeline config[/red]")
            raise typer.Exit(1)

        step_instance = build_step(entry, pipeline_cfg.output_dir, config_dir=config.parent)
        input_data = dict(entry.inputs)
        if input_json:
            try:
                input_data.update(json.loads(input_json))
            except json.JSONDecodeError as exc:
                raise ConfigError(f"--input is not valid JSON: {exc}") from exc

        missing = [name for name in step_instance.required_inputs() if name not in input_data]
        if missing:
            console.print(f"[yellow]Step '{step_name}' requires input fields: {missing}[/yellow]")
            console.print("[yellow]Use --input/-i with JSON string, e.g.:[/yellow]")
            console.print(f'  framebatch run-step {step_name} -i \'{{"{missing[0]}": "value"}}\'', markup=False)
            raise typer.Exit(1)

        console.print(f"[green]Running step: {step_name}[/green]")
        output = step_instance.execute(input_data)
    console.print("[green]Done. Output:[/green]")
    console.print_json(output.model_dump_json())


@app.command()
def info(config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path")) -> None:
    """Show pipeline steps and their status."""
    with _fatal_errors():
        pipeline_cfg = load_pipeline_config(config)
    table = Table(title=f"Pipeline: {pipeline_cfg.project_name}")
    table.add_column("#", style="dim")
    table.add_column("Step", style="cyan")
    table.add_column("Module", style="green")
    table.add_column("Config", style="dim")
    table.add_column("Enabled", style="yellow")
    table.add_column("Depends On", style="dim")

    for i, step in enumerate(pipeline_cfg.steps, 1):
        table.add_row(
            str(i),
            step.name,
            step.module,
            step.config_file or "-",
            "Y" if step.enabled else "N",
            ", ".join(step.depends_on) if step.depends_on else "-",
        )
    console.print(table)


if __name__ == "__main__":
    app()
