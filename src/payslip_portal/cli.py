from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Iterable, List, Optional, Set

import typer
from rich.console import Console
from rich.table import Table

from . import config
from .field_extraction import FieldExtractor
from .logging_config import setup_logging
from .models.enums import QueueStatus
from .models.extraction import KnownEmployee
from .models.internal import QueuedDocument
from .services.upload_queue import UploadQueue
from .text_extraction import PyMuPDFTextLayerReader, extract_document_text

app = typer.Typer(help="Payslip portal tools: PDF field pre-fill and local API server.")
console = Console()


def _iter_pdfs(inputs: Iterable[str]) -> Iterable[Path]:
    """Expand provided paths, directories, or glob patterns into PDF files."""

    seen: Set[Path] = set()
    for raw in inputs:
        path = Path(raw)

        # Glob pattern expansion (e.g., payslips/**/*.pdf)
        if any(char in raw for char in ["*", "?"]):
            for match in sorted(path.parent.glob(path.name)):
                if match.is_file() and match.suffix.lower() == ".pdf" and match not in seen:
                    seen.add(match)
                    yield match
            continue

        if path.is_dir():
            for match in sorted(path.rglob("*.pdf")):
                if match not in seen:
                    seen.add(match)
                    yield match
            continue

        if path not in seen:
            seen.add(path)
            yield path


def _known_employees(names: List[str]) -> List[KnownEmployee]:
    return [KnownEmployee(id=f"emp-{idx:03d}", display_name=name) for idx, name in enumerate(names, start=1)]


def _render_table(items: List[QueuedDocument], employees: List[KnownEmployee]) -> Table:
    names = {e.id: e.display_name for e in employees}
    table = Table(title="Upload review")
    for column in ("File", "Status", "Title", "Amount", "Period", "Employee", "Auto-filled"):
        table.add_column(column)
    for item in items:
        style = "red" if item.status == QueueStatus.ERROR else None
        table.add_row(
            item.file_name,
            item.status.value,
            item.title,
            item.amount or "-",
            item.period or "-",
            names.get(item.selected_user_id, "-"),
            ", ".join(f.value for f in item.extracted_fields),
            style=style,
        )
    return table


def _print_status(item: QueuedDocument) -> None:
    console.print(f"[cyan]{item.status.value}[/cyan] {item.file_name}")


@app.command()
def extract(
    paths: List[str] = typer.Argument(
        ...,
        help="PDF file(s), directory/directories, or glob patterns (e.g., payslips/**/*.pdf)",
    ),
    employee: List[str] = typer.Option(
        [], "--employee", "-e", help="Known employee display name; repeat for several."
    ),
    out: Optional[Path] = typer.Option(None, help="Write results as JSON to this file."),
    settle: float = typer.Option(0.0, help="Pause between files, in seconds."),
    debug: bool = False,
) -> None:
    """
    Pre-fill review fields for each PDF, one file at a time.

    Files that cannot be read still get a title and are flagged in the table.
    """

    setup_logging(level="DEBUG" if debug else config.LOG_LEVEL)
    targets = list(_iter_pdfs(paths))
    if not targets:
        console.print("[yellow]No PDFs matched pattern; nothing to do.[/yellow]")
        raise typer.Exit(code=0)

    employees = _known_employees(employee)
    queue = UploadQueue(
        FieldExtractor(PyMuPDFTextLayerReader(max_pages=config.MAX_PAGES), max_pages=config.MAX_PAGES),
        settle_sec=settle,
        listener=_print_status if debug else None,
    )
    queue.set_known_employees(employees)

    files = []
    for pdf in targets:
        try:
            files.append((pdf.name, pdf.read_bytes(), "application/pdf"))
        except OSError as exc:
            console.print(f"[red]Cannot read[/red] {pdf}: {exc}")
    if not files:
        raise typer.Exit(code=1)
    queue.add_files(files)
    items = asyncio.run(queue.run())

    console.print(_render_table(items, employees))
    if out is not None:
        out.parent.mkdir(parents=True, exist_ok=True)
        payload = [item.model_dump(mode="json") for item in items]
        out.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        console.print(f"[green]Wrote[/green] {out}")


@app.command()
def text(
    pdf_path: Path,
    max_pages: int = typer.Option(config.MAX_PAGES, help="Number of leading pages to read."),
) -> None:
    """Print the flattened reading-order text of a PDF."""

    document = extract_document_text(pdf_path.read_bytes(), max_pages=max_pages)
    for idx, page in enumerate(document.pages, start=1):
        console.rule(f"page {idx}")
        console.print(page, markup=False)


@app.command()
def serve(
    host: str = typer.Option(config.HOST),
    port: int = typer.Option(config.PORT),
) -> None:
    """Run the HTTP API with uvicorn."""

    import uvicorn

    uvicorn.run("payslip_portal.api.main:app", host=host, port=port, reload=False)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
