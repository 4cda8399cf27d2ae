"""Entry-point for the document generation demo and package inspection."""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from docx_builder.builder.images import ImageEmbedder
from docx_builder.builder.math import MathBuilder, integral_nodes
from docx_builder.builder.paragraphs import ParagraphBuilder
from docx_builder.builder.session import DocumentSession
from docx_builder.builder.styles import StyleCatalog, get_available_styles
from docx_builder.builder.tables import TableBuilder
from docx_builder.model.enums import TableAlignment
from docx_builder.model.math_model import Fraction, MathRun, Radical, SuperScript
from docx_builder.model.elements import DocumentOutline, ParagraphElement
from docx_builder.reader.document_reader import DocumentReader
from docx_builder.reader.docx_loader import DocxPackage
from docx_builder.utils.debug import DebugDumper
from docx_builder.utils.logger import get_logger, set_verbosity

LOGGER = get_logger(__name__)

DEFAULT_OUTPUT = "WordDocumentDemo.docx"


def build_demo_document(output: Path, template: Optional[Path] = None, image: Optional[Path] = None) -> Path:
    """Generate the demo document: headings, TOC, a table, equations and an optional image."""
    output = Path(output)
    with DocumentSession.create(output) as session:
        if template is not None:
            StyleCatalog(session).import_styles_from(template)

        paragraphs = ParagraphBuilder(session)
        tables = TableBuilder(session)
        math = MathBuilder(session)
        heading = session.config.heading_style_id

        paragraphs.add_paragraph("Word Document Generation Demo", heading)
        paragraphs.add_table_of_contents("Table of Contents")

        paragraphs.add_paragraph("1. Tables Example", heading)
        table = tables.create_table(3, 3)
        for col in range(3):
            tables.set_cell_text(table, 0, col, f"Header {col + 1}")
        for row in range(1, 3):
            for col in range(3):
                tables.set_cell_text(table, row, col, f"Row {row}, Cell {col + 1}")
        tables.set_header_row(table, 0, "FFFFFF", "2E74B5")
        tables.apply_alternating_row_shading(table, "FFFFFF", "F2F2F2", header_row_color="2E74B5")
        tables.set_table_alignment(table, TableAlignment.CENTER)
        paragraphs.add_caption("Sample Data Table", "Table")
        paragraphs.add_paragraph("This is a paragraph demonstrating the text content generation.")

        paragraphs.add_paragraph("2. Math Formula Example", heading)
        math.add_equation("x = (-b ± √(b² - 4ac)) / (2a)")
        paragraphs.add_caption("Quadratic Formula", "Equation")
        math.add_fraction("a + b", "c")
        math.add_radical("x² + y²")
        math.add_radical("27", degree="3")
        math.add_superscript("e", "iπ")
        math.add_subscript("a", "n+1")
        math.add_expression(MathRun("E = "), Fraction(MathRun("m"), SuperScript(MathRun("c"), MathRun("-2"))))
        math.add_integral("f(x) dx", lower="0", upper="∞")
        math.add_expression(*integral_nodes(SuperScript(MathRun("x"), MathRun("2")), lower="a", upper="b"))
        math.add_parentheses(Radical(MathRun("2")), "[", "]")
        math.add_matrix(2, 2, [["a", "b"], ["c", "d"]])
        paragraphs.add_caption("Matrix", "Equation")

        paragraphs.add_paragraph("3. Images Example", heading)
        if image is not None:
            ImageEmbedder(session).insert_image(image, 400, 300)
            paragraphs.add_caption("Sample Image", "Figure")
        else:
            paragraphs.add_paragraph("No image path was given, so the image section is empty.")
    return output


def read_outline(path: Path) -> DocumentOutline:
    return DocumentReader(DocxPackage.load(Path(path))).parse()


def describe_outline(outline: DocumentOutline) -> List[str]:
    lines: List[str] = []
    for index, block in enumerate(outline.blocks):
        if isinstance(block, ParagraphElement):
            label = block.style_id or "-"
            if block.has_math:
                lines.append(f"{index:3d} math      [{label}] {block.math_text}")
            elif block.field_codes:
                lines.append(f"{index:3d} field     [{label}] {' | '.join(code.strip() for code in block.field_codes)}")
            else:
                lines.append(f"{index:3d} paragraph [{label}] {block.text}")
        else:
            widths = ",".join(str(len(row.cells)) for row in block.rows)
            lines.append(f"{index:3d} table     {len(block.rows)} rows, cells per row {widths}")
    return lines


def _run_demo(args: argparse.Namespace) -> int:
    output = build_demo_document(
        Path(args.output),
        template=Path(args.template) if args.template else None,
        image=Path(args.image) if args.image else None,
    )
    print(f"Document created successfully: {output}")
    print("Open the document in Word and update fields to populate the table of contents.")
    return 0


def _run_inspect(args: argparse.Namespace) -> int:
    path = Path(args.docx_file)
    if args.styles:
        for style_id, name in sorted(get_available_styles(path).items()):
            print(f"{style_id}: {name}")
        return 0

    package = DocxPackage.load(path)
    reader = DocumentReader(package)
    outline = reader.parse()
    if args.json:
        print(DebugDumper().to_json(outline))
    else:
        print("\n".join(describe_outline(outline)))

    dangling = reader.dangling_relationships()
    if dangling:
        LOGGER.warning("Dangling relationship ids: %s", ", ".join(dangling))
        return 2
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="docx-builder", description="Generate and inspect .docx documents")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    demo = subparsers.add_parser("demo", help="Write the demo document")
    demo.add_argument("-o", "--output", default=DEFAULT_OUTPUT, help="Output .docx path")
    demo.add_argument("--template", help="Template .docx whose styles are imported")
    demo.add_argument("--image", help="Image file to embed in the images section")
    demo.set_defaults(handler=_run_demo)

    inspect = subparsers.add_parser("inspect", help="Print the block outline of a .docx file")
    inspect.add_argument("docx_file", help="Path to the .docx file")
    inspect.add_argument("--json", action="store_true", help="Emit the outline as JSON")
    inspect.add_argument("--styles", action="store_true", help="List style ids and names instead")
    inspect.set_defaults(handler=_run_inspect)
    return parser


def cli(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    set_verbosity(args.verbose)
    try:
        return args.handler(args)
    except Exception as exc:  # noqa: BLE001
        LOGGER.debug("Command failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(cli())
