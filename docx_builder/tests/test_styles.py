"""Tests for style seeding, template import and style read-back."""
import tempfile
import unittest
import zipfile
from pathlib import Path
from xml.etree import ElementTree as ET

import docx
from docx.opc.constants import RELATIONSHIP_TYPE as RT
from docx.oxml.ns import qn
from lxml import etree

from docx_builder.builder.session import DocumentSession
from docx_builder.builder.styles import StyleCatalog, get_available_styles
from docx_builder.errors import MissingStylesError, PackageNotFoundError
from docx_builder.model.style_model import StyleDefinition
from docx_builder.reader.docx_loader import DocxPackage
from docx_builder.reader.rels_parser import RELTYPE_FONT_TABLE, RELTYPE_NUMBERING, RELTYPE_THEME
from docx_builder.reader.styles_reader import StylesReader
from docx_builder.utils.xml_utils import qualify


def _save_template_without_styles(path: Path) -> None:
    template = docx.Document()
    for r_id, rel in list(template.part.rels.items()):
        if rel.reltype == RT.STYLES:
            template.part.drop_rel(r_id)
    template.save(str(path))


def _mark_numbering(root) -> None:
    etree.SubElement(root, qn("w:abstractNum"), {qn("w:abstractNumId"): "917"})


def _mark_theme(root) -> None:
    root.set("name", "Marker Theme")


def _mark_font_table(root) -> None:
    etree.SubElement(root, qn("w:font"), {qn("w:name"): "Marker Sans"})


def _save_marked_template(path: Path) -> None:
    """Save a template whose numbering, theme and font table carry recognisable values."""
    docx.Document().save(str(path))
    package = DocxPackage.load(path)
    markers = {}
    for reltype, mark in (
        (RELTYPE_NUMBERING, _mark_numbering),
        (RELTYPE_THEME, _mark_theme),
        (RELTYPE_FONT_TABLE, _mark_font_table),
    ):
        target = package.relationships.target_of(package.document_part, reltype)
        assert target is not None, reltype
        markers[target] = mark

    with zipfile.ZipFile(path) as archive:
        parts = [(info, archive.read(info.filename)) for info in archive.infolist()]
    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as archive:
        for info, data in parts:
            mark = markers.get(info.filename)
            if mark is not None:
                root = etree.fromstring(data)
                mark(root)
                data = etree.tostring(root, xml_declaration=True, encoding="UTF-8", standalone=True)
            archive.writestr(info.filename, data)


class StyleCatalogTest(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp_dir = Path(self._tmp.name)
        self.session = DocumentSession.create()
        self.catalog = StyleCatalog(self.session)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_new_session_has_exactly_the_default_styles(self) -> None:
        self.assertEqual(self.catalog.style_ids(), ["Normal", "Heading1", "Caption", "TableNormal"])

    def test_default_style_properties(self) -> None:
        styles = self.catalog.catalog()
        heading = styles.get("Heading1")
        assert heading is not None
        self.assertEqual(heading.name, "Heading 1")
        self.assertEqual(heading.based_on, "Normal")
        self.assertEqual(heading.next_style, "Normal")
        self.assertTrue(heading.bold)
        self.assertEqual(heading.font_size, 28)
        self.assertEqual(heading.color, "2E74B5")

        caption = styles.get("Caption")
        assert caption is not None
        self.assertTrue(caption.italic)
        self.assertEqual(caption.font_size, 20)
        self.assertEqual(caption.color, "5A5A5A")

        self.assertEqual(styles.default_for("paragraph").style_id, "Normal")
        self.assertEqual(styles.default_for("table").style_id, "TableNormal")

    def test_add_style_replaces_same_id(self) -> None:
        self.catalog.add_style(StyleDefinition(style_id="Caption", style_type="paragraph", name="Caption", bold=True))
        self.assertEqual(self.catalog.style_ids().count("Caption"), 1)
        self.assertEqual(len(self.catalog.style_ids()), 4)
        caption = self.catalog.catalog().get("Caption")
        assert caption is not None
        self.assertTrue(caption.bold)
        self.assertFalse(caption.italic)

    def test_template_import_replaces_styles_wholesale(self) -> None:
        template_path = self.tmp_dir / "template.docx"
        template = docx.Document()
        template.save(str(template_path))
        expected = list(StylesReader.from_bytes(template.part.part_related_by(RT.STYLES).blob).parse().all())

        self.catalog.import_styles_from(template_path)

        self.assertEqual(self.catalog.style_ids(), expected)
        self.assertIn("Title", self.catalog.style_ids())
        style_rels = [rel for rel in self.session.part.rels.values() if rel.reltype == RT.STYLES]
        self.assertEqual(len(style_rels), 1)

    def test_template_import_survives_save(self) -> None:
        template_path = self.tmp_dir / "template.docx"
        docx.Document().save(str(template_path))
        self.catalog.import_styles_from(template_path)

        output = self.tmp_dir / "out.docx"
        self.session.save(output)
        self.assertIn("Title", get_available_styles(output))

    def test_template_import_clones_numbering_theme_and_fonts(self) -> None:
        template_path = self.tmp_dir / "marked.docx"
        _save_marked_template(template_path)
        self.catalog.import_styles_from(template_path)

        output = self.tmp_dir / "marked_out.docx"
        self.session.save(output)
        package = DocxPackage.load(output)

        assert package.numbering_xml is not None
        abstract_ids = [
            el.get(qualify("w:abstractNumId")) for el in package.numbering_xml.getroot().iter(qualify("w:abstractNum"))
        ]
        self.assertIn("917", abstract_ids)

        assert package.theme_xml is not None
        self.assertEqual(package.theme_xml.getroot().get("name"), "Marker Theme")

        assert package.font_table_xml is not None
        font_names = [el.get(qualify("w:name")) for el in package.font_table_xml.getroot().iter(qualify("w:font"))]
        self.assertIn("Marker Sans", font_names)

        for reltype in (RT.NUMBERING, RT.THEME, RT.FONT_TABLE):
            rels = [rel for rel in self.session.part.rels.values() if rel.reltype == reltype]
            self.assertEqual(len(rels), 1)

    def test_template_without_styles(self) -> None:
        template_path = self.tmp_dir / "bare.docx"
        _save_template_without_styles(template_path)
        with self.assertRaises(MissingStylesError):
            self.catalog.import_styles_from(template_path)
        self.assertEqual(len(self.catalog.style_ids()), 4)

    def test_missing_template(self) -> None:
        with self.assertRaises(PackageNotFoundError):
            self.catalog.import_styles_from(self.tmp_dir / "nowhere.docx")

    def test_open_seeds_styles_when_package_has_none(self) -> None:
        path = self.tmp_dir / "bare.docx"
        _save_template_without_styles(path)
        session = DocumentSession.open(path)
        self.assertEqual(StyleCatalog(session).style_ids(), ["Normal", "Heading1", "Caption", "TableNormal"])

    def test_available_styles_maps_ids_to_names(self) -> None:
        output = self.tmp_dir / "styles.docx"
        self.session.save(output)
        self.assertEqual(
            get_available_styles(output),
            {"Normal": "Normal", "Heading1": "Heading 1", "Caption": "Caption", "TableNormal": "Normal Table"},
        )


class StylesReaderTest(unittest.TestCase):
    def test_toggles_and_shading(self) -> None:
        xml = """
        <w:styles xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">
          <w:style w:type="character" w:styleId="Strong">
            <w:name w:val="Strong"/>
            <w:rPr><w:b/><w:i w:val="0"/><w:shd w:val="clear" w:color="auto" w:fill="FFFF00"/></w:rPr>
          </w:style>
          <w:style w:type="paragraph" w:styleId="Derived">
            <w:basedOn w:val="Strong"/>
          </w:style>
          <w:style w:type="paragraph"><w:name w:val="No id"/></w:style>
        </w:styles>
        """
        catalog = StylesReader(ET.ElementTree(ET.fromstring(xml))).parse()
        self.assertEqual(len(catalog), 2)
        strong = catalog.get("Strong")
        assert strong is not None
        self.assertTrue(strong.bold)
        self.assertFalse(strong.italic)
        self.assertEqual(strong.shading, "FFFF00")

        derived = catalog.get("Derived")
        assert derived is not None
        self.assertEqual(derived.based_on, "Strong")
        self.assertFalse(derived.bold)
        self.assertEqual(catalog.names(), {"Strong": "Strong"})


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
