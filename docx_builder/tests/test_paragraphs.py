"""Tests for paragraph, caption and table-of-contents construction."""
import unittest

from docx.oxml.ns import qn

from docx_builder.builder.paragraphs import ParagraphBuilder, make_field_runs
from docx_builder.builder.session import DocumentSession
from docx_builder.model.enums import Justification


def run_kinds(p):
    """Classify each run of a paragraph as text, instr or a field-char type."""
    kinds = []
    for r in p.findall(qn("w:r")):
        fld_char = r.find(qn("w:fldChar"))
        if fld_char is not None:
            kinds.append(fld_char.get(qn("w:fldCharType")))
        elif r.find(qn("w:instrText")) is not None:
            kinds.append("instr")
        else:
            kinds.append("text")
    return kinds


class ParagraphBuilderTest(unittest.TestCase):
    def setUp(self) -> None:
        self.session = DocumentSession.create()
        self.paragraphs = ParagraphBuilder(self.session)

    def test_plain_paragraph(self) -> None:
        paragraph = self.paragraphs.add_paragraph("Hello")
        self.assertEqual(paragraph.text, "Hello")
        self.assertIsNone(paragraph._p.find(qn("w:pPr")))
        self.assertEqual(self.session.body[-1].tag, qn("w:sectPr"))

    def test_style_comes_before_justification(self) -> None:
        paragraph = self.paragraphs.add_paragraph("Title", "Heading1", Justification.CENTER)
        p_pr = paragraph._p.find(qn("w:pPr"))
        self.assertEqual([child.tag for child in p_pr], [qn("w:pStyle"), qn("w:jc")])
        self.assertEqual(p_pr.find(qn("w:pStyle")).get(qn("w:val")), "Heading1")
        self.assertEqual(p_pr.find(qn("w:jc")).get(qn("w:val")), "center")

    def test_surrounding_whitespace_is_preserved(self) -> None:
        paragraph = self.paragraphs.add_paragraph("  indented")
        t = paragraph._p.find(qn("w:r")).find(qn("w:t"))
        self.assertEqual(t.get(qn("xml:space")), "preserve")
        plain = self.paragraphs.add_paragraph("plain")
        self.assertIsNone(plain._p.find(qn("w:r")).find(qn("w:t")).get(qn("xml:space")))

    def test_caption_run_order(self) -> None:
        paragraph = self.paragraphs.add_caption("Sample Data Table", "Table")
        p = paragraph._p
        self.assertEqual(run_kinds(p), ["text", "begin", "instr", "end", "text"])
        self.assertEqual(p.find(qn("w:pPr")).find(qn("w:pStyle")).get(qn("w:val")), "Caption")

        runs = p.findall(qn("w:r"))
        self.assertEqual(runs[0].find(qn("w:t")).text, "Table ")
        self.assertEqual(runs[2].find(qn("w:instrText")).text, " SEQ Table \\* ARABIC ")
        self.assertEqual(runs[4].find(qn("w:t")).text, ": Sample Data Table")

    def test_table_of_contents(self) -> None:
        before = len(self.session.body.findall(qn("w:p")))
        paragraph = self.paragraphs.add_table_of_contents("Contents")
        body_paragraphs = self.session.body.findall(qn("w:p"))
        self.assertEqual(len(body_paragraphs), before + 2)

        title = body_paragraphs[-2]
        self.assertEqual(title.find(qn("w:pPr")).find(qn("w:pStyle")).get(qn("w:val")), "Heading1")
        self.assertIs(body_paragraphs[-1], paragraph._p)

        self.assertEqual(run_kinds(paragraph._p), ["begin", "instr", "separate", "text", "end"])
        runs = paragraph._p.findall(qn("w:r"))
        self.assertEqual(runs[1].find(qn("w:instrText")).text, ' TOC \\o "1-3" \\h \\z \\u ')
        self.assertIn("Update Field", runs[3].find(qn("w:t")).text)

    def test_field_runs_without_placeholder(self) -> None:
        runs = make_field_runs(" PAGE ")
        self.assertEqual(len(runs), 3)
        instr = runs[1].find(qn("w:instrText"))
        self.assertEqual(instr.get(qn("xml:space")), "preserve")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
