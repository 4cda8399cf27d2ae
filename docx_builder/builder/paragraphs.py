"""Paragraph, run and field-code construction."""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.text.paragraph import Paragraph

from docx_builder.model.enums import Justification
from docx_builder.utils.logger import get_logger
from docx_builder.utils.xml_utils import replace_child

if TYPE_CHECKING:
    from docx_builder.builder.session import DocumentSession

LOGGER = get_logger(__name__)

# w:pPr children that follow w:pStyle / w:jc in the schema sequence.
_PSTYLE_SUCCESSORS = (
    "w:keepNext", "w:keepLines", "w:pageBreakBefore", "w:framePr", "w:widowControl",
    "w:numPr", "w:suppressLineNumbers", "w:pBdr", "w:shd", "w:tabs", "w:suppressAutoHyphens",
    "w:kinsoku", "w:wordWrap", "w:overflowPunct", "w:topLinePunct", "w:autoSpaceDE",
    "w:autoSpaceDN", "w:bidi", "w:adjustRightInd", "w:snapToGrid", "w:spacing", "w:ind",
    "w:contextualSpacing", "w:mirrorIndents", "w:suppressOverlap", "w:jc",
    "w:textDirection", "w:textAlignment", "w:textboxTightWrap", "w:outlineLvl",
    "w:divId", "w:cnfStyle", "w:rPr", "w:sectPr", "w:pPrChange",
)
_JC_SUCCESSORS = (
    "w:textDirection", "w:textAlignment", "w:textboxTightWrap", "w:outlineLvl",
    "w:divId", "w:cnfStyle", "w:rPr", "w:sectPr", "w:pPrChange",
)


def make_text_element(text: str):
    t = OxmlElement("w:t")
    t.text = text
    if text != text.strip():
        t.set(qn("xml:space"), "preserve")
    return t


def make_text_run(text: str):
    r = OxmlElement("w:r")
    r.append(make_text_element(text))
    return r


def make_paragraph(text: Optional[str] = None, style_id: Optional[str] = None, justification: Optional[Justification] = None):
    """Build a ``w:p`` holding a single text run."""
    p = OxmlElement("w:p")
    if style_id:
        set_paragraph_style(p, style_id)
    if justification is not None:
        set_justification(p, justification)
    if text is not None:
        p.append(make_text_run(text))
    return p


def get_or_add_ppr(p):
    p_pr = p.find(qn("w:pPr"))
    if p_pr is None:
        p_pr = OxmlElement("w:pPr")
        p.insert(0, p_pr)
    return p_pr


def set_paragraph_style(p, style_id: str) -> None:
    p_style = OxmlElement("w:pStyle", attrs={qn("w:val"): style_id})
    replace_child(get_or_add_ppr(p), p_style, _PSTYLE_SUCCESSORS)


def set_justification(p, justification: Justification) -> None:
    jc = OxmlElement("w:jc", attrs={qn("w:val"): justification.value})
    replace_child(get_or_add_ppr(p), jc, _JC_SUCCESSORS)


def make_field_char_run(char_type: str):
    r = OxmlElement("w:r")
    r.append(OxmlElement("w:fldChar", attrs={qn("w:fldCharType"): char_type}))
    return r


def make_instruction_run(code: str):
    r = OxmlElement("w:r")
    instr = OxmlElement("w:instrText")
    instr.set(qn("xml:space"), "preserve")
    instr.text = code
    r.append(instr)
    return r


def make_field_runs(code: str, placeholder: Optional[str] = None) -> List:
    """Return the ordered runs of a complex field.

    Without a placeholder the field is begin/code/end. With one, a separate
    marker and the literal fallback text sit between the code and the end.
    The word processor computes the real result when fields are updated.
    """
    runs = [make_field_char_run("begin"), make_instruction_run(code)]
    if placeholder is not None:
        runs.append(make_field_char_run("separate"))
        runs.append(make_text_run(placeholder))
    runs.append(make_field_char_run("end"))
    return runs


class ParagraphBuilder:
    """Appends text paragraphs, captions and the table of contents."""

    def __init__(self, session: "DocumentSession") -> None:
        self._session = session

    def add_paragraph(
        self,
        text: str,
        style_id: Optional[str] = None,
        justification: Optional[Justification] = None,
    ) -> Paragraph:
        p = make_paragraph(text, style_id, justification)
        self._session.append_block(p)
        return self._session.paragraph(p)

    def add_caption(self, text: str, sequence_label: str) -> Paragraph:
        """Append ``<label> {SEQ label} : <text>`` in the caption style."""
        config = self._session.config
        p = make_paragraph(style_id=config.caption_style_id)
        p.append(make_text_run(f"{sequence_label} "))
        for run in make_field_runs(f" SEQ {sequence_label} \\* ARABIC "):
            p.append(run)
        p.append(make_text_run(f": {text}"))
        self._session.append_block(p)
        LOGGER.debug("Added %s caption", sequence_label)
        return self._session.paragraph(p)

    def add_table_of_contents(self, title: str) -> Paragraph:
        """Append a heading and a TOC field left for the word processor to fill."""
        config = self._session.config
        self._session.append_block(make_paragraph(title, config.heading_style_id))

        p = make_paragraph()
        code = f' TOC \\o "{config.toc_levels}" \\h \\z \\u '
        for run in make_field_runs(code, placeholder=config.toc_placeholder):
            p.append(run)
        self._session.append_block(p)
        LOGGER.debug("Added table of contents field")
        return self._session.paragraph(p)
