"""Tests for OMML rendering and equation paragraphs."""
import unittest

from docx.oxml.ns import qn

from docx_builder.builder.math import MathBuilder, build_matrix, integral_nodes, render_math
from docx_builder.builder.session import DocumentSession
from docx_builder.errors import ArgumentError, DimensionMismatchError, InvalidDimensionError
from docx_builder.model.math_model import Delimiter, Fraction, MathRun, Radical, SubScript, SuperScript, flatten_text
from docx_builder.utils.xml_utils import M_NS


def m(local: str) -> str:
    return f"{{{M_NS}}}{local}"


def texts(element):
    return [t.text for t in element.iter(m("t"))]


def local_tags(element):
    return [child.tag.split("}")[-1] for child in element]


class RenderMathTest(unittest.TestCase):
    def test_run_preserves_surrounding_space(self) -> None:
        run = render_math(MathRun(" dx"))
        t = run.find(m("t"))
        self.assertEqual(t.text, " dx")
        self.assertEqual(t.get("{http://www.w3.org/XML/1998/namespace}space"), "preserve")

    def test_fraction_slots(self) -> None:
        fraction = render_math(Fraction(MathRun("1"), MathRun("2")))
        self.assertEqual(local_tags(fraction), ["num", "den"])
        self.assertEqual(texts(fraction.find(m("num"))), ["1"])
        self.assertEqual(texts(fraction.find(m("den"))), ["2"])

    def test_square_root_hides_degree(self) -> None:
        radical = render_math(Radical(MathRun("x")))
        self.assertEqual(local_tags(radical), ["radPr", "deg", "e"])
        self.assertEqual(radical.find(m("radPr")).find(m("degHide")).get(m("val")), "1")
        self.assertEqual(len(radical.find(m("deg"))), 0)

    def test_nth_root_keeps_degree(self) -> None:
        radical = render_math(Radical(MathRun("8"), MathRun("3")))
        self.assertIsNone(radical.find(m("radPr")).find(m("degHide")))
        self.assertEqual(texts(radical.find(m("deg"))), ["3"])
        self.assertEqual(texts(radical.find(m("e"))), ["8"])

    def test_delimiter_characters(self) -> None:
        delimiter = render_math(Delimiter(MathRun("a"), "[", "]"))
        d_pr = delimiter.find(m("dPr"))
        self.assertEqual(d_pr.find(m("begChr")).get(m("val")), "[")
        self.assertEqual(d_pr.find(m("endChr")).get(m("val")), "]")

    def test_nodes_compose(self) -> None:
        node = Fraction(SuperScript(MathRun("x"), MathRun("2")), SubScript(MathRun("y"), MathRun("i")))
        element = render_math(node)
        self.assertEqual(element.find(m("num")).find(m("sSup")).find(m("sup")).find(m("r")).find(m("t")).text, "2")
        self.assertEqual(element.find(m("den")).find(m("sSub")).tag, m("sSub"))
        self.assertEqual(flatten_text(node), "x2yi")

    def test_unknown_node_type(self) -> None:
        with self.assertRaises(TypeError):
            render_math(object())


class IntegralCompositionTest(unittest.TestCase):
    def test_no_limits_wraps_sign_in_bare_group(self) -> None:
        nodes = integral_nodes("f(x)")
        self.assertEqual(nodes, [Delimiter(MathRun("∫"), "", ""), MathRun(" f(x)")])

    def test_empty_limits_are_omitted(self) -> None:
        self.assertEqual(integral_nodes("x", "", ""), integral_nodes("x"))

    def test_both_limits_nest_scripts(self) -> None:
        nodes = integral_nodes("x dx", "0", "1")
        self.assertEqual(nodes[0], SuperScript(SubScript(MathRun("∫"), MathRun("0")), MathRun("1")))
        self.assertEqual(nodes[1], MathRun(" x dx"))

    def test_single_limits(self) -> None:
        self.assertEqual(integral_nodes("x", lower="a")[0], SubScript(MathRun("∫"), MathRun("a")))
        self.assertEqual(integral_nodes("x", upper="b")[0], SuperScript(MathRun("∫"), MathRun("b")))

    def test_empty_integrand_adds_no_run(self) -> None:
        self.assertEqual(len(integral_nodes("", "0", "1")), 1)


class MatrixValidationTest(unittest.TestCase):
    def test_nested_values_keep_row_major_order(self) -> None:
        matrix = build_matrix(2, 2, [["a", "b"], ["c", "d"]])
        self.assertEqual((matrix.row_count, matrix.column_count), (2, 2))
        self.assertEqual(flatten_text(matrix), "abcd")

    def test_flat_values_are_chunked_by_columns(self) -> None:
        matrix = build_matrix(2, 3, ["1", "2", "3", "4", "5", "6"])
        self.assertEqual(matrix.cells[1][0], MathRun("4"))

    def test_mismatch_and_invalid_arguments(self) -> None:
        with self.assertRaises(DimensionMismatchError):
            build_matrix(2, 2, [["a", "b"], ["c"]])
        with self.assertRaises(DimensionMismatchError):
            build_matrix(2, 2, ["a", "b", "c"])
        with self.assertRaises(ArgumentError):
            build_matrix(2, 2, None)
        with self.assertRaises(InvalidDimensionError):
            build_matrix(0, 2, [])


class MathBuilderTest(unittest.TestCase):
    def setUp(self) -> None:
        self.session = DocumentSession.create()
        self.math = MathBuilder(self.session)

    def _body_paragraphs(self):
        return self.session.body.findall(qn("w:p"))

    def _o_math(self, paragraph):
        o_maths = paragraph._p.findall(m("oMath"))
        self.assertEqual(len(o_maths), 1)
        return o_maths[0]

    def test_each_call_appends_one_equation_paragraph(self) -> None:
        before = len(self._body_paragraphs())
        self.math.add_fraction("a", "b")
        self.math.add_radical("x")
        self.math.add_superscript("x", "2")
        self.math.add_subscript("x", "i")
        self.math.add_parentheses("a + b")
        self.math.add_equation("E = mc²")
        self.assertEqual(len(self._body_paragraphs()), before + 6)
        for p in self._body_paragraphs()[before:]:
            self.assertEqual(len(p.findall(m("oMath"))), 1)
        self.assertEqual(self.session.body[-1].tag, qn("w:sectPr"))

    def test_matrix_cells_in_reading_order(self) -> None:
        paragraph = self.math.add_matrix(2, 2, [["a", "b"], ["c", "d"]])
        matrix = self._o_math(paragraph).find(m("m"))
        self.assertEqual(local_tags(matrix), ["mPr", "mr", "mr"])
        for row in matrix.findall(m("mr")):
            self.assertEqual(len(row.findall(m("e"))), 2)
        self.assertEqual(texts(matrix), ["a", "b", "c", "d"])
        count = matrix.find(m("mPr")).find(m("mcs")).find(m("mc")).find(m("mcPr")).find(m("count"))
        self.assertEqual(count.get(m("val")), "2")

    def test_matrix_mismatch_appends_nothing(self) -> None:
        before = len(self._body_paragraphs())
        with self.assertRaises(DimensionMismatchError):
            self.math.add_matrix(2, 2, [["a", "b", "c"]])
        with self.assertRaises(DimensionMismatchError):
            self.math.add_matrix(3, 1, ["a", "b"])
        self.assertEqual(len(self._body_paragraphs()), before)

    def test_matrix_rejects_mixed_nested_and_flat_values(self) -> None:
        before = len(self._body_paragraphs())
        with self.assertRaises(ArgumentError):
            self.math.add_matrix(1, 2, [["a", "b"], "c"])
        with self.assertRaises(ArgumentError):
            self.math.add_matrix(1, 2, ["a", 3])
        self.assertEqual(len(self._body_paragraphs()), before)

    def test_integral_with_limits(self) -> None:
        paragraph = self.math.add_integral("f(x) dx", "0", "∞")
        o_math = self._o_math(paragraph)
        self.assertEqual(local_tags(o_math), ["sSup", "r"])
        s_sub = o_math.find(m("sSup")).find(m("e")).find(m("sSub"))
        self.assertEqual(texts(s_sub.find(m("e"))), ["∫"])
        self.assertEqual(texts(s_sub.find(m("sub"))), ["0"])
        self.assertEqual(texts(o_math.find(m("sSup")).find(m("sup"))), ["∞"])
        self.assertEqual(texts(o_math.find(m("r"))), [" f(x) dx"])

    def test_integral_without_limits(self) -> None:
        o_math = self._o_math(self.math.add_integral("x"))
        delimiter = o_math.find(m("d"))
        self.assertEqual(delimiter.find(m("dPr")).find(m("begChr")).get(m("val")), "")
        self.assertEqual(delimiter.find(m("dPr")).find(m("endChr")).get(m("val")), "")
        self.assertEqual(texts(delimiter), ["∫"])

    def test_composed_expression(self) -> None:
        paragraph = self.math.add_expression(MathRun("y = "), Radical(Fraction("1", "x"), "3"))
        o_math = self._o_math(paragraph)
        self.assertEqual(local_tags(o_math), ["r", "rad"])
        self.assertEqual(texts(o_math.find(m("rad")).find(m("e"))), ["1", "x"])

    def test_missing_arguments(self) -> None:
        before = len(self._body_paragraphs())
        with self.assertRaises(ArgumentError):
            self.math.add_expression()
        with self.assertRaises(ArgumentError):
            self.math.add_fraction(None, "b")
        with self.assertRaises(ArgumentError):
            self.math.add_matrix(1, 1, None)
        self.assertEqual(len(self._body_paragraphs()), before)


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
