from latexsync.core.document import (
    DocumentContent,
    DocumentSection,
    FormulaBlock,
    FormulaResult,
    InputType,
    SingleFormulaContent,
    create_formula_result_document,
    create_formula_result_single,
    default_document,
    structurally_equal,
)


def _document():
    document = DocumentContent(title="Notes")
    document.add_section("Intro")
    document.add_section("Body")
    return document


def test_default_document_has_one_section():
    document = default_document()
    assert document.total_sections == 1
    assert document.sections[0].heading == "Section 1"
    assert document.sections[0].text == ""
    assert document.sections[0].formulas == []


def test_add_section_defaults_heading_and_appends():
    document = _document()
    index = document.add_section()
    assert index == 2
    assert document.sections[2].heading == "Section 3"


def test_add_section_at_position_and_out_of_range_appends():
    document = _document()
    assert document.add_section("First", position=0) == 0
    assert [s.heading for s in document.sections] == ["First", "Intro", "Body"]
    assert document.add_section("Last", position=99) == 3
    assert document.sections[-1].heading == "Last"


def test_remove_section_refuses_last_one_and_bad_index():
    document = _document()
    assert document.remove_section(5) is None
    assert document.remove_section(0) == 0
    assert document.remove_section(0) is None
    assert document.total_sections == 1
    assert document.sections[0].heading == "Body"


def test_move_section_swaps():
    document = _document()
    document.add_section("End")
    assert document.move_section(0, 2) == 2
    assert [s.heading for s in document.sections] == ["End", "Body", "Intro"]
    assert document.move_section(1, 1) is None
    assert document.move_section(0, 7) is None


def test_duplicate_section_is_deep_copy():
    document = _document()
    document.add_formula(0, "x^2")
    assert document.duplicate_section(0) == 1
    copy = document.sections[1]
    assert copy.heading == "Intro (copy)"
    copy.formulas[0].latex = "y"
    assert document.sections[0].formulas[0].latex == "x^2"
    assert document.duplicate_section(9) is None


def test_update_section_merges_known_fields_only():
    document = _document()
    assert document.update_section(0, text="Hello") == 0
    assert document.sections[0].text == "Hello"
    assert document.sections[0].heading == "Intro"
    assert document.update_section(0, colour="red") is None
    assert document.update_section(0) is None
    assert document.update_section(4, text="x") is None


def test_add_formula_defaults_to_end_of_text_and_does_not_clamp():
    document = _document()
    document.update_section(0, text="0123456789")
    assert document.add_formula(0, "a") == 0
    assert document.sections[0].formulas[0].position == 10
    assert document.add_formula(0, "b", position=42, is_inline=True) == 1
    formula = document.sections[0].formulas[1]
    assert formula.position == 42
    assert formula.is_inline is True
    assert document.add_formula(3, "c") is None


def test_update_and_remove_formula():
    document = _document()
    document.add_formula(1, "x")
    assert document.update_formula(1, 0, latex="y", position=0) == 0
    assert document.sections[1].formulas[0].latex == "y"
    assert document.update_formula(1, 0, size=3) is None
    assert document.update_formula(1, 0, position="far") is None
    assert document.update_formula(1, 2, latex="z") is None
    assert document.remove_formula(1, 1) is None
    assert document.remove_formula(1, 0) == 0
    assert document.sections[1].formulas == []


def test_aggregate_queries():
    document = _document()
    document.update_section(0, text="abc")
    document.add_formula(0, "x^2")
    document.add_formula(1, "y")
    assert document.total_sections == 2
    assert document.total_formulas == 2
    # title + headings + text + formulas
    assert document.total_characters == len("Notes") + len("Intro") + len("Body") + 3 + 3 + 1


def test_structural_equality_ignores_construction_path():
    built = DocumentContent(title=None)
    built.add_section("Section 1")
    assert structurally_equal(built, default_document())
    built.sections[0].text = "changed"
    assert not structurally_equal(built, default_document())
    assert structurally_equal("x", "x")


def test_formula_result_parses_camel_case_payload():
    result = FormulaResult.model_validate(
        {
            "latex": "x^2",
            "confidence": 0.93,
            "timestamp": 1700000000000,
            "inputType": "SingleFormula",
            "content": {"SingleFormula": "x^2"},
        }
    )
    assert result.input_type is InputType.SINGLE_FORMULA
    assert isinstance(result.content, SingleFormulaContent)
    assert result.content.formula == "x^2"


def test_formula_result_parses_document_payload():
    result = FormulaResult.model_validate(
        {
            "latex": "a",
            "confidence": 0.5,
            "inputType": "Document",
            "content": {
                "Document": {
                    "title": "Scan",
                    "sections": [
                        {"heading": "H", "text": "t", "formulas": [{"latex": "a", "position": 1, "isInline": True}]}
                    ],
                }
            },
        }
    )
    document = result.to_document()
    assert document.title == "Scan"
    assert document.sections[0].formulas[0].is_inline is True
    assert result.timestamp > 0


def test_single_formula_converts_to_one_section_document():
    result = create_formula_result_single(r"\frac{1}{2}", 0.8)
    document = result.to_document()
    assert document.title == "Recognition result"
    assert len(document.sections) == 1
    section = document.sections[0]
    assert section.heading == "Formula"
    assert section.formulas == [FormulaBlock(latex=r"\frac{1}{2}", position=0, is_inline=False)]


def test_document_result_conversion_is_detached():
    source = DocumentContent(sections=[DocumentSection(text="x")])
    result = create_formula_result_document("", 0.7, source)
    document = result.to_document()
    document.sections[0].text = "changed"
    assert result.to_document().sections[0].text == "x"
