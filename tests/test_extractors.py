import io

import docx
import pytest

from meetprep.ingest.containers import unpack
from meetprep.ingest.errors import CorruptArchiveError, EmptyDocumentError
from meetprep.ingest.extractors import DocxExtractor, PptxExtractor, extract
from meetprep.ingest.format_detection import FileType
from meetprep.ingest.models import ArchiveParts, SegmentKind


def _text_parts(data: bytes) -> ArchiveParts:
    return ArchiveParts(file_type=FileType.PLAIN_TEXT, parts={"text": data}, order=["text"])


def test_plain_text_lines_become_paragraphs() -> None:
    extracted = extract(_text_parts(b"Agenda\r\n\r\n1. Budget\n2. Hiring\r3. AOB"))

    assert [segment.text for segment in extracted.segments] == ["Agenda", "", "1. Budget", "2. Hiring", "3. AOB"]
    assert [segment.ordinal for segment in extracted.segments] == [0, 1, 2, 3, 4]
    assert {segment.kind for segment in extracted.segments} == {SegmentKind.PARAGRAPH}
    assert extracted.warnings == []


def test_plain_text_drops_utf8_bom() -> None:
    extracted = extract(_text_parts("\ufeffCafé meeting".encode("utf-8")))

    assert extracted.segments[0].text == "Café meeting"


def test_plain_text_falls_back_to_latin1() -> None:
    extracted = extract(_text_parts("Réunion à Genève".encode("latin-1")))

    assert extracted.segments[0].text == "Réunion à Genève"
    assert len(extracted.warnings) == 1
    assert "Latin-1" in extracted.warnings[0]


def test_whitespace_only_text_is_not_empty() -> None:
    extracted = extract(_text_parts(b"   \n\t"))

    assert extracted.has_content


def test_text_with_only_line_breaks_is_empty() -> None:
    with pytest.raises(EmptyDocumentError):
        extract(_text_parts(b"\n\n\r\n"))


def test_docx_paragraphs_in_document_order(make_docx, config) -> None:
    data = make_docx(["Quarterly review", "", "Revenue grew 12%."])

    extracted = extract(unpack(data, FileType.WORD_DOCUMENT, config))

    assert [segment.text for segment in extracted.segments] == ["Quarterly review", "", "Revenue grew 12%."]
    assert [segment.ordinal for segment in extracted.segments] == [0, 1, 2]


def test_docx_runs_are_concatenated_and_breaks_become_spaces(make_docx, config) -> None:
    body = (
        "<w:p>"
        '<w:pPr><w:tabs><w:tab w:val="left" w:pos="720"/></w:tabs></w:pPr>'
        "<w:r><w:t>Owner:</w:t></w:r>"
        "<w:r><w:tab/><w:t>Dana</w:t></w:r>"
        "<w:r><w:br/><w:t xml:space=\"preserve\">Due </w:t></w:r>"
        "<w:hyperlink><w:r><w:t>Friday</w:t></w:r></w:hyperlink>"
        "<w:del><w:r><w:delText>Monday</w:delText></w:r></w:del>"
        "</w:p>"
    )
    data = make_docx(body_xml=body)

    extracted = extract(unpack(data, FileType.WORD_DOCUMENT, config))

    assert [segment.text for segment in extracted.segments] == ["Owner: Dana Due Friday"]


def test_docx_table_cells_are_paragraphs(make_docx, config) -> None:
    body = (
        "<w:tbl><w:tr>"
        "<w:tc><w:p><w:r><w:t>Topic</w:t></w:r></w:p></w:tc>"
        "<w:tc><w:p><w:r><w:t>Owner</w:t></w:r></w:p></w:tc>"
        "</w:tr></w:tbl>"
        "<w:p><w:r><w:t>After the table</w:t></w:r></w:p>"
    )

    extracted = extract(unpack(make_docx(body_xml=body), FileType.WORD_DOCUMENT, config))

    assert [segment.text for segment in extracted.segments] == ["Topic", "Owner", "After the table"]


def test_docx_text_box_is_read_once(make_docx, config) -> None:
    mc = "http://schemas.openxmlformats.org/markup-compatibility/2006"
    box = "<w:txbxContent><w:p><w:r><w:t>Boxed note</w:t></w:r></w:p></w:txbxContent>"
    body = (
        f'<w:p xmlns:mc="{mc}"><w:r><w:t>Before</w:t></w:r>'
        f"<w:r><mc:AlternateContent><mc:Choice>{box}</mc:Choice><mc:Fallback>{box}</mc:Fallback>"
        "</mc:AlternateContent></w:r>"
        "<w:r><w:t> after</w:t></w:r></w:p>"
    )

    extracted = extract(unpack(make_docx(body_xml=body), FileType.WORD_DOCUMENT, config))

    assert [segment.text for segment in extracted.segments] == ["Before after", "Boxed note"]


def test_docx_unreadable_paragraph_is_skipped_with_warning(make_docx, config) -> None:
    body = (
        "<w:p><w:r><w:t>Kept</w:t></w:r></w:p>"
        "<w:p><w:r><w:t>Broken<w:b/></w:t></w:r></w:p>"
        "<w:p><w:r><w:t>Also kept</w:t></w:r></w:p>"
    )

    extracted = extract(unpack(make_docx(body_xml=body), FileType.WORD_DOCUMENT, config))

    assert [segment.text for segment in extracted.segments] == ["Kept", "Also kept"]
    assert [segment.ordinal for segment in extracted.segments] == [0, 2]
    assert len(extracted.warnings) == 1
    assert "paragraph 1" in extracted.warnings[0]


def test_docx_malformed_body_is_corrupt(make_archive, config) -> None:
    data = make_archive([("word/document.xml", "<w:document><w:body><w:p>")])

    with pytest.raises(CorruptArchiveError):
        DocxExtractor().extract(unpack(data, FileType.WORD_DOCUMENT, config))


def test_docx_with_no_text_is_empty(make_docx, config) -> None:
    with pytest.raises(EmptyDocumentError):
        extract(unpack(make_docx(["", ""]), FileType.WORD_DOCUMENT, config))


def test_docx_written_by_python_docx(config) -> None:
    document = docx.Document()
    document.add_heading("Kickoff", level=1)
    document.add_paragraph("Goals for the first sprint.")
    buffer = io.BytesIO()
    document.save(buffer)

    extracted = extract(unpack(buffer.getvalue(), FileType.WORD_DOCUMENT, config))

    assert [segment.text for segment in extracted.segments if segment.text] == [
        "Kickoff",
        "Goals for the first sprint.",
    ]


def test_pptx_one_block_per_slide_in_numeric_order(make_pptx, config) -> None:
    slides = [[f"Title {number}", f"Body line {number}"] for number in range(1, 6)]
    data = make_pptx(slides, storage_order=[3, 5, 1, 4, 2])

    extracted = extract(unpack(data, FileType.SLIDE_DECK, config))

    assert [segment.kind for segment in extracted.segments] == [SegmentKind.SLIDE_BLOCK] * 5
    assert [segment.ordinal for segment in extracted.segments] == [1, 2, 3, 4, 5]
    assert extracted.segments[0].text == "Title 1\nBody line 1"
    assert extracted.segments[4].text == "Title 5\nBody line 5"


def test_pptx_shapes_without_text_do_not_add_lines(make_pptx, config) -> None:
    data = make_pptx([[None, "Roadmap", "", None, "Q1 launch\nQ2 pilot"], [None]])

    extracted = extract(unpack(data, FileType.SLIDE_DECK, config))

    assert [segment.text for segment in extracted.segments] == ["Roadmap\nQ1 launch\nQ2 pilot", ""]


def test_pptx_grouped_shapes_and_line_breaks() -> None:
    slide = (
        '<p:sld xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" '
        'xmlns:p="http://schemas.openxmlformats.org/presentationml/2006/main">'
        "<p:cSld><p:spTree>"
        "<p:sp><p:txBody><a:p><a:r><a:t>Budget</a:t></a:r></a:p></p:txBody></p:sp>"
        "<p:grpSp><p:sp><p:txBody><a:p><a:r><a:t>Capex</a:t></a:r><a:br/>"
        '<a:fld type="slidenum"><a:t>2</a:t></a:fld></a:p></p:txBody></p:sp></p:grpSp>'
        "</p:spTree></p:cSld></p:sld>"
    )
    parts = ArchiveParts(
        file_type=FileType.SLIDE_DECK,
        parts={"ppt/slides/slide2.xml": slide.encode("utf-8")},
        order=["ppt/slides/slide2.xml"],
    )

    extracted = PptxExtractor().extract(parts)

    assert extracted.segments[0].text == "Budget\nCapex 2"
    assert extracted.segments[0].ordinal == 2


def test_pptx_unreadable_slide_is_skipped_with_warning(make_archive, make_pptx, config) -> None:
    good = make_pptx([["Intro"]])
    data = make_archive(
        [
            ("ppt/slides/slide1.xml", unpack(good, FileType.SLIDE_DECK, config).parts["ppt/slides/slide1.xml"]),
            ("ppt/slides/slide2.xml", "<p:sld><unclosed>"),
        ]
    )

    extracted = extract(unpack(data, FileType.SLIDE_DECK, config))

    assert [segment.text for segment in extracted.segments] == ["Intro"]
    assert len(extracted.warnings) == 1
    assert "slide 2" in extracted.warnings[0]


def test_pptx_without_slides_is_empty(make_archive, config) -> None:
    data = make_archive([("ppt/presentation.xml", "<p:presentation/>")])

    with pytest.raises(EmptyDocumentError):
        extract(unpack(data, FileType.SLIDE_DECK, config))
