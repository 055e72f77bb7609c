"""Tests for page text extraction."""

from architect.services.content import BULLET, extract_page_text

from tests.conftest import SAMPLE_HTML


class TestNoiseRemoval:
    def test_strips_scripts_nav_and_footer(self):
        text = extract_page_text(SAMPLE_HTML)
        assert "tracking" not in text
        assert "Home" not in text
        assert "Copyright" not in text

    def test_removes_advertisement_class(self):
        html = '<body><p>Keep me</p><div class="sidebar advertisement">Buy now</div></body>'
        text = extract_page_text(html)
        assert "Keep me" in text
        assert "Buy now" not in text

    def test_removes_by_id_case_insensitive(self):
        html = '<body><p>Article</p><section id="Cookie-Consent">Accept all</section></body>'
        text = extract_page_text(html)
        assert "Accept all" not in text

    def test_body_with_matching_class_is_kept(self):
        html = '<body class="cookie-consent-open"><p>Still here</p></body>'
        assert extract_page_text(html) == "Still here"

    def test_no_markup_in_output(self):
        text = extract_page_text(SAMPLE_HTML)
        assert "<" not in text and ">" not in text


class TestStructure:
    def test_heading_level_markers(self):
        html = "<body><p>Intro</p><h2>Title</h2><p>Body</p></body>"
        text = extract_page_text(html)
        assert "\n== Title ==\n" in text

    def test_h1_and_h3_markers(self):
        text = extract_page_text("<body><h1>Main</h1><h3>Sub</h3></body>")
        lines = text.splitlines()
        assert "= Main =" in lines
        assert "=== Sub ===" in lines

    def test_paragraphs_separated_by_blank_line(self):
        text = extract_page_text("<body><p>One</p><p>Two</p></body>")
        assert text == "One\n\nTwo"

    def test_list_items_bulleted(self):
        text = extract_page_text(SAMPLE_HTML)
        assert f"{BULLET} First point" in text.splitlines()
        assert f"{BULLET} Second point" in text.splitlines()

    def test_nested_list_items_keep_bullets(self):
        html = "<body><ul><li>Outer<ul><li>Inner</li></ul></li></ul></body>"
        lines = extract_page_text(html).splitlines()
        assert f"{BULLET} Outer" in lines
        assert f"{BULLET} Inner" in lines

    def test_links_annotated_with_href(self):
        text = extract_page_text(SAMPLE_HTML)
        assert "More information [https://www.iana.org/domains/example]" in text

    def test_link_inside_paragraph(self):
        html = '<body><p>See <a href="/docs">the docs</a> now.</p></body>'
        assert extract_page_text(html) == "See the docs [/docs] now."

    def test_anchor_without_href_keeps_text(self):
        assert extract_page_text("<body><p><a>plain</a></p></body>") == "plain"

    def test_block_elements_break_lines(self):
        text = extract_page_text("<body><div>alpha</div><div>beta<br>gamma</div></body>")
        assert text.splitlines() == ["alpha", "beta", "gamma"]

    def test_whitespace_collapsed(self):
        text = extract_page_text("<body><p>  lots   of\t\tspace  </p></body>")
        assert text == "lots of space"


class TestFallback:
    def test_empty_input(self):
        assert extract_page_text("") == ""
        assert extract_page_text("   ") == ""

    def test_falls_back_to_raw_text_when_cleanup_removes_everything(self):
        html = '<body><div class="modal">Only content</div></body>'
        assert extract_page_text(html) == "Only content"
