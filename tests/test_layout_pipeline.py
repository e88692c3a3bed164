# tests/test_layout_pipeline.py
"""Tests for docview.services.layout_pipeline"""

import pytest

from docview.config.settings import ViewerSettings
from docview.models.types import PageMeta, Rect
from docview.processors.font_fitter import font_for_style
from docview.services.layout_pipeline import (
    TABLE_FONT_MAX,
    LayoutPipeline,
    build_pipeline,
)


def _word(text, l, t, r, b, page_no=1, label="text"):
    return {
        "text": text,
        "label": label,
        "prov": [{"page_no": page_no, "bbox": {"l": l, "t": t, "r": r, "b": b, "coord_origin": "TOPLEFT"}}],
    }


def _table(table_index, l, t, r, b, page_no=1):
    item = _word("", l, t, r, b, page_no=page_no, label="table")
    item.update({"isTable": True, "tableIndex": table_index})
    return item


HELLO_WORLD = [
    _word("Hello", 0, 0, 10, 10),
    _word("World", 11, 0, 21, 10),
    _word("!", 25, 0, 35, 10),
]


@pytest.fixture
def pipeline(estimate_metrics):
    return LayoutPipeline(
        HELLO_WORLD + [_table(0, 0, 100, 200, 200)],
        tables=[{"headers": ["A", "B"], "grid": [["1", "2"], ["3", "4"]]}],
        pages=[{"page_no": 1, "width": 595, "height": 841}],
        metrics=estimate_metrics,
    )


@pytest.mark.unit
class TestLayoutPipelineInit:
    """Tests for LayoutPipeline construction"""

    def test_pages_and_elements(self, pipeline):
        assert pipeline.pages == [PageMeta(1, 595.0, 841.0, 0)]
        assert pipeline.page_set == {1}
        assert len(pipeline.elements) == 4

    def test_malformed_input(self, estimate_metrics):
        pipeline = LayoutPipeline("nope", tables="nope", pages="nope", metrics=estimate_metrics)
        assert pipeline.elements == []
        assert pipeline.tables == []
        assert pipeline.pages == [PageMeta(1, 595.0, 841.0, 0)]

    def test_default_page_size_from_settings(self, estimate_metrics):
        settings = ViewerSettings(default_page_width=400, default_page_height=300)
        pipeline = LayoutPipeline([], settings=settings, metrics=estimate_metrics)
        assert pipeline.pages == [PageMeta(1, 400, 300, 0)]
        assert pipeline.page_meta(9) == PageMeta(9, 400, 300, 0)

    def test_rotation_sample_limit(self, estimate_metrics):
        assert LayoutPipeline([], metrics=estimate_metrics).rotation_sample_limit == 250
        settings = ViewerSettings(rotation_sample_limit=10)
        assert LayoutPipeline([], settings=settings).rotation_sample_limit == 10

    def test_build_pipeline(self, estimate_metrics):
        pipeline = build_pipeline(
            {"coordinates": HELLO_WORLD, "pages": [{"page_no": 1}]},
            metrics=estimate_metrics,
        )
        assert len(pipeline.elements) == 3
        assert pipeline.metrics is estimate_metrics
        assert build_pipeline(None).elements == []


@pytest.mark.unit
class TestRenderTextRuns:
    """Tests for text runs produced by render_page"""

    def test_words_are_merged(self, pipeline):
        page = pipeline.render_page(1)
        assert page.rotation == 0
        assert (page.width, page.height) == (595.0, 841.0)
        assert len(page.text_runs) == 1

        run = page.text_runs[0]
        assert run.text == "Hello World !"
        assert run.rect == Rect(0, 0, 35, 10)
        assert run.source_indices == (0, 1, 2)
        assert run.original_index == 0

    def test_run_is_fitted_inside_padding(self, pipeline, estimate_metrics):
        run = pipeline.render_page(1).text_runs[0]
        assert run.padding == 1.0
        assert run.inner_width == pytest.approx(33)
        assert run.inner_height == pytest.approx(8)

        fitted = run.fitted
        font = font_for_style(fitted.style, fitted.font_size)
        assert fitted.font_size <= 8 * 0.92 + 1e-9
        assert all(estimate_metrics.measure(line, font) <= run.inner_width + 1e-6 for line in fitted.lines)

    def test_highlighted_run(self, pipeline):
        assert not pipeline.render_page(1).text_runs[0].highlighted
        assert pipeline.render_page(1, highlighted_index=1).text_runs[0].highlighted
        page = pipeline.render_page(1, highlighted_index=2)
        assert page.find_run(2) is page.text_runs[0]
        assert page.find_run(3) is None

    def test_anchor_index_of_merged_words(self, pipeline):
        page = pipeline.render_page(1, highlighted_index=2)
        # Words 1 and 2 are drawn by the run starting at word 0
        assert page.anchor_index(2) == 0
        assert page.anchor_index(1) == 0
        # Tables and unknown indices carry their own index
        assert page.anchor_index(3) == 3
        assert page.anchor_index(42) == 42

    def test_normalized_alternate_geometry(self, estimate_metrics):
        pipeline = LayoutPipeline(
            [{"page": 1, "text": "abc", "x": 0.1, "y": 0.1, "width": 0.5, "height": 0.05}],
            pages=[{"page_no": 1, "width": 595, "height": 841}],
            metrics=estimate_metrics,
        )
        run = pipeline.render_page(1).text_runs[0]
        assert run.rect.left == pytest.approx(59.5)
        assert run.rect.top == pytest.approx(84.1)
        assert run.rect.width == pytest.approx(297.5)
        assert run.rect.height == pytest.approx(42.05)

    def test_declared_rotation_swaps_page_size(self, estimate_metrics):
        pipeline = LayoutPipeline(
            [_word("x", 10, 20, 110, 70)],
            pages=[{"page_no": 1, "width": 595, "height": 841, "rotation": 90}],
            metrics=estimate_metrics,
        )
        page = pipeline.render_page(1)
        assert page.rotation == 90
        assert (page.width, page.height) == (841.0, 595.0)
        assert page.text_runs[0].rect == Rect(771, 10, 50, 100)

    def test_elements_without_page_follow_viewed_page(self, estimate_metrics):
        pipeline = LayoutPipeline(
            [
                _word("one", 0, 0, 10, 10, page_no=1),
                _word("two", 0, 0, 10, 10, page_no=2),
                {"text": "floating", "prov": [{"bbox": {"l": 0, "t": 400, "r": 50, "b": 410}}]},
            ],
            metrics=estimate_metrics,
        )
        assert [p.page_no for p in pipeline.pages] == [1, 2]
        assert sorted(r.text for r in pipeline.render_page(1).text_runs) == ["floating", "one"]
        assert sorted(r.text for r in pipeline.render_page(2).text_runs) == ["floating", "two"]

    def test_malformed_elements_are_dropped(self, estimate_metrics):
        pipeline = LayoutPipeline(
            [
                _word("ok", 0, 0, 10, 10),
                {"page": 1, "text": "no geometry"},
                {"page": 1, "text": "nan", "x": float("nan"), "y": 0, "width": 10, "height": 10},
                _word("flat", 0, 50, 10, 50),
            ],
            metrics=estimate_metrics,
        )
        assert [r.text for r in pipeline.render_page(1).text_runs] == ["ok"]


@pytest.mark.unit
class TestRenderTables:
    """Tests for tables produced by render_page"""

    def test_table(self, pipeline):
        page = pipeline.render_page(1)
        assert len(page.tables) == 1

        table = page.tables[0]
        assert table.original_index == 3
        assert table.table_index == 0
        assert table.rect == Rect(0, 100, 200, 100)
        assert table.model.headers == ["A", "B"]
        assert table.model.rows == [["1", "2"], ["3", "4"]]
        assert table.placeholder is None

    def test_table_fonts(self, pipeline):
        table = pipeline.render_page(1).tables[0]
        # Three rows of 33.3pt: 0.55 * 33.3 is capped at 14
        assert table.base_font == TABLE_FONT_MAX
        assert table.header_font == pytest.approx(14 * 1.08)

    def test_small_table_fonts(self, estimate_metrics):
        pipeline = LayoutPipeline(
            [_table(0, 0, 0, 100, 20)],
            tables=[{"grid": [["H1", "H2"], ["a", "b"]]}],
            metrics=estimate_metrics,
        )
        table = pipeline.render_page(1).tables[0]
        assert table.base_font == pytest.approx(10 * 0.55)
        assert table.header_font == pytest.approx(10 * 0.55 * 1.08)

    def test_missing_payload_shows_placeholder(self, estimate_metrics):
        pipeline = LayoutPipeline([_table(5, 0, 0, 100, 100)], tables=[], metrics=estimate_metrics)
        table = pipeline.render_page(1).tables[0]
        assert table.model.is_empty
        assert table.placeholder == "Table 6 (no data)"
        assert table.title == "table: 6"

    def test_table_highlight_and_exclusion_from_text(self, pipeline):
        page = pipeline.render_page(1, highlighted_index=3)
        assert page.tables[0].highlighted
        assert not page.text_runs[0].highlighted
        assert all(3 not in run.source_indices for run in page.text_runs)


@pytest.mark.unit
class TestElementLookup:
    """Tests for page_of_element and click"""

    def test_page_of_element(self, estimate_metrics):
        pipeline = LayoutPipeline(
            [_word("a", 0, 0, 1, 1, page_no=3), {"page": 2, "text": "b"}, {"text": "c"}],
            metrics=estimate_metrics,
        )
        assert pipeline.page_of_element(0) == 3
        assert pipeline.page_of_element(1) == 2
        assert pipeline.page_of_element(2) is None
        assert pipeline.page_of_element(5) is None
        assert pipeline.page_of_element(None) is None

    def test_click_forwards_index(self, estimate_metrics):
        clicked = []
        pipeline = LayoutPipeline(HELLO_WORLD, metrics=estimate_metrics, on_element_click=clicked.append)
        pipeline.click(2)
        assert clicked == [2]

    def test_click_without_callback(self, pipeline):
        pipeline.click(0)
