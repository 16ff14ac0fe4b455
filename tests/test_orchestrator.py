import numpy as np
import pytest
from PIL import Image

from textdetect import DetectionResult, Settings, detect, find_text_regions, find_text_regions_detailed
from textdetect.ocr import find_text_regions_ocr
from textdetect.raster import RasterView
from textdetect.schema import OcrRegions, OcrUnavailable, Rect

from conftest import FakeExtractor, blank, token

WORDS = [token(20, 40, 30, 14, "Hello", 91), token(56, 40, 40, 14, "world", 87)]


def test_ocr_path_requires_an_engine(word_image):
    outcome = find_text_regions_ocr(word_image, None)
    assert isinstance(outcome, OcrUnavailable)
    assert "no OCR engine" in outcome.reason


def test_ocr_path_reports_probe_failure(word_image):
    fake = FakeExtractor(WORDS, reason="eng.traineddata missing")
    assert find_text_regions_ocr(word_image, fake) == OcrUnavailable("eng.traineddata missing")
    assert fake.calls == []


def test_ocr_path_converts_engine_errors(word_image):
    fake = FakeExtractor(WORDS, fail_with="tesseract crashed")
    assert find_text_regions_ocr(word_image, fake) == OcrUnavailable("tesseract crashed")


def test_ocr_path_pools_words_from_every_variant(word_image):
    fake = FakeExtractor(WORDS)
    outcome = find_text_regions_ocr(word_image, fake)
    assert isinstance(outcome, OcrRegions)
    assert len(fake.calls) == 5
    assert all(png.startswith(b"\x89PNG") for png in fake.calls)
    assert outcome.word_count == 10
    assert len(outcome.regions) == 1
    region = outcome.regions[0]
    # 20..96 x 40..54 padded by 6
    assert region.bounds == Rect(14, 34, 102, 60)
    assert region.confidence == pytest.approx(0.89)


def test_ocr_path_respects_variant_policy(word_image):
    fake = FakeExtractor(WORDS)
    find_text_regions_ocr(word_image, fake, variants=("original", "bogus", "blue"))
    assert len(fake.calls) == 2


def test_ocr_path_without_words(word_image):
    outcome = find_text_regions_ocr(word_image, FakeExtractor([token(0, 0, 40, 20, "x", 10)]))
    assert outcome == OcrRegions([], word_count=0, line_count=0)


def test_detect_prefers_ocr(word_image):
    res = detect(word_image, FakeExtractor(WORDS))
    assert res.strategy == "ocr"
    assert res.ocr_unavailable is None
    assert res.regions[0].confidence > 0


def test_detect_falls_back_when_ocr_finds_nothing(word_image):
    res = detect(word_image, FakeExtractor([]))
    assert res.strategy == "heuristic"
    assert res.ocr_unavailable is None
    assert [r.bounds for r in res.regions] == [Rect(18, 38, 98, 56)]
    assert all(r.confidence == 0.0 for r in res.regions)


def test_detect_falls_back_when_ocr_unavailable(word_image):
    res = detect(word_image, FakeExtractor(reason="tesseract binary not found"))
    assert res.strategy == "heuristic"
    assert res.ocr_unavailable == "tesseract binary not found"
    assert len(res.regions) == 1


def test_detect_without_engine_uses_heuristic(two_line_image):
    res = detect(two_line_image)
    assert res.strategy == "heuristic"
    assert len(res.regions) == 2
    assert res.ocr_unavailable


def test_detect_nothing_found():
    raster = RasterView.from_argb(blank(120, 80), 120, 80)
    assert detect(raster, FakeExtractor([])) == DetectionResult([], "none")


def test_detect_strategies(word_image):
    fake = FakeExtractor(WORDS)
    assert detect(word_image, fake, strategy="heuristic").strategy == "heuristic"
    assert fake.calls == []

    res = detect(word_image, FakeExtractor([]), strategy="ocr")
    assert res == DetectionResult([], "none")

    with pytest.raises(ValueError):
        detect(word_image, fake, strategy="fastest")


def test_detect_empty_input():
    assert detect(None) == DetectionResult([], "none")
    empty = RasterView.from_argb(np.zeros((0, 0), dtype=np.uint32), 0, 0)
    assert detect(empty, FakeExtractor(WORDS)).regions == []


def test_detect_uses_settings_policy(word_image, monkeypatch):
    monkeypatch.setenv("OCR_VARIANTS", "inverted")
    fake = FakeExtractor(WORDS)
    detect(word_image, fake, settings=Settings.from_env())
    assert len(fake.calls) == 1


def test_convenience_wrappers_accept_pil_images(word_image):
    img = Image.fromarray(word_image.to_rgba())
    detailed = find_text_regions_detailed(img)
    assert [r.bounds for r in detailed] == find_text_regions(img)
    assert find_text_regions(img) == [Rect(18, 38, 98, 56)]
