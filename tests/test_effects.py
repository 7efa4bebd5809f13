import numpy as np
import pytest

from conftest import ConstantRng
from effects_core import discover_effects, get_effect, Step
from effects.finishing import vignette, film_grain, paper_grain
from effects.sketch import charcoal, charcoal_smudge, line_art, edge_threshold
from effects.texture import color_blend
from effects.tone import sepia
from pixelbuffer import PixelBuffer

EXPECTED = {
    "oil-painting", "color-blend", "watercolor", "abstract", "abstract-elements",
    "van-gogh-swirl", "van-gogh-colors", "picasso-cubist",
    "sepia", "warm-palette", "cool-palette", "seventies-warmth", "cinematic-grading",
    "exposure-lift", "kodachrome", "saturation-boost", "dramatic-contrast",
    "dreamy-glow", "impressionist-touch", "woodblock",
    "grayscale", "charcoal", "charcoal-smudge", "line-art", "edge-threshold",
    "film-grain", "paper-grain", "vignette",
}

# Passes whose change at intensity 1 stays small.
GENTLE = [
    "sepia", "warm-palette", "cool-palette", "seventies-warmth", "cinematic-grading",
    "exposure-lift", "kodachrome", "saturation-boost", "dramatic-contrast",
    "dreamy-glow", "impressionist-touch", "vignette", "van-gogh-colors", "grayscale",
]


def test_registry_has_every_effect():
    reg = discover_effects()
    assert EXPECTED <= set(reg)
    assert reg["watercolor"].stochastic and reg["charcoal"].stochastic
    assert not reg["sepia"].stochastic
    assert reg["vignette"].family == "finishing"
    assert reg["line-art"].family == "sketch"


def test_unknown_effect_raises_key_error():
    with pytest.raises(KeyError):
        get_effect("no-such-effect")


@pytest.mark.parametrize("name", sorted(EXPECTED))
@pytest.mark.parametrize("factor", [0.1, 1.0, 1.6])
def test_every_effect_keeps_shape_and_alpha(random_buf, name, factor):
    before = random_buf.pixels.copy()
    get_effect(name).apply(random_buf, factor, np.random.default_rng(3))
    after = random_buf.pixels
    assert after.shape == before.shape
    assert after.dtype == np.uint8
    assert np.array_equal(after[..., 3], before[..., 3])


def test_chained_passes_stay_in_range(random_buf):
    rng = np.random.default_rng(11)
    for name in sorted(EXPECTED):
        Step(name, 1.0).run(random_buf, 1.0, rng)
    px = random_buf.pixels.astype(int)
    assert px.min() >= 0 and px.max() <= 255


@pytest.mark.parametrize("name", GENTLE)
def test_intensity_one_is_barely_visible(random_buf, name):
    before = random_buf.pixels.astype(int)
    get_effect(name).apply(random_buf, 0.1, np.random.default_rng(0))
    delta = np.abs(random_buf.pixels.astype(int) - before)[..., :3]
    assert delta.max() <= 30


@pytest.mark.parametrize("name", ["sepia", "oil-painting", "vignette", "van-gogh-swirl", "abstract"])
def test_intensity_ten_moves_more_than_intensity_one(random_buf, name):
    low = random_buf.copy()
    high = random_buf.copy()
    get_effect(name).apply(low, 0.1)
    get_effect(name).apply(high, 1.0)
    base = random_buf.pixels.astype(int)[..., :3]
    d_low = np.abs(low.pixels.astype(int)[..., :3] - base).mean()
    d_high = np.abs(high.pixels.astype(int)[..., :3] - base).mean()
    assert d_high > d_low


def test_sepia_matrix():
    buf = PixelBuffer.filled(1, 1, (200, 150, 100, 255))
    sepia(buf, 1.0)
    r, g, b = buf.pixels[0, 0, :3].astype(float)
    assert abs(r - 212.85) <= 1
    assert abs(g - 189.5) <= 1
    assert abs(b - 147.6) <= 1


def test_sepia_blends_by_factor():
    buf = PixelBuffer.filled(1, 1, (200, 150, 100, 255))
    sepia(buf, 0.5)
    r = float(buf.pixels[0, 0, 0])
    assert abs(r - (200 * 0.5 + 212.85 * 0.5)) <= 1


def test_sepia_clamps_bright_pixels():
    buf = PixelBuffer.filled(1, 1, (255, 255, 255, 255))
    sepia(buf, 1.0)
    assert buf.pixels[0, 0, :3].tolist()[0] == 255


def test_vignette_center_and_corner():
    buf = PixelBuffer.filled(100, 100, (128, 128, 128, 255))
    vignette(buf, 1.0)
    px = buf.pixels.astype(int)
    assert px[50, 50, :3].tolist() == [128, 128, 128]
    assert all(abs(v - 25.6) <= 1 for v in px[0, 0, :3])
    # monotone toward the edge along the diagonal
    assert px[10, 10, 0] < px[30, 30, 0] < px[50, 50, 0]


def test_film_grain_bounds():
    buf = PixelBuffer.filled(40, 40, (128, 128, 128, 255))
    film_grain(buf, 20.0, np.random.default_rng(5))
    px = buf.pixels.astype(int)[..., :3]
    assert px.min() >= 118 and px.max() <= 138
    # independent per channel
    assert not np.array_equal(px[..., 0], px[..., 1])


def test_paper_grain_keeps_gray():
    buf = PixelBuffer.filled(20, 20, (100, 100, 100, 255))
    paper_grain(buf, 30.0, np.random.default_rng(5))
    px = buf.pixels
    assert np.array_equal(px[..., 0], px[..., 1]) and np.array_equal(px[..., 1], px[..., 2])


@pytest.mark.parametrize("gray,expected", [(50, 15), (100, 60), (200, 200)])
def test_charcoal_piecewise_remap(gray, expected):
    buf = PixelBuffer.filled(1, 1, (gray, gray, gray, 255))
    # pixel (0, 0) has zero texture and u=0.5 means zero paper noise
    charcoal(buf, 1.0, ConstantRng(0.5))
    assert abs(int(buf.pixels[0, 0, 0]) - expected) <= 1


def test_charcoal_smudge_stays_monochrome(gradient_buf):
    from effects.sketch import grayscale
    grayscale(gradient_buf, 1.0)
    before = gradient_buf.pixels.copy()
    charcoal_smudge(gradient_buf, 1.0, np.random.default_rng(2))
    px = gradient_buf.pixels
    assert np.array_equal(px[..., 0], px[..., 2])
    assert not np.array_equal(px, before)


def test_charcoal_smudge_noop_below_radius_one(gradient_buf):
    before = gradient_buf.pixels.copy()
    charcoal_smudge(gradient_buf, 0.3, np.random.default_rng(2))
    assert np.array_equal(gradient_buf.pixels, before)


def test_line_art_threshold_moves_with_factor():
    buf = PixelBuffer(np.array([[[100, 100, 100, 255], [80, 80, 80, 255]]], dtype=np.uint8))
    line_art(buf, 1.0)  # threshold 90
    assert buf.pixels[0, :, 0].tolist() == [255, 0]


def test_edge_threshold_full_factor_is_binary(gradient_buf):
    edge_threshold(gradient_buf, 1.0)
    assert set(np.unique(gradient_buf.pixels[..., :3]).tolist()) <= {0, 255}


def test_color_blend_uses_next_pixel_and_skips_tail():
    row = np.array([[[100, 100, 100, 255], [200, 0, 200, 255]] + [[50, 50, 50, 255]] * 4], dtype=np.uint8)
    buf = PixelBuffer(row)
    color_blend(buf, 1.0)
    px = buf.pixels.astype(int)
    # 0.7 * 100 + 0.3 * 200 = 130; green neighbour is 0 so it keeps its own value
    assert px[0, 0, :3].tolist() == [130, 100, 130]
    assert px[0, 2:, :3].tolist() == [[50, 50, 50]] * 4


def test_constant_rng_helper_shape():
    assert ConstantRng().random((2, 3)).shape == (2, 3)
