import threading

import numpy as np
import pytest

from newton_fractal import FractalParameters, NewtonRenderer, compute_basins, render


@pytest.fixture
def renderer():
    return NewtonRenderer(palette="Hue")


def test_sync_render_matches_kernel(renderer):
    params = FractalParameters(width=48, height=32, n=4, max_iter=30)
    image = renderer.render(params)
    np.testing.assert_array_equal(image, render(params, palette="Hue"))
    assert renderer.last_render_ms is not None
    assert renderer.last_render_ms >= 0.0


def test_async_render_delivers_result_once(renderer):
    params = FractalParameters(width=32, height=32, n=3, max_iter=20)
    renderer.compute_async(params)
    assert renderer.wait(timeout=60)

    image, result_params, elapsed_ms = renderer.get_result()
    assert result_params == params
    assert image.shape == (32, 32, 4)
    assert elapsed_ms is not None
    assert renderer.get_result() == (None, None, None)


def test_stale_requests_are_superseded(renderer):
    requests = [FractalParameters(width=64, height=64, n=n, max_iter=40) for n in (3, 4, 5)]
    for params in requests:
        renderer.compute_async(params)
    assert renderer.wait(timeout=60)

    image, result_params, _ = renderer.get_result()
    assert result_params == requests[-1]
    np.testing.assert_array_equal(image, render(requests[-1]))


def test_update_settings_changes_palette(renderer):
    assert not renderer.update_settings(palette="Hue")
    assert not renderer.update_settings()
    assert renderer.update_settings(palette="Grayscale")

    params = FractalParameters(width=16, height=16, n=3, max_iter=10)
    np.testing.assert_array_equal(renderer.render(params), render(params, palette="Grayscale"))


def test_palette_table_follows_parameters(renderer):
    small = FractalParameters(width=16, height=16, n=3, max_iter=10)
    large = FractalParameters(width=16, height=16, n=6, max_iter=90)
    renderer.render(small)
    np.testing.assert_array_equal(renderer.render(large), render(large))


def test_wait_returns_immediately_when_idle(renderer):
    assert renderer.wait(timeout=0)


def test_wait_times_out_while_rendering(renderer):
    # Pretend a render is in flight; nothing will ever finish it
    renderer.computing = True
    assert not renderer.wait(timeout=0.05)
    renderer.computing = False
    assert renderer.wait(timeout=0)


def test_concurrent_renders_match_serial():
    params = FractalParameters(width=128, height=128, n=5, max_iter=60)
    expected = render(params)
    expected_roots, expected_iterations = compute_basins(params)

    images = [None] * 4
    basins = [None] * 4

    def work(i):
        images[i] = render(params)
        basins[i] = compute_basins(params)

    threads = [threading.Thread(target=work, args=(i,)) for i in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=120)
        assert not thread.is_alive()

    for image in images:
        np.testing.assert_array_equal(image, expected)
    for roots, iterations in basins:
        np.testing.assert_array_equal(roots, expected_roots)
        np.testing.assert_array_equal(iterations, expected_iterations)


def test_renderer_and_direct_renders_can_overlap(renderer):
    params = FractalParameters(width=96, height=96, n=4, max_iter=40)
    renderer.compute_async(params)
    direct = render(params, palette="Hue")
    assert renderer.wait(timeout=60)

    image, _, _ = renderer.get_result()
    np.testing.assert_array_equal(image, direct)
