import numpy as np
import pytest

from music_insight.errors import EmptyImageError
from music_insight.palette import Point, extract_palette, k_means, pixel_arrays, points_from_pixels


BLACK = (0, 0, 0)
WHITE = (255, 255, 255)


def checkerboard():
    # 2x2 board: black, white / white, black
    return bytes(BLACK + WHITE + WHITE + BLACK)


class TestPointsFromPixels:
    def test_positions_follow_width(self):
        points = points_from_pixels(checkerboard(), 2)
        assert [(p.x, p.y) for p in points] == [(0, 0), (1, 0), (0, 1), (1, 1)]
        assert [p.color for p in points] == [BLACK, WHITE, WHITE, BLACK]

    def test_wide_images_keep_full_precision(self):
        points = points_from_pixels(bytes(300 * 3), 300)
        assert points[299].x == 299
        assert points[299].y == 0

    def test_width_must_be_positive(self):
        with pytest.raises(ValueError):
            points_from_pixels(checkerboard(), 0)


class TestKMeans:
    def test_checkerboard_clusters_partition_points(self):
        points = points_from_pixels(checkerboard(), 2)
        clusters = k_means(points, k=3, max_iterations=10, rng=np.random.default_rng(7))

        assert len(clusters) == 3
        assigned = sorted((p.x, p.y) for c in clusters for p in c.points)
        assert assigned == sorted((p.x, p.y) for p in points)

    def test_centroid_is_truncated_mean_position(self):
        points = [Point(0, 0, BLACK), Point(3, 0, BLACK), Point(0, 3, WHITE), Point(3, 3, WHITE)]
        (cluster,) = k_means(points, k=1, max_iterations=1, rng=np.random.default_rng(0))
        assert (cluster.centroid.x, cluster.centroid.y) == (1, 1)
        assert len(cluster.points) == 4

    def test_centroid_color_is_a_sampled_pixel_not_an_average(self):
        points = points_from_pixels(checkerboard(), 2)
        clusters = k_means(points, k=2, max_iterations=5, rng=np.random.default_rng(3))
        for cluster in clusters:
            assert cluster.centroid.color in (BLACK, WHITE)

    def test_ties_go_to_first_centroid_and_empty_cluster_stays(self):
        points = [Point(5, 5, BLACK), Point(5, 5, BLACK)]
        first, second = k_means(points, k=2, max_iterations=3, rng=np.random.default_rng(0))
        assert len(first.points) == 2
        assert second.points == []
        assert (second.centroid.x, second.centroid.y) == (5, 5)

    def test_no_aliasing_past_255(self):
        points = points_from_pixels(bytes(600 * 3), 600)
        (cluster,) = k_means(points, k=1, max_iterations=2, rng=np.random.default_rng(0))
        assert cluster.centroid.x == 299
        assert cluster.centroid.y == 0

    def test_zero_iterations_leaves_seeds(self):
        points = points_from_pixels(checkerboard(), 2)
        clusters = k_means(points, k=2, max_iterations=0, rng=np.random.default_rng(1))
        assert all(c.points == [] for c in clusters)
        assert all(Point(c.centroid.x, c.centroid.y, c.centroid.color) in points for c in clusters)

    def test_empty_input(self):
        with pytest.raises(EmptyImageError):
            k_means([], k=3)

    def test_k_must_be_positive(self):
        with pytest.raises(ValueError):
            k_means(points_from_pixels(checkerboard(), 2), k=0)


class TestExtractPalette:
    def test_always_k_colors(self):
        assert len(extract_palette(checkerboard(), 2, k=5)) == 5

    def test_single_pixel_repeats(self):
        assert extract_palette(bytes((10, 20, 30)), 1, k=3) == [(10, 20, 30)] * 3

    def test_colors_come_from_image(self):
        palette = extract_palette(checkerboard(), 2, k=4, rng=np.random.default_rng(11))
        assert set(palette) <= {BLACK, WHITE}

    def test_seeded_runs_are_repeatable(self):
        pixels = bytes(range(0, 240)) * 3
        first = extract_palette(pixels, 12, rng=np.random.default_rng(42))
        second = extract_palette(pixels, 12, rng=np.random.default_rng(42))
        assert first == second

    def test_empty_image(self):
        with pytest.raises(EmptyImageError):
            extract_palette(b"", 4)


class TestPixelArrays:
    def test_positions_and_colors(self):
        positions, colors = pixel_arrays(checkerboard(), 2)
        assert positions.tolist() == [[0, 0], [1, 0], [0, 1], [1, 1]]
        assert [tuple(c) for c in colors.tolist()] == [BLACK, WHITE, WHITE, BLACK]

    def test_trailing_partial_pixel_is_ignored(self):
        positions, colors = pixel_arrays(checkerboard() + b"\x01", 2)
        assert len(positions) == len(colors) == 4

    def test_palette_agrees_with_point_clustering(self):
        pixels = bytes(range(0, 240)) * 3
        clusters = k_means(points_from_pixels(pixels, 12), k=4, max_iterations=3, rng=np.random.default_rng(9))
        palette = extract_palette(pixels, 12, k=4, max_iterations=3, rng=np.random.default_rng(9))
        assert palette == [c.centroid.color for c in clusters]
