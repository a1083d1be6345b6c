"""Tests for Box and PointCloud."""

import numpy as np
import pytest
import torch

from pointlod.cloud import Box, PointCloud


def make_cloud():
    positions = torch.tensor([
        [0.0, 0.0, 0.0],
        [1.0, 2.0, 3.0],
        [4.0, 1.0, -1.0],
    ], dtype=torch.float64)
    return PointCloud(positions, {"Classification": torch.tensor([1, 2, 3], dtype=torch.uint8)})


class TestBox:
    def test_min_greater_than_max_raises(self):
        with pytest.raises(ValueError):
            Box((1.0, 0.0), (0.0, 1.0))

    def test_of_points(self):
        box = Box.of_points(torch.tensor([[0.0, 5.0], [2.0, -1.0], [1.0, 1.0]]))
        assert box.mins == (0.0, -1.0)
        assert box.maxs == (2.0, 5.0)
        assert box.center == (1.0, 2.0)

    def test_of_points_empty_raises(self):
        with pytest.raises(ValueError):
            Box.of_points(torch.zeros((0, 2)))

    def test_contains_is_closed(self):
        box = Box((0.0, 0.0), (1.0, 1.0))
        assert box.contains(0.0, 0.0)
        assert box.contains(1.0, 1.0)
        assert not box.contains(1.0, 1.01)

    def test_split_is_x_major(self):
        boxes = Box((0.0, 0.0), (2.0, 2.0)).split(2)
        assert [(b.mins, b.maxs) for b in boxes] == [
            ((0.0, 0.0), (1.0, 1.0)),
            ((0.0, 1.0), (1.0, 2.0)),
            ((1.0, 0.0), (2.0, 1.0)),
            ((1.0, 1.0), (2.0, 2.0)),
        ]

    def test_child_index_edges(self):
        box = Box((0.0, 0.0), (2.0, 2.0))
        xy = torch.tensor([
            [0.0, 0.0],   # lower corner
            [1.0, 1.0],   # shared interior corner goes up on both axes
            [2.0, 2.0],   # upper corner stays in the last child
            [0.5, 1.5],
            [1.0, 0.2],
        ], dtype=torch.float64)
        assert box.child_index(xy).tolist() == [0, 3, 3, 1, 2]

    def test_child_index_matches_split(self):
        torch.manual_seed(0)
        box = Box((-3.0, 2.0), (5.0, 7.0))
        xy = torch.rand(200, 2, dtype=torch.float64) * torch.tensor([8.0, 5.0], dtype=torch.float64)
        xy += torch.tensor([-3.0, 2.0], dtype=torch.float64)
        children = box.split(2)
        for point, index in zip(xy, box.child_index(xy)):
            assert children[int(index)].contains(float(point[0]), float(point[1]))

    @pytest.mark.parametrize("n", [2, 3, 7])
    def test_child_index_on_inexact_edges(self, n):
        # Steps such as 0.6 / 3 are not exact in binary
        box = Box((0.1, 0.7), (0.7, 1.3))
        xs = box.edges(0, n)
        ys = box.edges(1, n)
        xy = torch.tensor([[x, y] for x in xs for y in ys], dtype=torch.float64)
        children = box.split(n)
        for point, index in zip(xy.tolist(), box.child_index(xy, n).tolist()):
            assert children[index].contains(*point)

    def test_edges_end_at_max(self):
        box = Box((0.1, 0.7), (0.7, 1.3))
        assert box.edges(0, 3)[0] == 0.1
        assert box.edges(0, 3)[-1] == 0.7
        assert box.split(3)[-1].maxs == (0.7, 1.3)

    def test_child_index_zero_extent(self):
        box = Box((0.0, 0.0), (0.0, 2.0))
        assert box.child_index(torch.tensor([[0.0, 1.5], [0.0, 0.1]])).tolist() == [1, 0]


class TestPointCloud:
    def test_bad_positions_shape(self):
        with pytest.raises(ValueError):
            PointCloud(torch.zeros(4, 2))

    def test_dimensions(self):
        cloud = make_cloud()
        assert len(cloud) == 3
        assert cloud.dimensions == ["X", "Y", "Z", "Classification"]

    def test_case_insensitive_lookup(self):
        cloud = make_cloud()
        assert cloud.find_dimension("classification") == "Classification"
        assert cloud.find_dimension("x") == "X"
        assert cloud.find_dimension("Intensity") is None
        assert cloud.get("CLASSIFICATION").tolist() == [1, 2, 3]

    def test_get_unknown_raises(self):
        with pytest.raises(ValueError):
            make_cloud().get("Intensity")

    def test_set_attribute(self):
        cloud = make_cloud()
        cloud.set("Classification", [0, 2], [7, 9])
        assert cloud.get("Classification").tolist() == [7, 2, 9]
        assert cloud.get("Classification").dtype == torch.uint8

    def test_set_position_updates_bounds(self):
        cloud = make_cloud()
        assert cloud.bounds().maxs[0] == 4.0
        cloud.set("X", [2], [10.0])
        assert cloud.positions[2, 0].item() == 10.0
        assert cloud.bounds().maxs[0] == 10.0
        assert cloud.bounds_2d().maxs == (10.0, 2.0)

    def test_add_dimension(self):
        cloud = make_cloud()
        cloud.add_dimension("Intensity", fill=5)
        assert cloud.get("Intensity").tolist() == [5.0, 5.0, 5.0]
        with pytest.raises(ValueError):
            cloud.add_dimension("intensity")
        with pytest.raises(ValueError):
            cloud.add_dimension("Z")
        with pytest.raises(ValueError):
            cloud.add_dimension("Other", torch.zeros(2))

    def test_select_is_a_copy(self):
        cloud = make_cloud()
        selected = cloud.select([2, 0])
        assert selected.get("Classification").tolist() == [3, 1]
        assert selected.positions[0].tolist() == [4.0, 1.0, -1.0]
        selected.set("Classification", [0], [0])
        assert cloud.get("Classification").tolist() == [1, 2, 3]

    def test_append(self):
        cloud = make_cloud()
        cloud.append(make_cloud())
        assert len(cloud) == 6
        assert cloud.get("Classification").tolist() == [1, 2, 3, 1, 2, 3]

    def test_append_mismatched_dimensions_raises(self):
        cloud = make_cloud()
        other = PointCloud(torch.zeros(1, 3))
        with pytest.raises(ValueError):
            cloud.append(other)

    def test_numpy_round_trip(self):
        cloud = make_cloud()
        arrays = cloud.to_numpy()
        assert set(arrays) == {"positions", "Classification"}
        positions = arrays.pop("positions")
        restored = PointCloud.from_numpy(positions, arrays)
        assert torch.equal(restored.positions, cloud.positions)
        assert np.array_equal(restored.get("Classification").numpy(), arrays["Classification"])

    def test_from_numpy_accepts_any_attribute_name(self):
        restored = PointCloud.from_numpy(np.zeros((2, 3)), {"cls": np.array([4, 5]), "positions2": np.ones(2)})
        assert restored.get("cls").tolist() == [4, 5]
        assert restored.has_dimension("positions2")
