"""Tests for the filter registry, builders and pipeline."""

import numpy as np
import pytest
import torch
from omegaconf import OmegaConf

from pointlod.cloud import PointCloud
from pointlod.combinations import (
    FILTERS,
    PipelineFilter,
    build_neighborclassifier_filter,
    build_quadtree_filter,
    build_revertmorton_filter,
)
from pointlod.io import CloudWriter
from pointlod.knn import KnnVoterConfig, NeighborClassifierConfig, NeighborClassifierFilter
from pointlod.morton import RevertMortonConfig
from pointlod.quadtree import QuadtreeLODConfig, QuadtreeLODFilter, compute_quadtree_order, quadtree_permutation


def make_cloud():
    positions = torch.zeros(5, 3, dtype=torch.float64)
    positions[:, 0] = torch.arange(5, dtype=torch.float64)
    positions[:, 1] = torch.tensor([0.0, 3.0, 1.0, 4.0, 2.0], dtype=torch.float64)
    return PointCloud(positions, {"Classification": torch.tensor([1, 2, 1, 2, 2], dtype=torch.uint8)})


class TestRegistry:
    def test_builtin_filters_registered(self):
        assert {"quadtree", "revertmorton", "neighborclassifier"} <= set(FILTERS)

    def test_entries_carry_config_classes(self):
        assert FILTERS["quadtree"].config_class is QuadtreeLODConfig
        assert FILTERS["revertmorton"].config_class is RevertMortonConfig
        assert FILTERS["neighborclassifier"].config_class is NeighborClassifierConfig
        assert all(entry.description for entry in FILTERS.values())


class TestBuilders:
    def test_build_from_dataclass(self):
        assert isinstance(build_quadtree_filter(QuadtreeLODConfig(n=3)), QuadtreeLODFilter)
        assert build_revertmorton_filter(RevertMortonConfig(ndim=3)).config.ndim == 3

    def test_build_from_dictconfig(self):
        cfg = OmegaConf.structured(NeighborClassifierConfig(k=4, domain=["Classification[2:2]"]))
        stage = build_neighborclassifier_filter(cfg)
        assert isinstance(stage, NeighborClassifierFilter)
        assert stage.voter.config.k == 4
        assert list(stage.voter.config.domain) == ["Classification[2:2]"]
        assert stage.candidate is None

    def test_build_with_invalid_k(self):
        with pytest.raises(ValueError):
            build_neighborclassifier_filter(KnnVoterConfig(k=-1))

    def test_build_reads_candidate(self, tmp_path):
        path = str(tmp_path / "candidate.npz")
        CloudWriter(path).write(make_cloud())
        stage = build_neighborclassifier_filter(NeighborClassifierConfig(k=1, candidate=path))
        assert len(stage.candidate) == 5

    def test_build_missing_candidate(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            build_neighborclassifier_filter(NeighborClassifierConfig(k=1, candidate=str(tmp_path / "nope.npz")))


class TestPipelineFilter:
    def test_empty_pipeline_raises(self):
        with pytest.raises(ValueError):
            PipelineFilter([])

    def test_classify_then_reorder(self):
        cloud = make_cloud()
        pipeline = PipelineFilter([
            NeighborClassifierFilter(KnnVoterConfig(k=3)),
            QuadtreeLODFilter(),
        ])
        result = pipeline.process(cloud)

        # Classification happened in place on the input
        classes = cloud.get("Classification").clone()
        order = quadtree_permutation(compute_quadtree_order(cloud.xy))
        assert len(result) == 5
        assert torch.equal(result.get("Classification"), classes[order])
        assert torch.equal(result.positions, cloud.positions[order])

    def test_bad_config_fails_before_processing(self):
        cloud = make_cloud()
        before = cloud.get("Classification").clone()
        pipeline = PipelineFilter([
            NeighborClassifierFilter(KnnVoterConfig(k=3, dimension="Label")),
            QuadtreeLODFilter(),
        ])
        with pytest.raises(ValueError):
            pipeline.process(cloud)
        assert np.array_equal(cloud.get("Classification").numpy(), before.numpy())

    def test_bad_later_stage_fails_before_processing(self):
        positions = torch.zeros(5, 3, dtype=torch.float64)
        positions[:, 0] = torch.arange(5, dtype=torch.float64)
        cloud = PointCloud(positions, {"Classification": torch.tensor([1, 2, 1, 2, 2], dtype=torch.uint8)})
        before = cloud.get("Classification").clone()
        first_only = NeighborClassifierFilter(KnnVoterConfig(k=3)).process(cloud.clone())
        assert first_only.get("Classification").tolist() == [1, 1, 2, 2, 2]

        pipeline = PipelineFilter([
            NeighborClassifierFilter(KnnVoterConfig(k=3)),
            NeighborClassifierFilter(KnnVoterConfig(k=3, dimension="Label")),
        ])
        with pytest.raises(ValueError, match="Label"):
            pipeline.process(cloud)
        # The first stage alone would turn this into [1, 1, 2, 2, 2]
        assert np.array_equal(cloud.get("Classification").numpy(), before.numpy())
