"""Tests for .npz cloud IO and the command-line run function."""

import pytest
import torch
from omegaconf import OmegaConf

from pointlod.__main__ import do_run, make_run_config
from pointlod.cloud import PointCloud
from pointlod.io import CloudReader, CloudWriter
from pointlod.knn import NeighborClassifierConfig
from pointlod.quadtree import QuadtreeLODConfig, compute_quadtree_order, quadtree_permutation


def make_cloud(n=20, seed=0):
    generator = torch.Generator().manual_seed(seed)
    positions = torch.rand(n, 3, generator=generator, dtype=torch.float64)
    classes = torch.randint(1, 4, (n,), generator=generator).to(torch.uint8)
    return PointCloud(positions, {"Classification": classes})


class TestCloudIO:
    def test_write_then_read(self, tmp_path):
        path = str(tmp_path / "sub" / "cloud.npz")
        cloud = make_cloud()
        CloudWriter(path).write(cloud)
        restored = CloudReader(path).read()
        assert torch.equal(restored.positions, cloud.positions)
        assert torch.equal(restored.get("Classification"), cloud.get("Classification"))

    def test_attribute_named_like_a_parameter(self, tmp_path):
        path = str(tmp_path / "cloud.npz")
        cloud = make_cloud(n=4)
        cloud.add_dimension("cls", torch.arange(4))
        CloudWriter(path).write(cloud)
        restored = CloudReader(path).read()
        assert restored.get("cls").tolist() == [0, 1, 2, 3]

    def test_writer_refuses_overwrite(self, tmp_path):
        path = str(tmp_path / "cloud.npz")
        CloudWriter(path, compressed=False).write(make_cloud())
        with pytest.raises(FileExistsError):
            CloudWriter(path).write(make_cloud())

    def test_reader_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            CloudReader(str(tmp_path / "missing.npz")).read()


class TestRun:
    def test_make_run_config_fields(self):
        config_cls = make_run_config(QuadtreeLODConfig)
        cfg = OmegaConf.structured(config_cls)
        assert set(cfg.keys()) == {"input", "output", "filter"}
        assert cfg.filter.n == 2

    def test_run_quadtree(self, tmp_path):
        src = str(tmp_path / "in.npz")
        dst = str(tmp_path / "out.npz")
        cloud = make_cloud()
        CloudWriter(src).write(cloud)

        cfg = OmegaConf.structured(make_run_config(QuadtreeLODConfig))
        cfg.input.path = src
        cfg.output.path = dst
        do_run(cfg, "quadtree")

        result = CloudReader(dst).read()
        order = quadtree_permutation(compute_quadtree_order(cloud.xy))
        assert torch.equal(result.positions, cloud.positions[order])

    def test_run_neighborclassifier(self, tmp_path):
        src = str(tmp_path / "in.npz")
        dst = str(tmp_path / "out.npz")
        CloudWriter(src).write(make_cloud(n=50, seed=1))

        cfg = OmegaConf.structured(make_run_config(NeighborClassifierConfig))
        cfg.input.path = src
        cfg.output.path = dst
        cfg.filter.k = 5
        do_run(cfg, "neighborclassifier")

        result = CloudReader(dst).read()
        assert len(result) == 50
        assert result.get("Classification").dtype == torch.uint8
