"""
Command-line interface for pointlod.

This module runs one registered filter over a point cloud archive.

Usage:
    python -m pointlod <filter_name> [options]

Example:
    python -m pointlod neighborclassifier \
        input.path=data/tile.npz \
        output.path=out/tile_clean.npz \
        filter.k=8 \
        'filter.domain=["Classification[1:1]"]'

    python -m pointlod quadtree \
        input.path=out/tile_clean.npz \
        output.path=out/tile_lod.npz

Hydra options:
    --help              Show configuration schema
    --cfg job           Show resolved configuration
    --info config       Show config search path
"""

import logging
import sys
import time
from dataclasses import field, make_dataclass
from typing import List, Type

import hydra
from hydra.core.config_store import ConfigStore
from hydra.core.global_hydra import GlobalHydra
from omegaconf import DictConfig

from .combinations import FILTERS
from .io import (
    CloudReaderConfig,
    CloudWriterConfig,
    build_cloud_reader,
    build_cloud_writer,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Dynamic Config Generation
# =============================================================================

def make_run_config(filter_config_cls: Type) -> Type:
    """Dynamically create a run config dataclass for a given filter."""
    return make_dataclass(
        f"Run{filter_config_cls.__name__}",
        [
            ("input", CloudReaderConfig, field(default_factory=CloudReaderConfig)),
            ("output", CloudWriterConfig, field(default_factory=CloudWriterConfig)),
            ("filter", filter_config_cls, field(default_factory=filter_config_cls)),
        ],
    )


# =============================================================================
# Run Function
# =============================================================================

def do_run(cfg: DictConfig, filter_name: str) -> None:
    """Execute one filter with resolved config."""
    filter_entry = FILTERS[filter_name]

    # Build everything from config before reading any point
    cloud_reader = build_cloud_reader(cfg.input)
    cloud_writer = build_cloud_writer(cfg.output)
    stage = filter_entry.factory(cfg.filter)

    logger.info(f"Running {filter_name}...")
    logger.info(f"  Input: {cfg.input.path}")
    logger.info(f"  Output: {cfg.output.path}")

    cloud = cloud_reader.read()
    logger.info(f"Read {len(cloud)} points with dimensions {cloud.dimensions}")

    start = time.perf_counter()
    stage.prepare(cloud)
    result = stage.run(cloud)
    logger.info(f"{filter_name} finished in {time.perf_counter() - start:.3f}s, {len(result)} points out")

    cloud_writer.write(result)
    logger.info("Done!")


def run_filter(filter_name: str, hydra_args: List[str]) -> None:
    """Run a filter with Hydra configuration."""
    filter_entry = FILTERS[filter_name]
    config_cls = make_run_config(filter_entry.config_class)

    # Clear and register config
    GlobalHydra.instance().clear()
    cs = ConfigStore.instance()
    cs.store(name="config", node=config_cls)

    @hydra.main(version_base=None, config_path=None, config_name="config")
    def _main(cfg: DictConfig) -> None:
        do_run(cfg, filter_name)

    sys.argv = [sys.argv[0]] + hydra_args
    _main()


# =============================================================================
# Main Entry Point
# =============================================================================

def main() -> None:
    """Main entry point for the CLI."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if len(sys.argv) < 2 or sys.argv[1] in ("--help", "-h", "help"):
        print("Usage: python -m pointlod <filter> [options]")
        for name, entry in FILTERS.items():
            print(f"  {name}: {entry.description}")
        print("Use --help after filter name for configuration options.")
        sys.exit(0 if len(sys.argv) >= 2 else 1)

    filter_name = sys.argv[1]
    if filter_name not in FILTERS:
        sys.exit(f"Error: Unknown filter '{filter_name}'. Available: {list(FILTERS.keys())}")

    # Remaining args go to Hydra (--help, --cfg, overrides, etc.)
    run_filter(filter_name, sys.argv[2:])


if __name__ == "__main__":
    main()
