"""
PointCloud reader and writer for numpy .npz archives.

An archive holds a ``positions`` array of shape (N, 3) and one (N,) array
per attribute, keyed by dimension name.
"""

import os

import numpy as np

from ..cloud import PointCloud


class CloudReader:
    """
    Reader for a PointCloud stored in an .npz archive.

    Example:
        cloud = CloudReader("data/tile.npz").read()
    """

    def __init__(self, path: str):
        self._path = path

    def read(self) -> PointCloud:
        """
        Read the PointCloud.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the archive has no ``positions`` array.
        """
        if not os.path.exists(self._path):
            raise FileNotFoundError(f"Point cloud file not found: {self._path}")

        with np.load(self._path) as archive:
            if "positions" not in archive.files:
                raise ValueError(f"No 'positions' array in {self._path}")
            attributes = {name: archive[name] for name in archive.files if name != "positions"}
            return PointCloud.from_numpy(archive["positions"], attributes)


class CloudWriter:
    """
    Writer for a PointCloud to an .npz archive.

    Example:
        CloudWriter("output/tile_lod.npz").write(cloud)
    """

    def __init__(self, path: str, compressed: bool = True):
        self._path = path
        self._compressed = compressed

    def write(self, cloud: PointCloud) -> None:
        """
        Write the PointCloud.

        Raises:
            FileExistsError: If the target file already exists.
        """
        if os.path.exists(self._path):
            raise FileExistsError(f"File already exists: {self._path}")

        parent_dir = os.path.dirname(self._path)
        if parent_dir and not os.path.exists(parent_dir):
            os.makedirs(parent_dir, exist_ok=True)

        save = np.savez_compressed if self._compressed else np.savez
        # Pass an open file so numpy does not append a second .npz suffix
        with open(self._path, "wb") as f:
            save(f, **cloud.to_numpy())
