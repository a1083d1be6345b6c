from setuptools import setup, find_packages


setup(
    name="pointlod",
    version="0.1.0",
    description="Level-of-detail reordering and neighbor-vote reclassification for point clouds",
    packages=find_packages(include=["pointlod", "pointlod.*"]),
    python_requires=">=3.11",
    install_requires=[
        "numpy",
        "scipy",
        "torch",
        "omegaconf",
        "hydra-core",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "pointlod=pointlod.__main__:main",
        ],
    },
)
