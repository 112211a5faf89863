from setuptools import find_packages, setup

extras_require = {
    "test": ["pytest"],
}

extras_require["complete"] = sorted(set(sum(extras_require.values(), [])))

setup(
    name="histogrid",
    version="0.1.0",
    description="Multi-dimensional histograms over a flat storage",
    package_dir={"": "src"},
    packages=find_packages(where="src", include=["histogrid", "histogrid.*"]),
    python_requires=">=3.8",
    install_requires=["boost-histogram>=1.0", "dask>=2021.03.0", "numpy>=1.18"],
    extras_require=extras_require,
    entry_points={"dask.sizeof": ["histogrid = histogrid.sizeof:register"]},
)
