"""Information file for Hollowprop package."""

import re
from pathlib import Path

from setuptools import find_packages, setup

# Get package version
# open the version file
version_file = Path(__file__).parent / "hollowprop/_version.py"
with open(version_file, "r", encoding="utf-8") as f:
    version_info = f.read()
# search for the "__version__" pattern
version_find = re.search(r"__version__\s*=\s*['\"]([^'\"]+)['\"]", version_info)
# extract the version string
__version__ = version_find.group(1) if version_find else "0.0.0"

# Get full description from README.md
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

setup(
    name="hollowprop",
    version=__version__,
    description="Unidirectional pulse propagation in gas-filled hollow capillaries",
    keywords=[
        "simulation",
        "laser",
        "ultrafast",
        "nonlinear optics",
        "hollow capillary",
        "UPPE",
        "femtosecond",
        "plasma",
    ],
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["hollowprop", "hollowprop.*"]),
    include_package_data=True,
    classifiers=[
        "Development Status :: 4 - Beta",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Operating System :: OS Independent",
        "Intended Audience :: Science/Research",
        "Topic :: Scientific/Engineering :: Physics",
    ],
    entry_points={
        "console_scripts": [
            "hollowprop = hollowprop.__main__:main",
        ],
    },
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "scipy",
        "h5py",
        "numba",
    ],
    extras_require={
        "fftw": ["pyFFTW"],
        "test": ["pytest"],
    },
)
