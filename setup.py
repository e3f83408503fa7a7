import os
import setuptools
import subprocess

FALLBACK_VERSION = "0.1.0"


def read_readme():
    with open("README.md", "r", encoding="utf-8") as fh:
        readme = fh.read()
    return readme


def read_version():
    """Read a version string.

    This is not guaranteed to be a valid version string, but should work well enough.
    Tested with version strings as tag names of the following formats:

    1.0.0
    1.0.0-beta
    v1.0.0
    v1.0.0-beta

    Version strings need to comply with PEP 440. Git tags are used, but for development versions
    the build number is appended. To comply with PEP 440 everything after the first dash is removed
    before appending the build number.

    Outside of a git repository (or without any tag) `FALLBACK_VERSION` is used.
    """
    try:
        git_describe = subprocess.run(
            ["git", "describe", "--tags", "--abbrev=0"],
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except FileNotFoundError:
        return FALLBACK_VERSION

    if git_describe.returncode == 0:
        git_version = git_describe.stdout.strip().decode("utf-8")
    else:
        # no tag found (e.g., a source distribution or a shallow clone)
        return FALLBACK_VERSION

    # git_version contains the latest tag, if it is not identical with HEAD need to postfix
    head_is_tag = (
        subprocess.run(
            ["git", "describe", "--tags", "--exact-match", "HEAD"], stderr=subprocess.PIPE
        ).returncode
        == 0
    )
    if not head_is_tag:
        try:
            # set by Github actions, necessary for unique file names for PyPI
            build_nr = os.environ["BUILD_NUMBER"]
        except KeyError:
            build_nr = 0

        next_stable = git_version.split("-")[0]
        git_version = f"{next_stable}.dev{build_nr}"

    if git_version[0] == "v":
        git_version = git_version[1:]

    return git_version


setuptools.setup(
    name="sdsvoting",
    version=read_version(),
    description=(
        "Python implementations of social decision schemes, stochastic dominance "
        "and SD-efficiency of lotteries"
    ),
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    license="MIT License",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Intended Audience :: Science/Research",
    ],
    packages=["sdsvoting"],
    python_requires=">=3.8",
    setup_requires=[
        "wheel",
    ],
    install_requires=[
        "numpy>=1.20",
        "networkx>=2.2",
        "ortools>=9.0",
        "mip>=1.13.0,<2",
        "ruamel.yaml >= 0.16.13",
        "preflibtools>=2.0.9",
        "prefsampling>=0.1.14",
    ],
    extras_require={
        "dev": [
            "pytest>=6",
            "coverage[toml]>=5.3",
            "black==22.1.0",
        ],
        "gurobi": [
            "gurobipy",
        ],
    },
)
