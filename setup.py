from setuptools import setup, find_packages

# Metadata, dependencies and the console script live in pyproject.toml so
# release bumps need only modify that file.  Package discovery stays here to
# keep the tests/ directory out of the wheel.
setup(
    packages=find_packages(include=["scpomatic", "scpomatic.*"]),
)
