from setuptools import setup, find_packages

setup(
    name="nantrace",
    version="0.1.0",
    description="NaN fault injection and provenance logging for floating-point error handling tests",
    author="adamfilli",
    packages=find_packages(include=["nantrace", "nantrace.*"]),
    install_requires=[
        "matplotlib",
        "pandas",
    ],
    extras_require={
        "test": ["pytest"],
    },
    include_package_data=True,
    python_requires=">=3.11",
)
