"""Setup configuration for the airstats package."""

from setuptools import setup, find_packages

# Read the contents of README file
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="airstats",
    version="0.1.0",
    description="Read-only multilingual REST API for statistical datasets kept in a records table service",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["run_api"],
    install_requires=[
        "requests>=2.25.0",
        "pandas>=1.3.0",
        "fastapi>=0.100.0",
        "uvicorn>=0.20.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "httpx>=0.24.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "airstats-api=run_api:main",
        ],
    },
    python_requires=">=3.9",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Framework :: FastAPI",
        "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
        "Topic :: Scientific/Engineering :: Information Analysis",
    ],
    keywords="statistics api datasets translations fastapi",
)
