"""
Setup configuration for the McLaren API package.
"""

from pathlib import Path

from setuptools import find_packages, setup

# Read README for long description
readme_file = Path(__file__).parent / "README.md"
long_description = ""
if readme_file.exists():
    long_description = readme_file.read_text(encoding="utf-8")

setup(
    name="mclaren-api",
    version="0.9.0",
    description="Versioned REST API for McLaren grand prixes, cars and drivers",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.100.0",
        "pydantic>=2.0.0",
        "sqlalchemy[asyncio]>=2.0.0",
        "aiosqlite>=0.19.0",  # Embedded database driver
        "asyncpg>=0.28.0",  # Managed cloud database driver
        "click>=8.0.0",
        "uvicorn>=0.23.0",
    ],
    extras_require={
        "mssql": ["aioodbc>=0.5.0"],
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "httpx>=0.24.0",  # Required by fastapi.testclient
        ],
    },
    entry_points={
        "console_scripts": [
            "mclaren-api=mclaren_api.cli.main:cli",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Framework :: FastAPI",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Database",
        "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    ],
    keywords="mclaren formula1 rest api versioning sqlalchemy",
    include_package_data=True,
)
