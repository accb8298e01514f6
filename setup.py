# setup.py
from setuptools import setup, find_packages

setup(
    name="dep_scout",
    version="0.1.0",
    description="Asynchronous npm dependency-confusion scanner DepScout",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "aiohttp>=3.10",
        "pydantic>=2.0",
        "PyYAML>=6.0",
        "click>=8.0",
        "beautifulsoup4>=4.12",
        "dnspython>=2.4",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "dep_scout=dep_scout.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
