# setup.py
from setuptools import setup, find_packages

setup(
    name="site_harvest",
    version="0.1.0",
    description="Polite async single-site crawler with content and brand theme extraction",
    packages=find_packages(include=["site_harvest", "site_harvest.*"]),
    package_data={"site_harvest.report": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "lxml>=4.9",
        "pydantic>=2.0",
        "PyYAML>=6.0",
        "click>=8.1",
        "Jinja2>=3.1",
    ],
    extras_require={
        "test": ["pytest>=7.4", "pytest-asyncio>=0.23"],
    },
    entry_points={
        "console_scripts": ["site-harvest=site_harvest.cli:cli"],
    },
    python_requires=">=3.11",
)
