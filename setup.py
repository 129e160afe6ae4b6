# setup.py
from setuptools import setup, find_packages

setup(
    name="shotcrawl",
    version="0.1.0",
    description="Depth-limited crawler that captures rendered screenshots and PDFs",
    packages=find_packages(exclude=("tests", "tests.*")),
    install_requires=[
        "click>=8.1",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "beautifulsoup4>=4.12",
        "playwright>=1.40",
        "Pillow>=10.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
            "aiohttp>=3.9",
        ],
    },
    entry_points={
        "console_scripts": [
            "shotcrawl=shotcrawl.cli:main",
        ],
    },
    python_requires=">=3.11",
)
