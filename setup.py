# setup.py
from setuptools import setup, find_packages

setup(
    name="content_scout",
    version="0.1.0",
    description="Потоковый сбор контента сайтов и каталогов в Markdown/JSON",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "lxml>=5.0",
        "lxml_html_clean>=0.1",
        "readability-lxml>=0.8.1",
        "html2text>=2024.2.26",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "click>=8.1",
        "Jinja2>=3.1",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "content-scout=content_scout.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
