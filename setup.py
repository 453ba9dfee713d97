from setuptools import find_packages, setup

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

requirements = [
    "httpx>=0.25.0",
    "pydantic>=2.0.0",
    "click>=8.1.0",
    "PyYAML>=6.0",
    "tqdm>=4.66.0",
    "python-dotenv>=1.0.0",
]

setup(
    name="karaoke-setlist-collector",
    version="1.0.0",
    author="Karaoke Collector Team",
    description="Extracts song setlists from YouTube karaoke stream timestamps",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["setlist", "setlist.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "setlist=setlist.cli:cli",
        ],
    },
)
