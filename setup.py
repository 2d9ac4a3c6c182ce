"""
SchemaGen - Multi-Target Schema Generator
Install: pip install -e .
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="schemagen",
    version="1.0.0",
    author="Diegoproggramer",
    author_email="",
    description="Generate JSON Schema, OpenAPI and ER diagrams from one entity model",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/Diegoproggramer/schemagen",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Code Generators",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0.0",
        "PyYAML>=6.0",
        "jsonschema>=4.18.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "openapi-spec-validator>=0.7.0",
            "black>=23.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "schemagen=schemagen.cli:main",
        ],
    },
    keywords="json-schema, openapi, erd, mermaid, plantuml, generator, code-generator",
    project_urls={
        "Bug Reports": "https://github.com/Diegoproggramer/schemagen/issues",
        "Source": "https://github.com/Diegoproggramer/schemagen",
    },
)
