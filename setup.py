#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Setup configuration for the Todo API package.
This file defines package metadata, dependencies, and installation instructions.
"""

from pathlib import Path
from setuptools import setup, find_packages

# Read the README file for long description
readme_path = Path(__file__).parent / "README.md"
long_description = ""
if readme_path.exists():
    with open(readme_path, "r", encoding="utf-8") as f:
        long_description = f.read()

# Read version from package
version_path = Path(__file__).parent / "todo_api" / "version.py"
version_info = {}
if version_path.exists():
    with open(version_path, "r", encoding="utf-8") as f:
        exec(f.read(), version_info)
    __version__ = version_info.get("__version__", "0.1.0")
else:
    __version__ = "0.1.0"

# Package dependencies
install_requires = [
    # Web framework
    "fastapi>=0.110.0",
    "uvicorn[standard]>=0.27.0",

    # Persistence
    "sqlalchemy>=2.0.0",

    # Data validation and configuration
    "pydantic>=2.5.0",
    "pydantic-settings>=2.1.0",
    "python-dotenv>=1.0.0",

    # Security
    "PyJWT>=2.8.0",
    "bcrypt>=4.0.0",
]

test_requires = [
    "pytest>=7.4.0",
    "pytest-cov>=4.1.0",
    "httpx>=0.25.0",
]

# Development dependencies
extras_require = {
    "test": test_requires,
    "dev": test_requires + [
        "black>=23.0.0",
        "flake8>=6.0.0",
        "mypy>=1.7.0",
        "isort>=5.12.0",
    ],
}

# Entry points for CLI
entry_points = {
    "console_scripts": [
        "todo-api = todo_api.main:run",
    ],
}

classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Framework :: FastAPI",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    "License :: OSI Approved :: MIT License",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3.9",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Operating System :: OS Independent",
]

setup(
    name="todo-api",
    version=__version__,
    author="Todo API Team",
    description="Task list backend with threaded comments and bearer-token authentication",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",

    # Package discovery
    packages=find_packages(
        include=["todo_api", "todo_api.*"],
        exclude=["tests", "tests.*"],
    ),

    # Dependencies
    install_requires=install_requires,
    extras_require=extras_require,
    python_requires=">=3.9",

    entry_points=entry_points,
    classifiers=classifiers,
    keywords=["todo", "tasks", "comments", "fastapi", "jwt"],
    zip_safe=False,
)
