#!/usr/bin/env python3
"""
Setup script for the Project Registration Portal

Install with:
    pip install -e .

Or with test tooling:
    pip install -e ".[dev]"
"""

from setuptools import setup
from pathlib import Path

# Read README
readme_path = Path(__file__).parent / "README.md"
long_description = ""
if readme_path.exists():
    long_description = readme_path.read_text(encoding="utf-8")

# API server dependencies
server_requirements = [
    "fastapi>=0.110.0",
    "uvicorn[standard]>=0.27.0",
    "sqlalchemy[asyncio]>=2.0.25",
    "aiosqlite>=0.19.0",
    "asyncpg>=0.29.0",
    "pydantic>=2.6.0",
    "pydantic-settings>=2.1.0",
    "email-validator>=2.1.0",
    "slowapi>=0.1.9",
]

# CLI client dependencies
client_requirements = [
    "httpx>=0.26.0",
    "rich>=13.7.0",
    "websockets>=12.0",
    "email-validator>=2.1.0",
]

setup(
    name="project-registration-portal",
    version="1.0.0",
    description="Project registration intake API with a live admin dashboard client",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    package_dir={"app": "backend/app", "client": "client"},
    packages=[
        "app",
        "app.api",
        "app.api.v1",
        "app.api.v1.endpoints",
        "app.core",
        "app.models",
        "app.schemas",
        "app.services",
        "app.utils",
        "client",
    ],
    python_requires=">=3.9",
    install_requires=sorted(set(server_requirements + client_requirements)),
    extras_require={
        "server": server_requirements,
        "client": client_requirements,
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.23.0",
            "faker>=22.0.0",
            "black>=24.1.0",
            "isort>=5.13.0",
            "mypy>=1.8.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "registration-portal=client.main:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Web Environment",
        "Framework :: FastAPI",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords="registration fastapi websocket admin-dashboard",
)
