"""
Setup script for the Tintern client.

Allows development installation with `pip install -e .`
"""

from setuptools import setup, find_packages

setup(
    name="tintern-client",
    version="0.3.0",
    packages=find_packages(include=["tintern", "tintern.*", "frontend", "frontend.*"]),
    py_modules=["version"],
    python_requires=">=3.11",
    install_requires=[
        "httpx>=0.27",
        "tenacity>=8.2",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "python-dotenv>=1.0",
        "flask[async]>=3.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.24",
        ],
    },
)
