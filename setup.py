"""
Packaging for chatrelay.
"""
from setuptools import setup, find_packages

setup(
    name="chatrelay",
    version="0.1.0",
    description="Streaming chat relay for OpenAI-compatible providers, with a terminal client",
    packages=find_packages(include=["chatrelay", "chatrelay.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn>=0.27",
        "pydantic>=2.5",
        "openai>=1.30",
        "httpx>=0.27",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "chatrelay=chatrelay.cli:main",
        ],
    },
)
