from setuptools import setup, find_packages

setup(
    name="redraft",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests",
        "pyyaml",
        "openai>=1.0",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "redraft-server=redraft.server:main",
        ],
    },
    description="LLM code-edit backend for the nvim-redraft editor plugin.",
)
