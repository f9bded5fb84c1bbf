from setuptools import setup, find_packages

setup(
    name="patchbox",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests",
        "pyyaml",
        # HTTP binding
        "fastapi>=0.100",
        "pydantic>=2.0",
        "uvicorn>=0.20",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "patchbox=patchbox.cli:main",
        ],
    },
    description="Sandboxed patch engine for code-editing agents.",
)
