from setuptools import setup, find_packages

setup(
    name="uplinkwatch",
    version="0.1.0",
    description="Internet connectivity watchdog with startup-cause detection and notifications",
    author="Andre Molnar",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pyee",
        "structlog",
        "pydantic>=2",
        "python-dotenv",
        "aiohttp",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    entry_points={
        "console_scripts": [
            "uplinkwatch=uplinkwatch.main:run",
        ],
    },
    python_requires=">=3.10",
)
