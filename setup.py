"""
PublicDashboard setup.py — Package configuration and CLI entry point.
"""

from setuptools import find_packages, setup

setup(
    name="publicdashboard",
    version="1.0.0",
    description="PublicDashboard — ordered dashboard administration console",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "publicdashboard=publicdashboard.cli:main",
        ],
    },
    install_requires=[
        "reflex>=0.6.0",
        "sqlalchemy>=2.0",
        "psycopg2-binary>=2.9",
        "pydantic>=2.5",
        "redis>=5.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
    },
)
