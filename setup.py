"""
Setup script for the faculty roles dashboard.

Allows development installation with `pip install -e .`
"""

from setuptools import setup, find_namespace_packages

setup(
    name="faculty-roles-dashboard",
    version="1.0.0",
    packages=find_namespace_packages(include=["src", "src.*"]),
    py_modules=["version"],
    python_requires=">=3.11",
    install_requires=[
        "flask>=3.0",
        "python-dotenv>=1.0",
        "pydantic>=2.0",
        "pymongo>=4.6",
        "gspread>=6.0",
        "google-auth>=2.23",
        "google-api-python-client>=2.100",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-mock>=3.12",
        ],
    },
)
