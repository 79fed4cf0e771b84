# setup.py
from setuptools import setup, find_packages

setup(
    name="trainingplanner",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "python-dateutil",
        "requests",
        "PySide6",
        "reportlab",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "trainingplanner=trainingplanner.main:run_wizard",
        ],
    },
)
