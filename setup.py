from setuptools import setup, find_packages

setup(
    name="reversi",
    version="0.1.0",
    packages=find_packages(include=["reversi", "reversi.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "filelock",  # Locking of session save files
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "reversi=reversi.interfaces.cli:main",
        ],
    },
)
