from setuptools import setup, find_packages

setup(
    name="pagebind",
    version="1.0.0",
    packages=find_packages(include=["pagebind", "pagebind.*"]),
    install_requires=[
        "pyyaml>=5.4",
        "jsonschema>=4.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.10",
    package_data={
        "pagebind": ["schemas/*.json"],
    },
    entry_points={
        "console_scripts": [
            "pagebind=pagebind.cli:main",
        ],
    },
)
