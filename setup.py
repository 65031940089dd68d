from setuptools import setup, find_packages

setup(
    name="smart-ec-logger",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "paho-mqtt>=2.0",
        "pymodbus>=3.6,<3.9",
        "pyserial>=3.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "coverage>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "smart-ec-logger=smart_logger.cli:main",
        ],
    },
)
