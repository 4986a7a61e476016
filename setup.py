from setuptools import setup, find_packages

setup(
    name="ledmatrix",
    version="0.1.0",
    description="Driver for Framework 16 LED matrix input modules over USB serial",
    packages=find_packages(include=["ledmatrix", "ledmatrix.*"]),
    python_requires=">=3.11",
    install_requires=[
        "numpy>=1.23",
        "psutil>=5.9",
        "pyserial>=3.5",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": [
            "ledmatrix-meter=ledmatrix.main:main",
        ],
    },
)
