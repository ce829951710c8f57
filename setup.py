# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="compile-modules",
    version="0.1.0",
    description="Compile trees of ES modules into AMD, CommonJS, YUI or globals, with a dependency graph",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["compile_modules*"]),
    python_requires=">=3.9",
    install_requires=[],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'compile-modules=compile_modules.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
