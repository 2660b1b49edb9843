from setuptools import setup, find_packages

setup(
    name="pharmacy_map_project",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "pandas",
        "numpy",
        "matplotlib",
        "seaborn",
        "geopandas",
        "shapely",
        "pyproj",
        "contextily",
        "scipy",
    ],
    extras_require={
        "dev": [
            "pytest",
        ],
    },
    author="Roberto Gonzalez",
    description="Mapping pharmacy density by electoral section in Mexico against census indicators",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
)
