from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    readme = f.read()

setup(
    name="o5mlib",
    license="GPL v3",
    version="1.0.0",
    description="Streaming decoder for o5m/o5c OpenStreetMap data",
    long_description=readme,
    long_description_content_type="text/markdown",
    author="Mikołaj Kuranowski",
    keywords="osm o5m o5c openstreetmap",
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3 :: Only",
        "Topic :: Scientific/Engineering :: GIS",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    packages=find_packages(include=["o5mlib", "o5mlib.*"]),
    python_requires=">=3.8, <4",
    install_requires=["typing_extensions"],
    data_files=["README.md"],
)
