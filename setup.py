from setuptools import setup
about = {}
with open("sortfiles/__version__.py") as f:
    exec(f.read(), about)


setup(
    name="sortfiles",
    version=about["__version__"],
    description="Sort files into dated subfolders by their last-modified time.",
    packages=["sortfiles"],
    install_requires=[
        "colorama>=0.4.6",
        "tzdata",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "sortfiles=sortfiles.sortbydate:main",
        ]
    },
    include_package_data=True,
    python_requires=">=3.10",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
