from setuptools import find_packages, setup

with open("README.md", encoding="utf-8") as fh:
    long_description = fh.read()

requirements = [
    "rich>=13.0.0",
    "psutil>=5.9.0",
]

setup(
    name="vm-cleanup",
    version="0.1.0",
    author="vm-cleanup contributors",
    description="Reclaim disk space on Debian/Ubuntu virtual machines before compacting them",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["vmclean", "vmclean.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Console",
        "Intended Audience :: System Administrators",
        "Topic :: System :: Systems Administration",
        "Topic :: Utilities",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: POSIX :: Linux",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0.0"],
    },
    entry_points={
        "console_scripts": [
            "vm-cleanup=vmclean.cli:main",
        ],
    },
    include_package_data=True,
)
