from setuptools import setup, find_packages

setup(
    name="promptline",
    version="0.1.0",
    packages=find_packages(include=["promptline", "promptline.*"]),
    description="The os segment of a shell prompt: OS detection, configurable symbols and styled rendering.",
    author="Max Carlson",
    author_email="carlsonamax@gmail.com",
    python_requires=">=3.10",
    install_requires=[
        "rich>=13",
        "pydantic>=2",
        "distro>=1.8",
        "tomli>=1.1; python_version < '3.11'",
    ],
    extras_require={
        "test": [
            "pytest>=7",
            "pytest-mock>=3",
        ],
    },
    entry_points={
        "console_scripts": [
            "promptline=promptline.cli:main",
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
        "Environment :: Console",
    ],
)
