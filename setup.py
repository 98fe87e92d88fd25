from setuptools import setup, find_packages

setup(
    name="change-review",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pyyaml",
        "textual",
        "watchdog>=3.0",
        "tqdm>=4.60",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "change-review=change_review.cli:main",
        ],
    },
    description="Review proposed source edits hunk by hunk, resolve conflicts, then write.",
)
