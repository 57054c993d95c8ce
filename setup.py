from setuptools import find_packages, setup

setup(
    name="hookwire",
    version="0.1.0",
    description="Priority-ordered filter and action hooks with reentrant dispatch",
    packages=find_packages(include=["hookwire", "hookwire.*"]),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
)
