from setuptools import setup, find_packages

setup(
    name="account_reconcile",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pandas",
        "numpy",
        "openpyxl",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-dependency",
        ],
    },
    author="Price Hatfield",
    description="A tool for matching manually entered financial accounts to Plaid-connected accounts",
    python_requires=">=3.8",
)
