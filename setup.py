from setuptools import setup, find_packages

setup(
    name="strategy-dashboard",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "requests>=2.31.0",
        "openpyxl>=3.1.0",
        "reportlab>=4.0.0",
        "click>=8.1.0",
        "pyyaml>=6.0",
        "pandas>=2.1.0",
    ],
    extras_require={
        "dashboard": [
            "streamlit>=1.30.0",
        ],
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "strategy-dashboard=strategy_dashboard.cli:cli",
        ],
    },
)
