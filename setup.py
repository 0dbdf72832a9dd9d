"""Setup configuration for sonarbridge"""

from setuptools import setup, find_namespace_packages

setup(
    name="sonarbridge",
    version="0.1.0",
    description=(
        "Webhook bridge that forwards SonarQube quality gate results "
        "to a WeCom group robot."
    ),
    author="SonarBridge Contributors",
    author_email="",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src"),
    install_requires=[
        "requests>=2.28.0",
        "fastapi>=0.100.0",
        "uvicorn>=0.22.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "httpx>=0.24.0",
            "black>=22.0",
            "flake8>=4.0",
            "mypy>=0.950",
        ],
    },
    entry_points={
        "console_scripts": [
            "sonarbridge=sonarbridge.main:main",
        ],
    },
)
