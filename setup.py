from setuptools import find_packages, setup

setup(
    name="taskmanager-backend",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["database", "bootloader"],
    python_requires=">=3.10",
    install_requires=[
        "SQLAlchemy>=2.0",
        "pydantic>=2.0",
        "python-dotenv>=1.0",
        "PyYAML>=6.0",
        "fastapi>=0.100",
        "uvicorn>=0.23",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "httpx>=0.24",
        ],
    },
    package_data={"shared": ["application.yaml"]},
    include_package_data=True,
    entry_points={"console_scripts": ["taskmanager=bootloader:main"]},
    description="Backend package for the task management & to-do application",
)
