from setuptools import setup, find_packages
setup(
    name="cold_storage_dashboard",
    version="0.0.1",
    package_dir={"": "src"},
    packages=find_packages("src"),
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=[
        "fastapi",
        "pydantic",
        "flask",
    ],
    extras_require={
        "test": ["pytest", "httpx"],
    },
    entry_points={
        'console_scripts': [
            'cold_storage_dashboard=cold_storage_dashboard.__main__:_safe_main'
        ]
    }
)
