from setuptools import setup, find_packages

setup(
    name="uiauto-wda",
    version="1.0.0",
    packages=find_packages(include=["uiauto_wda", "uiauto_wda.*"]),
    install_requires=[
        "pyyaml>=5.4",
        "jsonschema>=4.0.0",
        "httpx>=0.24",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    python_requires=">=3.8",
    package_data={
        "uiauto_wda": ["schemas/*.json"],
    },
)
