from setuptools import setup, find_packages

# Common dependencies
common_dependencies = [
    "python-dotenv",
    "toml",
    "regex",
]

setup(
    name="chunkwise",
    version="0.1.0",
    packages=find_packages(include=["chunkwise", "chunkwise.*"]),
    include_package_data=True,
    install_requires=common_dependencies,
    extras_require={
        "dev": [
            "coverage",
            "pytest",
            "pytest-asyncio",
            "pytest-cov",
            "pytest-mock",
        ],
    },
    python_requires=">=3.9",
    author="Your Name",
    author_email="your.email@example.com",
    description="Read whole structured elements out of data that arrives in arbitrary fragments",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    url="https://github.com/your-username/chunkwise",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
    ],
    package_data={
        "chunkwise": ["py.typed"],
    },
)
