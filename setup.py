from setuptools import setup, find_packages

setup(
    name="trace-frames",
    version="0.1.0",
    description="Trace list and trace view data frames built from OpenSearch span indexes",
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    package_dir={"": "src"},
    packages=find_packages(where="src", include=["trace_frames*"]),
    install_requires=[
        "pydantic>=2.8.2",
        "pydantic-settings>=2.0.0",
        "python-dotenv",
        "opensearch-py[async]>=2.4.0",
        "elasticsearch[async]>=8.0.0,<9.0.0",
        "fastapi>=0.110.0",
        "uvicorn",
    ],
    extras_require={
        "test": [
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "trace-frames=trace_frames.server.main:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
    ],
    python_requires='>=3.11,<3.14',
)
