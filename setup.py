from setuptools import setup, find_packages

setup(
    name="seam_xmlrpc",
    version="0.1.0",
    description="Seam XML-RPC - XML-RPC codec, protocol engine and dispatch with pluggable transports",
    author="Oppie.xyz Team",
    packages=find_packages(include=["seam_xmlrpc", "seam_xmlrpc.*"]),
    install_requires=[
        "pyzmq>=24.0.0",
        "requests>=2.28.0",
        "opentelemetry-api>=1.14.0",
        "opentelemetry-sdk>=1.14.0",
        "opentelemetry-exporter-otlp>=1.14.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-benchmark",
            "pytest-cov",
            "black",
            "isort",
            "pylint",
        ],
    },
    python_requires=">=3.9",
)
