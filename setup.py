from setuptools import find_packages, setup

setup(
    name="http-signature-zcap-invoke",
    version="0.1.0",
    description="Sign HTTP requests that invoke authorization capabilities (zCaps)",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        "cryptography >= 42.0.0",
        "http-message-signatures >= 0.5.0",
        "http-sfv >= 0.9.9",
        "httpx >= 0.27.0",
    ],
    extras_require={
        "test": [
            "pytest >= 8.0.0",
            "pytest-asyncio >= 0.23.0",
        ],
    },
)
