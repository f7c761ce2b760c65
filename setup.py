from setuptools import setup, find_packages


setup(
    name="chacharng",
    version="0.1",
    packages=find_packages(include=["chacharng", "chacharng.*"]),
    description="Deterministic ChaCha keystream generator with bit-exact RFC 7539 block function.",
    author="vercingetorx",
    install_requires=[
        "pycryptodomex>=3.23.0",
        "argon2-cffi>=23.1.0",
    ],
    entry_points={
        "console_scripts": [
            "chacharng=chacharng.cli:main",
        ]
    },
)
