# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="mhp-content-gen",
    version="0.1",
    packages=find_namespace_packages(include=["src", "src.*"]),
    install_requires=[
        'python-dotenv',
        'pymongo',
        'openai>=1.0',
        'pydantic>=2.0',
        'tiktoken',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'content-gen=src.content_gen.cli:main',
        ],
    },
)
