"""
Setup configuration for generation-core component.
"""

from setuptools import setup, find_packages

setup(
    name='generation-core',
    version='1.0.0',
    description='Result caching and retry orchestration for design system generation',
    author='Design System Generator Team',
    packages=find_packages(include=['generation_core', 'generation_core.*']),
    python_requires='>=3.11',
    install_requires=[
        'boto3>=1.28.0',
        'botocore>=1.31.0',
        'requests>=2.31.0',
    ],
    extras_require={
        'dev': [
            'pytest>=7.4.0',
            'pytest-asyncio>=0.21.0',
            'pytest-cov>=4.1.0',
            'pylint>=2.17.0',
            'flake8>=6.0.0',
            'black>=23.0.0',
            'mypy>=1.4.0',
        ]
    }
)
