from setuptools import setup, find_packages
import re

# Read version from sehicalc/__init__.py
with open('sehicalc/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='sehi-calc',
    version=version,
    packages=find_packages(include=['sehicalc', 'sehicalc.*']),
    package_data={
        'sehicalc': ['coverage-rules/*.yaml'],
    },
    install_requires=[
        'PyYAML>=6.0',
        'click>=8.0',
        'pydantic>=2.0.0',
        'rich>=13.0',
    ],
    extras_require={
        'mcp': [
            'mcp[cli]>=1.0.0,<2',
        ],
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'sehi-calc=sehicalc.cli.__main__:main',
            'sehi-calc-mcp=sehicalc.mcp.server:run_server',
        ],
    },
    author='Personal',
    description='S-Corp health insurance strategy comparison: SEHI deduction vs. ACA subsidy.',
    python_requires='>=3.10',
)
