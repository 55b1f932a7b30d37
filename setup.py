# -*- coding: utf-8 -*-

import runpy
from os import path

from setuptools import setup, find_packages

this_directory = path.abspath(path.dirname(__file__))
with open(path.join(this_directory, 'README.md'), encoding='utf-8') as f:
    long_description = f.read()


def get_version():
    return runpy.run_path(path.join(this_directory, "sshknownhosts", "__version__.py"))["version"]


def get_entry_points():
    entry_points = runpy.run_path(
        path.join(this_directory, "sshknownhosts", "__entrypoints__.py")
    )["entry_points"]
    return {
        f'sshknownhosts.{group}': names
        for group, names in entry_points.items()
    }


setup(
    name='ssh-knownhosts',
    version=get_version(),
    author='ssh-knownhosts developers',
    description=(
        'known_hosts lookups and host key verification for paramiko '
        'with support for @cert-authority lines'
    ),
    long_description=long_description,
    long_description_content_type='text/markdown',
    keywords="ssh known_hosts host key verification paramiko",
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires='>= 3.9',
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: System :: Networking",
        "Topic :: Security",
    ],
    package_data={
        'sshknownhosts': [
            'data/*.*',
        ]
    },
    entry_points={
        **{
            'console_scripts': [
                'ssh-knownhosts = sshknownhosts.cli:main',
            ]
        },
        **get_entry_points()
    },
    install_requires=[
        'argcomplete',
        'paramiko>=3.2,<4',
        'python-json-logger',
        'colored',
        'rich',
        'importlib_metadata; python_version < "3.10"',
        'importlib_resources; python_version < "3.10"',
    ],
    extras_require={
        'test': [
            'pytest',
            'cryptography',
        ]
    }
)
