import os

from setuptools import find_packages, setup

VERSION = '0.1.0'


def parse_readme():
    try:
        with open(os.path.join(os.path.dirname(os.path.abspath(__file__)), 'README.md'), 'r') as fh:
            return fh.read()
    except OSError:
        return ''


# HSTLIB is a dependency for pysam.
# The cram file libraries fail for some OS versions and svshard does not use cram files so we disable these options
os.environ['HTSLIB_CONFIGURE_OPTIONS'] = '--disable-lzma --disable-bz2 --disable-libcurl'


TEST_REQS = [
    'coverage>=4.2',
    'pytest',
    'pytest-cov',
]


INSTALL_REQS = [
    'braceexpand>=0.1.2',
    'networkx>=2.0',
    'pysam>=0.15',
    'shortuuid>=0.5.0',
]

DEPLOY_REQS = ['twine', 'wheel']


setup(
    name='svshard',
    version='{}'.format(VERSION),
    packages=find_packages(exclude=['tests', 'tests.*']),
    description='Sharded, parallel structural variant breakpoint calling',
    long_description=parse_readme(),
    long_description_content_type='text/markdown',
    install_requires=INSTALL_REQS,
    extras_require={
        'test': TEST_REQS,
        'dev': ['black', 'flake8'] + TEST_REQS + DEPLOY_REQS,
        'deploy': DEPLOY_REQS,
    },
    tests_require=TEST_REQS,
    python_requires='>=3.6',
    test_suite='tests',
    entry_points={
        'console_scripts': [
            'svshard = svshard.main:main',
        ]
    },
)
