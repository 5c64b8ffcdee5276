from setuptools import setup, find_packages

setup(
    name             = 'callbridge',
    version          = '1.0.0',
    description      = 'Call Log Bridge: call log, share text and app launch channels for a UI process',
    packages         = find_packages(exclude=['tests*']),
    install_requires = open('requirements.txt').read().splitlines(),
    extras_require   = {
        'test': ['pytest>=7', 'httpx>=0.24'],
    },
    entry_points     = {
        'console_scripts': [
            'callbridge = callbridge.cli:main',
        ],
    },
    python_requires  = '>=3.10',
    classifiers      = [
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
)
