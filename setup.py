from setuptools import setup, find_packages

setup(
    name='jdkman',
    version='0.1.0',
    package_dir={'': 'src'},
    packages=find_packages('src'),
    python_requires='>=3.9',
    install_requires=[
        'requests',
        'urllib3',
        'platformdirs',
        'rich',
        'PyYAML',
    ],
    extras_require={
        'test': [
            'pytest<9.1',
            'pytest-mock',
        ],
    },
    entry_points={
        'console_scripts': [
            'jdkman=jdkman.cli:main',
        ],
    },
)
