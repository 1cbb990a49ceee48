from setuptools import setup

setup(
    name='grammargen',
    version='0.1.0',
    packages=['grammargen'],
    package_dir={'': 'src'},
    package_data={'grammargen': ['resources/.grammargenrc']},
    python_requires='>=3.10',
    install_requires=[
        'frozendict>=2.3',
        'returns>=0.19',
        'toml>=0.10',
    ],
    extras_require={
        'test': ['pytest>=7'],
    },
    entry_points={
        'console_scripts': ['grammargen=grammargen.cli:main'],
    },
    license='GNU GPLv3',
    author='Dominic Steinhoefel',
    author_email='dominic.steinhoefel@cispa.de',
    description='Random sentence generation from simple BNF grammars'
)
