from setuptools import setup, find_packages

setup(
    name='blocks_world_env',
    version='0.1.0',
    packages=find_packages(exclude=['tests', 'tests.*', 'scripts']),
    package_data={'blocks_world_env': ['configs/*.yaml', 'configs/tasks/*.yaml']},
    install_requires=[
        'gymnasium',
        'numpy',
        'pyyaml',
    ],
    extras_require={
        'viz': ['matplotlib'],
        'test': ['pytest'],
    },
)
