from setuptools import setup, find_packages

setup(
    name='rigedit_sdk_python',
    version='0.1.0',
    description='BVH skeleton editing and rest-pose retargeting SDK',
    packages=find_packages(include=['rigedit_sdk_python', 'rigedit_sdk_python.*']),
    package_data={
        'rigedit_sdk_python': ['configs/*.json'],
    },
    python_requires='>=3.9',
    install_requires=[
        'numpy',
        'scipy>=1.14',
    ],
    extras_require={
        'test': ['pytest'],
    },
)
