from setuptools import find_packages, setup


extras_require = {}

extras_require["test"] = [
    'pytest>=7.4,<9.0',
    'pytest-asyncio>=0.23,<1.0',
]

extras_require["all"] = [
    *extras_require["test"],
]


setup(
    name='orgdesk',
    version='0.3.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    license='MIT',
    description='Organization-scoped people, team, license and asset records with a stale-while-revalidate cache',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    install_requires=[
        'boto3>=1.28.55',
        'python-dotenv>=1.0.0,<2.0',
        'python-dateutil>=2.8.2,<3.0',
    ],
    extras_require=extras_require,
    python_requires=">=3.10"
)
