"""Install the mock SIMS package."""

from setuptools import setup, find_packages

setup(
    name='mock-sims',
    version='1.0.0',
    packages=find_packages(include=['sims', 'sims.*']),
    package_data={'sims': ['templates/sims/*.html']},
    entry_points={
        'console_scripts': ['sims-db=sims.seed:cli'],
    },
    install_requires=[
        "flask>=2.2,<4",
        "flask-sqlalchemy>=3.0,<4",
        "sqlalchemy>=1.4,<3",
        "werkzeug>=2.2,<4",
        "authlib>=1.2,<2",
        "wtforms>=3.0,<4",
        "bcrypt>=4.0,<6",
        "python-json-logger>=2.0,<4",
        "click>=8.0,<9",
        "pytz>=2022.1"
    ],
    extras_require={
        'test': ['pytest>=7,<10'],
    },
    zip_safe=False
)
