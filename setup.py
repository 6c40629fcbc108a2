"""Install the user accounts package."""

from setuptools import setup, find_packages

setup(
    name='user-accounts',
    version='0.1.0',
    packages=find_packages(exclude=['*test*']),
    py_modules=['wsgi'],
    install_requires=[
        "flask>=2.3",
        "flask-sqlalchemy>=3",
        "sqlalchemy>=1.4",
        "werkzeug",
        "wtforms",
        "bcrypt",
        "retry",
        "pytz",
        "python-json-logger>=3.1"
    ],
    extras_require={
        'test': [
            "pytest",
            "pytest-mock",
            "hypothesis",
            "mimesis>=5"
        ]
    },
    zip_safe=False
)
