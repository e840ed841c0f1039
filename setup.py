from setuptools import setup, find_packages

setup(
    name="zenmall",
    version="1.0.0",
    packages=find_packages(include=["zenmall", "zenmall.*"]),
    install_requires=[
        "django>=5.1",
        "djangorestframework",
        "drf-spectacular",
        "djangorestframework-simplejwt",
        "psycopg2-binary",
        "python-decouple",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-django",
        ],
    },
    python_requires=">=3.11",
)
