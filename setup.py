from setuptools import find_namespace_packages, setup

# Installation en mode développement :
#   pip install -e ".[test]"

install_requires = [
    "fastapi>=0.110",
    "uvicorn>=0.29",
    "pydantic>=2.5",
    "pymongo>=4.6",
    "PyJWT>=2.8",
]

setup(
    name='eunify-menu-settings',
    version='1.0',
    description="Registre des menus de navigation E-Unify (API et outils d'administration)",
    author='E-Unify',
    packages=find_namespace_packages(
        include=['backend', 'backend.*', 'eunify_admin', 'eunify_admin.*'],
        exclude=['backend.tests', 'backend.tests.*'],
    ),
    python_requires='>=3.10',
    install_requires=install_requires,
    extras_require={
        'test': [
            'pytest>=7.4',
            'httpx>=0.26',
            'mongomock>=4.1',
        ],
    },
    entry_points={
        'console_scripts': ['eunify-menu=eunify_admin:main'],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'Framework :: FastAPI',
    ],
)
