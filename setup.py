"""procrelay lives at the root of this repository.

procrelay
---------

Run external commands, relay their output line by line.

"""
from setuptools import setup

about = {}
with open("procrelay/__about__.py") as fp:
    exec(fp.read(), about)

with open("requirements/base.txt") as f:
    install_reqs = [line for line in f.read().split("\n") if line]

with open("requirements/test.txt") as f:
    tests_reqs = [line for line in f.read().split("\n") if line]

with open("README.md", encoding="utf-8") as f:
    readme = f.read()


setup(
    name=about["__title__"],
    version=about["__version__"],
    license=about["__license__"],
    author=about["__author__"],
    description=about["__description__"],
    long_description=readme,
    long_description_content_type="text/markdown",
    packages=["procrelay", "procrelay._internal"],
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=install_reqs,
    extras_require={
        "test": tests_reqs,
        "otel": [
            "opentelemetry-api",
        ],
    },
    zip_safe=False,
    keywords=about["__title__"],
    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX",
        "Operating System :: MacOS :: MacOS X",
        "Intended Audience :: Developers",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Utilities",
        "Topic :: System :: Shells",
    ],
)
