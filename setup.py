import os
from importlib.util import module_from_spec, spec_from_file_location

from setuptools import find_packages, setup


module_name = "prefixmatch"


def load_version():
    spec = spec_from_file_location(
        "version", os.path.join(module_name, "version.py"),
    )
    try:
        module = module_from_spec(spec)
        spec.loader.exec_module(module)
    except FileNotFoundError:
        return "0.0.0"
    return "{}.{}.{}".format(*module.version_info)


def load_requirements(fname):
    """ load requirements from a pip requirements file """
    with open(fname) as f:
        line_iter = (line.strip() for line in f.readlines())
        return [line for line in line_iter if line and line[0] != "#"]


setup(
    name=module_name,
    version=load_version(),
    license="MIT",
    description="prefixmatch - longest prefix matching with concurrent "
                "batch lookups",
    long_description=open("README.rst").read(),
    platforms="all",
    classifiers=[
        "Intended Audience :: Developers",
        "Operating System :: MacOS",
        "Operating System :: POSIX",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: Implementation :: CPython",
        "Topic :: Text Processing",
    ],
    python_requires=">=3.8",
    packages=find_packages(exclude=["tests*"]),
    package_data={
        "prefixmatch": ["py.typed"],
        "prefixmatch_log": ["py.typed"],
    },
    install_requires=load_requirements("requirements.txt"),
    extras_require={
        "develop": load_requirements("requirements.dev.txt"),
        "rich": ["rich"],
    },
    entry_points={
        "console_scripts": ["prefixmatch = prefixmatch.__main__:main"],
    },
)
