from setuptools import setup, find_packages
from version import version


with open("README.rst") as f:
    long_description = f.read()

setup(
    name="SeqFP",
    version=version,
    description="Element-wise transforms of sequences, sequential or concurrent",
    long_description=long_description,
    keywords=['mapping', 'flatmap', 'parallel', 'concurrent', 'functional'],
    license="Mozilla Public License 2.0 (MPL 2.0)",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: Implementation :: CPython",
        "Operating System :: OS Independent",
        "License :: OSI Approved :: Mozilla Public License 2.0 (MPL 2.0)",
        "Development Status :: 3 - Alpha",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Intended Audience :: Developers"],
    packages=find_packages(include=["seqfp", "seqfp.*"]),
    python_requires=">=3.6",
    install_requires=[
        'tblib'],
    extras_require={
        'numpy support': [
            'numpy'],
        'tests': [
            'pytest', 'pytest-timeout', 'numpy', 'coverage']
    }
)
