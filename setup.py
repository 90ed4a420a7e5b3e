import pathlib
from setuptools import setup, find_packages

# The directory containing this file
HERE = pathlib.Path(__file__).parent

# The text of the README file
README = (HERE / "README.md").read_text(encoding="utf8")


setup(name='PyFARMIND',
      version='0.1.0',
      description='CONSUMAT farm decision engine coupled to an external farm optimization model.',
      long_description=README,
      long_description_content_type="text/markdown",
      license='--',
      packages=find_packages(include=["py_farmind", "py_farmind.*"]),
      install_requires = ["mesa>=3.0", "numpy", "pandas", "tqdm"],
      extras_require = {"test": ["pytest"]},
      classifiers=[
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "Intended Audience :: Science/Research",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.11",
        "Operating System :: MacOS :: MacOS X",
        "Operating System :: Microsoft :: Windows",
        "Operating System :: Unix",
        "Topic :: Education",
        "Topic :: Scientific/Engineering",
    ],
      zip_safe=False,
      include_package_data = True,
      python_requires='>=3.11')
