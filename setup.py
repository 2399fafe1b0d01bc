"""Bind command-line arguments and parameter files to the attributes
of a plain Python class. Friendly for users, straightforward for
developers.
"""

from setuptools import setup


__author__ = 'optbind contributors'
__version__ = '0.1.0'
__url__ = 'https://github.com/optbind/optbind'
__license__ = 'BSD'


setup(name='optbind',
      version=__version__,
      description="Declarative command-line and parameter file binding for Python classes.",
      long_description=__doc__,
      author=__author__,
      url=__url__,
      packages=['optbind', 'optbind.test'],
      include_package_data=True,
      zip_safe=False,
      license=__license__,
      platforms='any',
      install_requires=['boltons>=20.0.0'],
      extras_require={'test': ['pytest']},
      classifiers=[
          'Topic :: Utilities',
          'Intended Audience :: Developers',
          'Topic :: Software Development :: Libraries',
          'Programming Language :: Python :: 3.7',
          'Programming Language :: Python :: 3.8',
          'Programming Language :: Python :: 3.9',
          'Programming Language :: Python :: 3.10',
          'Programming Language :: Python :: 3.11',
          'Programming Language :: Python :: 3.12',
          'Programming Language :: Python :: 3 :: Only',
          'Programming Language :: Python :: Implementation :: CPython',
          'Programming Language :: Python :: Implementation :: PyPy', ]
      )
