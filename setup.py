from setuptools import setup, find_packages


def readme():
    with open("README.md") as f:
        return f.read()


setup(name="repseqPy",
      version="0.1.0",
      description="Comparative analysis of immune repertoire sequencing (RepSeq) samples",
      long_description=readme(),
      long_description_content_type="text/markdown",
      python_requires=">=3.6",
      install_requires=['numpy', 'pandas>=0.25', 'matplotlib', 'matplotlib-venn', 'pyyaml', 'scipy'],
      extras_require={
          'test': ['pytest']
      },
      packages=find_packages(exclude=['tests', 'tests.*']),
      include_package_data=True,
      entry_points={
          'console_scripts': ['repseq=repseqPy.repseqQC:main'],
      },
      classifiers=[
            "Programming Language :: Python :: 3",
            "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
            "Operating System :: MacOS",
            "Operating System :: POSIX",
            "Operating System :: Unix",
            "Topic :: Scientific/Engineering :: Bio-Informatics",
            "Intended Audience :: Science/Research",
            "Environment :: Console"
      ]
)
