from setuptools import setup

setup(
      name = "admcmc",
      version = "0.1",
      packages = ["admcmc"],
      description = "Adaptive Metropolis MCMC - posterior sampling of non-linear model parameters.",
      author = "Manuel Silva",
      author_email = "madusilva@gmail.com",
      license="GPLv2",
      classifiers=[
          "Intended Audience :: Developers",
          "Intended Audience :: Science/Research",
          "License :: OSI Approved :: GNU General Public License (GPL)",
          "Operating System :: OS Independent",
          "Programming Language :: Python :: 3",
          "Topic :: Scientific/Engineering"

      ],
      install_requires = ["numpy"],
      extras_require = {
          "test" : ["pytest"]
        },
      package_data = {
          '' : []
        },
      zip_safe=False
)
